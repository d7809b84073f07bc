from __future__ import annotations
import json
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from ..gemini_client import GeminiClient, get_optional_gemini_client
from ..generation import generate_structured, require_keys
from ..store import SessionStore, get_store


router = APIRouter(prefix="/api/lessons", tags=["lessons"])


class LessonRequest(BaseModel):
	id: Optional[int] = None
	name: Optional[str] = None
	content: Optional[str] = None


class GameRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	lesson_id: Optional[int] = Field(default=None, alias="lessonId")
	content: Optional[str] = None


def _require_name_and_content(req: LessonRequest) -> tuple[str, str]:
	name = (req.name or "").strip()
	content = (req.content or "").strip()
	if not name or not content:
		raise HTTPException(status_code=400, detail="Name and content are required")
	return name, content


def _cards_from_word_list(content: str) -> Optional[List[Dict[str, str]]]:
	# Lessons saved from the vocabulary learner hold a JSON list of {word, meaning}
	try:
		parsed = json.loads(content)
	except ValueError:
		return None
	if not isinstance(parsed, list) or not parsed:
		return None
	first = parsed[0]
	if not isinstance(first, dict) or not first.get("word") or not first.get("meaning"):
		return None
	return [
		{"word": str(item.get("word", "")), "meaning": str(item.get("meaning", ""))}
		for item in parsed
		if isinstance(item, dict)
	]


def _build_game_prompt(content: str) -> str:
	return (
		"You are an IELTS teacher. From the lesson content below, pick 8 key vocabulary words or phrases "
		"that are most useful for IELTS and give a short Vietnamese meaning for each, for a matching game.\n\n"
		'Return ONLY a JSON object: {"cards": [{"word": string, "meaning": string}, ...]}\n\n'
		f"Lesson content:\n{content}"
	)


@router.get("")
async def list_lessons(store: SessionStore = Depends(get_store)):
	return store.list_lessons()


@router.post("")
async def create_lesson(req: LessonRequest, store: SessionStore = Depends(get_store)):
	name, content = _require_name_and_content(req)
	row = store.add_lesson(name, content)
	return {"id": row["id"], "name": row["name"], "content": row["content"]}


@router.put("")
async def replace_lesson(req: LessonRequest, store: SessionStore = Depends(get_store)):
	if req.id is None:
		raise HTTPException(status_code=400, detail="Lesson id is required")
	name, content = _require_name_and_content(req)
	row = store.replace_lesson(req.id, name, content)
	return {"id": row["id"], "name": row["name"], "content": row["content"]}


@router.post("/game")
async def lesson_game(req: GameRequest, client: Optional[GeminiClient] = Depends(get_optional_gemini_client)):
	content = (req.content or "").strip()
	if not content:
		raise HTTPException(status_code=400, detail="Lesson content is required")
	cards = _cards_from_word_list(content)
	if cards is not None:
		return {"cards": cards}
	if client is None:
		raise HTTPException(status_code=500, detail="Gemini API key not configured")
	data = await generate_structured(client, _build_game_prompt(content), require_keys("cards"))
	return {"cards": data["cards"]}
