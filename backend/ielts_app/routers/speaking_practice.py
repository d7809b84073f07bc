"""
Workplace speaking practice.

Generates a speech or two-person conversation for a work scenario together with
vocabulary, idioms, grammar notes and sentence patterns, stores every result as
a speaking practice session and lets the UI list and delete past sessions.

Endpoints:
- GET    /api/speaking-practice: stored sessions, newest first
- POST   /api/speaking-practice: generate and store a practice set
- POST   /api/speaking-practice/analyze: analyse a learner-supplied speech
- POST   /api/speaking-practice/generate-name: suggest a session name
- DELETE /api/speaking-practice: delete a stored session
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Literal, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..gemini_client import GeminiClient, get_gemini_client, get_optional_gemini_client
from ..generation import generate_structured, require_keys
from ..highlight import segments_for_items
from ..store import SessionStore, get_store


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/speaking-practice", tags=["speaking-practice"])

PRACTICE_KEYS = ("speech", "vocabulary", "idioms", "grammar", "sentencePatterns")
ANALYZED_TOPIC = "Analyzed Speech"

_MATERIALS_SCHEMA = """
{
  "speech": string,
  "vocabulary": [{"english": string, "vietnamese": string, "explanation": string}],
  "idioms": [{"english": string, "vietnamese": string, "usage": string}],
  "grammar": [{"structure": string, "explanation": string (Vietnamese), "examples": [string]}],
  "sentencePatterns": [{"pattern": string, "explanation": string (Vietnamese), "examples": [string]}]
}
""".strip()


class PracticeRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	topic: Optional[str] = None
	conversation_name: Optional[str] = Field(default=None, alias="conversationName")
	format: Literal["speech", "conversation"] = "speech"


class AnalyzeRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	speech: Optional[str] = None
	conversation_name: Optional[str] = Field(default=None, alias="conversationName")


class NameRequest(BaseModel):
	topic: Optional[str] = None


class DeleteRequest(BaseModel):
	id: Optional[int] = None


# ============================================================================
# PROMPTS
# ============================================================================

def _build_practice_prompt(topic: str, fmt: str) -> str:
	"""Prompt for a full practice set on ``topic``.

	Args:
		topic: Work scenario the learner wants to practise
		fmt: "speech" for a monologue, "conversation" for a Person A / Person B dialogue
	"""
	if fmt == "conversation":
		shape = (
			"a natural two-person dialogue of 6-10 exchanges with 'Person A:' and 'Person B:' labels, "
			"including agreements, interruptions and follow-up questions"
		)
	else:
		shape = "a single-person speech as a software engineer would say it in a meeting"
	return (
		"You are an English communication coach for software engineers working with native speakers.\n"
		f'Scenario: "{topic}"\n\n'
		f"Write {shape}, 200-300 words, in natural conversational English with contractions and "
		'discourse markers ("Well...", "Actually...", "I mean...").\n'
		"Then list 8-12 vocabulary items, 5-8 idioms, 4-6 grammar structures used in the text and "
		"5-7 sentence patterns native speakers use at work. Meanings and explanations are in Vietnamese.\n\n"
		f"Return ONLY a JSON object:\n{_MATERIALS_SCHEMA}"
	)


def _build_analyze_prompt(speech: str) -> str:
	return (
		"You are an English communication coach. Analyse the learner's speech below and extract the "
		"useful vocabulary, idioms, grammar structures and sentence patterns it contains. "
		'Keep "speech" exactly as provided.\n\n'
		f"Return ONLY a JSON object:\n{_MATERIALS_SCHEMA}\n\n"
		f"Speech:\n{speech}"
	)


def _build_name_prompt(topic: str) -> str:
	return (
		f'Generate a concise, professional name (3-8 words, title case) for a speaking practice session about: "{topic}".\n'
		'Examples: "Sprint Planning Team Discussion", "API Architecture Explanation Session".\n'
		"Return ONLY the name."
	)


def fallback_name(topic: str, today: Optional[date] = None) -> str:
	today = today or date.today()
	return f"{topic} - {today.month}/{today.day}/{today.year}"


def _with_segments(result: Dict[str, Any]) -> Dict[str, Any]:
	return {**result, "segments": segments_for_items(str(result.get("speech", "")), result.get("vocabulary"), result.get("idioms"))}


# ============================================================================
# API ENDPOINTS
# ============================================================================

@router.get("")
async def list_sessions(store: SessionStore = Depends(get_store)):
	return store.list_speaking_sessions()


@router.post("")
async def create_practice(
	req: PracticeRequest,
	store: SessionStore = Depends(get_store),
	client: GeminiClient = Depends(get_gemini_client),
):
	topic = (req.topic or "").strip()
	name = (req.conversation_name or "").strip()
	if not topic:
		raise HTTPException(status_code=400, detail="Topic is required")
	if not name:
		raise HTTPException(status_code=400, detail="Conversation name is required")
	result = await generate_structured(
		client,
		_build_practice_prompt(topic, req.format),
		require_keys(*PRACTICE_KEYS),
		temperature=0.8,
	)
	store.add_speaking_session(name, topic, result)
	return _with_segments(result)


@router.post("/analyze")
async def analyze(
	req: AnalyzeRequest,
	store: SessionStore = Depends(get_store),
	client: GeminiClient = Depends(get_gemini_client),
):
	speech = (req.speech or "").strip()
	name = (req.conversation_name or "").strip()
	if not speech:
		raise HTTPException(status_code=400, detail="Speech text is required")
	if not name:
		raise HTTPException(status_code=400, detail="Conversation name is required")
	result = await generate_structured(client, _build_analyze_prompt(speech), require_keys(*PRACTICE_KEYS))
	store.add_speaking_session(name, ANALYZED_TOPIC, result)
	return _with_segments(result)


@router.post("/generate-name")
async def generate_name(req: NameRequest, client: Optional[GeminiClient] = Depends(get_optional_gemini_client)):
	topic = (req.topic or "").strip()
	if not topic:
		raise HTTPException(status_code=400, detail="Topic is required")
	if client is None:
		return {"name": fallback_name(topic)}
	try:
		text = await client.generate(_build_name_prompt(topic), temperature=0.7)
	except (httpx.HTTPError, RuntimeError) as exc:
		logger.warning("Name generation failed, using fallback: %s", exc)
		return {"name": fallback_name(topic)}
	name = text.strip().strip("\"'").strip()
	return {"name": name or fallback_name(topic)}


@router.delete("")
async def delete_session(req: DeleteRequest, store: SessionStore = Depends(get_store)):
	if not req.id:
		raise HTTPException(status_code=400, detail="ID required")
	if not store.delete_speaking_session(req.id):
		raise HTTPException(status_code=404, detail="Session not found")
	return {"success": True}
