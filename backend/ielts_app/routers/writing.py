from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from ..gemini_client import GeminiClient, get_gemini_client
from ..generation import gather_or_cancel, generate_structured, require_keys
from ..highlight import segments_for_items


router = APIRouter(tags=["writing"])


class WritingRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	input: Optional[str] = None
	image_base64: Optional[str] = Field(default=None, alias="imageBase64")
	task_type: Optional[str] = Field(default=None, alias="taskType")
	bands: List[str] = []


class WritingFixRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	question: Optional[str] = None
	question_image_base64: Optional[str] = Field(default=None, alias="questionImageBase64")
	answer: Optional[str] = None


def _build_response_prompt(task: str, task_type: str, band: str, has_image: bool) -> str:
	source = "The task prompt is shown in the attached image; the learner's notes follow." if has_image else "Task prompt:"
	return (
		f"You are an IELTS writing examiner. Write a model IELTS Writing {task_type} response at band {band}, "
		f"with vocabulary and grammar typical of band {band}.\n\n"
		f"{source}\n{task}\n\n"
		"Return ONLY a JSON object:\n"
		'{"response": string, "vocabulary": [{"english": string, "vietnamese": string}], '
		'"structures": [{"english": string, "vietnamese": string}]}'
	)


def _build_fix_prompt(question: str, answer: str, has_image: bool) -> str:
	question_line = "Question: see the attached image." if has_image else f"Question: {question}"
	return (
		"You are an IELTS writing examiner. Score the student's answer and list every grammar, spelling, "
		"typo and punctuation error in order of appearance, with a correction that keeps the meaning.\n\n"
		f"{question_line}\n\nStudent's answer:\n{answer}\n\n"
		"Return ONLY a JSON object:\n"
		'{"score": number (0-9), "scoreExplanation": string, '
		'"errors": [{"location": string, "originalText": string, "errorType": "grammar" | "typo" | "spelling", '
		'"explanation": string, "correctedText": string}], '
		'"correctedAnswer": string}'
	)


async def _response_for_band(client: GeminiClient, req: WritingRequest, task: str, task_type: str, band: str) -> Dict[str, Any]:
	data = await generate_structured(
		client,
		_build_response_prompt(task, task_type, band, bool(req.image_base64)),
		require_keys("response", "vocabulary", "structures"),
		image_base64=req.image_base64,
		temperature=0.7,
	)
	return {
		"band": band,
		**data,
		"segments": segments_for_items(str(data["response"]), data.get("vocabulary"), data.get("structures")),
	}


@router.post("/api/writing")
async def model_responses(req: WritingRequest, client: GeminiClient = Depends(get_gemini_client)):
	task = (req.input or "").strip()
	task_type = (req.task_type or "").strip()
	bands = [b.strip() for b in req.bands if b and b.strip()]
	if not task or not task_type or not bands:
		raise HTTPException(status_code=400, detail="Missing required fields")
	results = await gather_or_cancel(_response_for_band(client, req, task, task_type, band) for band in bands)
	return {"results": results}


def _validate_fix(data: Dict[str, Any]) -> Dict[str, Any]:
	data = require_keys("score", "correctedAnswer")(data)
	if not isinstance(data.get("errors"), list):
		data["errors"] = []
	return data


@router.post("/api/writing-fix")
async def writing_fix(req: WritingFixRequest, client: GeminiClient = Depends(get_gemini_client)):
	question = (req.question or "").strip()
	answer = (req.answer or "").strip()
	if not question and not req.question_image_base64:
		raise HTTPException(status_code=400, detail="Missing required field: question (text or image)")
	if not answer:
		raise HTTPException(status_code=400, detail="Missing required field: answer")
	return await generate_structured(
		client,
		_build_fix_prompt(question, answer, bool(req.question_image_base64)),
		_validate_fix,
		image_base64=req.question_image_base64,
		temperature=0.3,
	)
