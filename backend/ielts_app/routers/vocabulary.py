from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..gemini_client import GeminiClient, get_gemini_client
from ..generation import generate_structured, require_keys


router = APIRouter(prefix="/api/vocabulary", tags=["vocabulary"])


class VocabularyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: Optional[str] = None
    task_type: Optional[str] = Field(default=None, alias="taskType")


def _build_vocabulary_prompt(topic: str, task_type: str) -> str:
    return f"""
You are an IELTS teacher. List topic vocabulary a band 7+ candidate would use for IELTS {task_type} on the topic "{topic}".
- "vocabulary": 10-15 collocations or phrases tied to the topic (e.g. "carbon footprint", "renewable energy")
- "structures": 6-10 useful idiomatic phrases or structures for the same topic
Each item has the English phrase, its Vietnamese meaning and an example sentence about the topic.

Return ONLY a JSON object:
{{
  "vocabulary": [{{"english": string, "vietnamese": string, "example": string}}],
  "structures": [{{"english": string, "vietnamese": string, "example": string}}]
}}
""".strip()


@router.post("")
async def topic_vocabulary(req: VocabularyRequest, client: GeminiClient = Depends(get_gemini_client)):
    topic = (req.topic or "").strip()
    task_type = (req.task_type or "").strip()
    if not topic or not task_type:
        raise HTTPException(status_code=400, detail="Missing required fields: topic and taskType")
    return await generate_structured(
        client,
        _build_vocabulary_prompt(topic, task_type),
        require_keys("vocabulary", "structures"),
        temperature=0.7,
    )
