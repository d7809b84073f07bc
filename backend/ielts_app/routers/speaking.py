from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..gemini_client import GeminiClient, get_gemini_client
from ..generation import gather_or_cancel, generate_structured, require_keys
from ..highlight import segments_for_items


router = APIRouter(prefix="/api/speaking", tags=["speaking"])


class SpeakingRequest(BaseModel):
    question: Optional[str] = None
    part: Optional[str] = None
    bands: List[str] = []


def _build_answer_prompt(question: str, part: str, band: str) -> str:
    return f"""
You are an IELTS speaking examiner. Write a sample answer to this IELTS Speaking Part {part} question
as a band {band} candidate would speak it: natural, with vocabulary and grammar typical of band {band}.

Question: {question}

Return ONLY a JSON object:
{{
  "answer": string,
  "vocabulary": [{{"english": string, "vietnamese": string}}],
  "structures": [{{"english": string, "vietnamese": string}}]
}}
""".strip()


async def _answer_for_band(client: GeminiClient, question: str, part: str, band: str) -> Dict[str, Any]:
    data = await generate_structured(
        client,
        _build_answer_prompt(question, part, band),
        require_keys("answer", "vocabulary", "structures"),
        temperature=0.7,
    )
    return {
        "band": band,
        **data,
        "segments": segments_for_items(str(data["answer"]), data.get("vocabulary"), data.get("structures")),
    }


@router.post("")
async def sample_answers(req: SpeakingRequest, client: GeminiClient = Depends(get_gemini_client)):
    question = (req.question or "").strip()
    part = (req.part or "").strip()
    bands = [b.strip() for b in req.bands if b and b.strip()]
    if not question or not part or not bands:
        raise HTTPException(status_code=400, detail="Missing required fields")
    results = await gather_or_cancel(_answer_for_band(client, question, part, band) for band in bands)
    return {"results": results}
