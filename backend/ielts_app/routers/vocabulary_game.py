from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..judge import InvalidAnswer, judge


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocabulary-game", tags=["vocabulary-game"])


class CheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_answer: Optional[str] = Field(default=None, alias="userAnswer")
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    question: Optional[str] = None


class CheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_correct: bool = Field(alias="isCorrect")
    similarity: float
    user_answer: str = Field(alias="userAnswer")
    correct_answer: str = Field(alias="correctAnswer")


@router.post("/check", response_model=CheckResponse)
async def check(req: CheckRequest):
    if not req.user_answer or not req.correct_answer:
        raise HTTPException(status_code=400, detail="Missing required fields: userAnswer and correctAnswer")
    try:
        verdict = judge(req.user_answer, req.correct_answer)
    except InvalidAnswer as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logger.debug(
        "Judged %r against %r (question=%r): correct=%s similarity=%.2f",
        verdict.normalized_user,
        verdict.normalized_correct,
        req.question,
        verdict.is_correct,
        verdict.similarity,
    )
    return CheckResponse(
        is_correct=verdict.is_correct,
        similarity=verdict.similarity,
        user_answer=verdict.normalized_user,
        correct_answer=verdict.normalized_correct,
    )
