from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel

from ..highlight import segments_for_items


router = APIRouter(prefix="/api/highlight", tags=["highlight"])


class HighlightRequest(BaseModel):
    text: str
    # Vocabulary-style items; only their "english" field is matched
    phrases: List[Dict[str, Any]] = []


@router.post("")
async def highlight(req: HighlightRequest):
    return {"segments": segments_for_items(req.text, req.phrases)}
