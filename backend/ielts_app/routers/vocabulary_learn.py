from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..gemini_client import GeminiClient, get_gemini_client
from ..generation import GenerationError, generate_structured
from ..store import SessionStore, get_store


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocabulary-learn", tags=["vocabulary-learn"])


class LearnRequest(BaseModel):
    words: Optional[str] = None


class DeleteRequest(BaseModel):
    id: Optional[int] = None


def split_words(words: str) -> List[str]:
    return [w.strip() for w in words.split(",") if w.strip()]


def _build_learn_prompt(word_list: List[str]) -> str:
    return f"""
You are an expert English teacher. For each word below give a detailed breakdown in English and Vietnamese.
Words: {", ".join(word_list)}

For every word:
- identify the base verb form ("contribution" -> "contribute", "investigation" -> "investigate")
- list verb phrases: the basic verb pattern ("contribute to something") plus common collocations ("make a contribution to")
- give a few synonyms

Return ONLY a JSON object:
{{
  "results": [
    {{
      "word": string,
      "word_type": string,
      "pronunciation": string,
      "meaning": string (Vietnamese),
      "related_verb": {{"verb": string, "pronunciation": string, "meaning": string}},
      "verb_phrases": [{{"phrase": string, "meaning": string}}],
      "synonyms": [string]
    }}
  ]
}}
""".strip()


def _validate_results(data: Dict[str, Any]) -> Dict[str, Any]:
    results = data.get("results")
    if not isinstance(results, list):
        raise GenerationError("Invalid response format: results must be a list")
    return data


@router.get("")
async def history(store: SessionStore = Depends(get_store)):
    return store.list_vocabulary_sessions()


@router.post("")
async def learn(
    req: LearnRequest,
    store: SessionStore = Depends(get_store),
    client: GeminiClient = Depends(get_gemini_client),
):
    word_list = split_words(req.words or "")
    if not word_list:
        raise HTTPException(status_code=400, detail="Words are required")
    data = await generate_structured(client, _build_learn_prompt(word_list), _validate_results)
    results = data["results"]
    store.add_vocabulary_session(req.words, results)
    logger.info("Stored vocabulary session for %d word(s)", len(word_list))
    return results


@router.delete("")
async def delete(req: DeleteRequest, store: SessionStore = Depends(get_store)):
    if not req.id:
        raise HTTPException(status_code=400, detail="ID required")
    if not store.delete_vocabulary_session(req.id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}
