"""
Structured generation helper shared by every feature route.

A route builds a prompt, names the JSON keys it needs, and calls
``generate_structured``. The helper sends the prompt with a JSON response hint,
parses the reply (directly, then by scanning for the outermost ``{...}`` span),
runs the validator and raises ``GenerationError`` for anything that goes wrong.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import httpx

from .gemini_client import GeminiClient, inline_image_part

logger = logging.getLogger(__name__)

Validator = Callable[[Dict[str, Any]], Dict[str, Any]]

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class GenerationError(RuntimeError):
    pass


def extract_json(text: str) -> Dict[str, Any]:
    """Parse a JSON object out of model output.

    Tries the whole text first, then the first ``{`` through the last ``}``,
    which covers replies wrapped in markdown fences or chatty preambles.
    """
    if not text or not text.strip():
        raise GenerationError("Empty response from the generation service")
    try:
        data = json.loads(text.strip())
    except ValueError:
        match = _JSON_OBJECT_RE.search(text)
        if not match:
            raise GenerationError("Failed to parse JSON from the generation service")
        try:
            data = json.loads(match.group(0))
        except ValueError as exc:
            raise GenerationError("Failed to parse JSON from the generation service") from exc
    if not isinstance(data, dict):
        raise GenerationError("Generation service returned JSON that is not an object")
    return data


def require_keys(*keys: str) -> Validator:
    """Validator rejecting objects where any of ``keys`` is missing, null or a blank string.

    Empty lists and objects pass.
    """

    def _validate(data: Dict[str, Any]) -> Dict[str, Any]:
        missing = [key for key in keys if data.get(key) in (None, "")]
        if missing:
            raise GenerationError(f"Invalid response format: missing {', '.join(missing)}")
        return data

    return _validate


async def generate_structured(
    client: GeminiClient,
    prompt: str,
    validate: Optional[Validator] = None,
    *,
    image_base64: Optional[str] = None,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    try:
        if image_base64:
            raw = await client.generate_multimodal(
                [{"text": prompt}, inline_image_part(image_base64)],
                response_mime_type="application/json",
                temperature=temperature,
            )
        else:
            raw = await client.generate(prompt, response_mime_type="application/json", temperature=temperature)
    except (httpx.HTTPError, RuntimeError) as exc:
        logger.error("Generation request failed: %s", exc)
        raise GenerationError(f"Generation service unavailable: {exc}") from exc

    data = extract_json(raw)
    if validate is not None:
        data = validate(data)
    return data


async def gather_or_cancel(aws: Iterable[Awaitable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Run generations concurrently; the first failure cancels the rest and is re-raised."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        # Let cancelled siblings unwind before the shared client is closed
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
