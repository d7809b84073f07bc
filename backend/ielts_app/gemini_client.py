from __future__ import annotations
import logging
import re
import httpx
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import HTTPException

from .settings import settings

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def inline_image_part(image_base64: str, default_mime: str = "image/png") -> Dict[str, Any]:
	"""Build a Gemini ``inlineData`` part from raw base64 or a browser data URL."""
	value = image_base64.strip()
	match = _DATA_URL_RE.match(value)
	if match:
		return {"inlineData": {"mimeType": match.group("mime"), "data": match.group("data")}}
	return {"inlineData": {"mimeType": default_mime, "data": value}}


class GeminiClient:
	def __init__(self, api_key: Optional[str] = None, *, base_url: Optional[str] = None, model: Optional[str] = None) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(settings.openrouter_api_key)
		self._openrouter_api_key = settings.openrouter_api_key
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds)

	async def generate(
		self,
		prompt: str,
		*,
		response_mime_type: Optional[str] = None,
		temperature: Optional[float] = None,
	) -> str:
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		return await self._post_payload(
			_with_generation_config(payload, response_mime_type, temperature),
			fallback_prompt=prompt,
		)

	async def generate_multimodal(
		self,
		parts: List[Dict[str, Any]],
		*,
		role: str = "user",
		response_mime_type: Optional[str] = None,
		temperature: Optional[float] = None,
	) -> str:
		payload: Dict[str, Any] = {"contents": [{"role": role, "parts": parts}]}
		# OpenRouter fallback is text-only, so images never fall back
		return await self._post_payload(
			_with_generation_config(payload, response_mime_type, temperature),
			fallback_prompt=None,
			allow_fallback=False,
		)

	async def _post_payload(
		self,
		payload: Dict[str, Any],
		*,
		fallback_prompt: Optional[str],
		allow_fallback: bool = True,
	) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		last_error: Optional[Exception] = None
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPError as err:
			last_error = err
		if last_error is None:
			try:
				data = r.json()
				return data["candidates"][0]["content"]["parts"][0]["text"]
			except (ValueError, KeyError, IndexError, TypeError):
				last_error = RuntimeError(f"Unexpected Gemini response: {r.text[:500]}")
		logger.warning("Gemini call to %s failed: %s", self.model, last_error)
		if not allow_fallback or not self._fallback_enabled or fallback_prompt is None:
			raise last_error
		return await self._fallback_generate(fallback_prompt, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_generate(self, prompt: str, primary_error: Optional[Exception]) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise primary_error or RuntimeError("Fallback requested but OpenRouter is not configured")
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": [{"role": "user", "content": prompt}],
		}
		logger.info("Falling back to OpenRouter model %s", self._openrouter_model)
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			data = r.json()
			return data["choices"][0]["message"]["content"]
		except Exception as fallback_err:
			if primary_error is not None:
				raise RuntimeError(
					f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed"
				) from fallback_err
			raise fallback_err


def _with_generation_config(
	payload: Dict[str, Any],
	response_mime_type: Optional[str],
	temperature: Optional[float],
) -> Dict[str, Any]:
	config: Dict[str, Any] = {}
	if response_mime_type:
		config["responseMimeType"] = response_mime_type
	if temperature is not None:
		config["temperature"] = temperature
	if not config:
		return payload
	return {**payload, "generationConfig": config}


async def get_gemini_client() -> AsyncIterator[GeminiClient]:
	try:
		client = GeminiClient()
	except ValueError:
		raise HTTPException(status_code=500, detail="Gemini API key not configured")
	try:
		yield client
	finally:
		await client.aclose()


async def get_optional_gemini_client() -> AsyncIterator[Optional[GeminiClient]]:
	"""Like ``get_gemini_client`` but yields None when no key is configured."""
	try:
		client = GeminiClient()
	except ValueError:
		yield None
		return
	try:
		yield client
	finally:
		await client.aclose()
