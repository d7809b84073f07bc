import asyncio
import json

import pytest

from ielts_app.generation import GenerationError, extract_json, gather_or_cancel, generate_structured, require_keys

from fakes import FakeGeminiClient, http_error


def test_extract_json_parses_plain_object():
    assert extract_json('{"cards": [{"word": "a", "meaning": "b"}]}') == {"cards": [{"word": "a", "meaning": "b"}]}


def test_extract_json_falls_back_to_embedded_object():
    text = 'Sure! Here you go:\n```json\n{"answer": "Well, I reckon..."}\n```\nHope that helps.'
    assert extract_json(text) == {"answer": "Well, I reckon..."}


@pytest.mark.parametrize("text", ["", "   ", "no json here", "{broken: json}", "[1, 2, 3]"])
def test_extract_json_rejects_unusable_output(text):
    with pytest.raises(GenerationError):
        extract_json(text)


def test_require_keys_reports_missing_null_and_blank_fields():
    validate = require_keys("speech", "vocabulary", "idioms")
    with pytest.raises(GenerationError) as exc:
        validate({"speech": "", "vocabulary": None})
    assert "speech, vocabulary, idioms" in str(exc.value)


def test_require_keys_accepts_empty_lists():
    data = {"response": "x", "vocabulary": [], "structures": [], "notes": {}}
    assert require_keys("response", "vocabulary", "structures", "notes")(data) is data


def test_require_keys_accepts_zero_values():
    data = {"score": 0, "correctedAnswer": "ok"}
    assert require_keys("score", "correctedAnswer")(data) is data


def test_generate_structured_requests_json_and_validates():
    client = FakeGeminiClient(reply=json.dumps({"cards": [{"word": "x", "meaning": "y"}]}))
    data = asyncio.run(generate_structured(client, "make cards", require_keys("cards"), temperature=0.2))

    assert data["cards"][0]["word"] == "x"
    assert client.calls == [{"prompt": "make cards", "response_mime_type": "application/json", "temperature": 0.2}]


def test_generate_structured_sends_image_as_inline_data():
    client = FakeGeminiClient(reply='{"score": 6.5, "correctedAnswer": "Fixed."}')
    asyncio.run(generate_structured(client, "score this", image_base64="data:image/jpeg;base64,QUJD"))

    parts = client.calls[0]["parts"]
    assert parts[0] == {"text": "score this"}
    assert parts[1] == {"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}}


def test_generate_structured_wraps_transport_errors():
    client = FakeGeminiClient(error=http_error(503))
    with pytest.raises(GenerationError, match="unavailable"):
        asyncio.run(generate_structured(client, "prompt"))


def test_generate_structured_surfaces_validator_failure():
    client = FakeGeminiClient(reply='{"answer": "only this"}')
    with pytest.raises(GenerationError, match="structures"):
        asyncio.run(generate_structured(client, "prompt", require_keys("answer", "structures")))


def test_gather_or_cancel_keeps_order():
    async def reply(band, delay):
        await asyncio.sleep(delay)
        return {"band": band}

    results = asyncio.run(gather_or_cancel([reply("7", 0.02), reply("8", 0)]))
    assert results == [{"band": "7"}, {"band": "8"}]


def test_gather_or_cancel_cancels_siblings_on_first_failure():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append("slow")
            raise
        return {}

    async def failing():
        raise GenerationError("band 9 failed")

    with pytest.raises(GenerationError, match="band 9 failed"):
        asyncio.run(gather_or_cancel([slow(), failing()]))
    assert cancelled == ["slow"]
