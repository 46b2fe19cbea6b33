import base64
import json

import httpx
import pytest

from guardian.core.config import get_settings
from guardian.core.errors import InvalidInput
from guardian.schemas.threat import ThreatLevel
from guardian.services.gemini_client import GeminiClient, GeminiError, parse_assessment


def _reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_parse_extracts_json_block_from_prose():
    text = 'Here is my analysis:\n```json\n{"threat_level": "high", "detected_risks": ["Dark alley"], ' \
           '"recommended_actions": ["Leave"], "confidence": 0.9, "extra_info": {"lighting": "poor"}}\n```'
    out = parse_assessment(text)
    assert out.threat_level == ThreatLevel.HIGH
    assert out.detected_risks == ["Dark alley"]
    assert out.recommended_actions == ["Leave"]
    assert out.confidence == 0.9
    assert out.extra_info == {"lighting": "poor"}


def test_parse_defaults_missing_fields():
    out = parse_assessment('{"detected_risks": "not a list"}')
    assert out.threat_level == ThreatLevel.UNKNOWN
    assert out.detected_risks == []
    assert out.recommended_actions == []
    assert out.confidence == 0.5
    assert out.extra_info == {}


def test_parse_unknown_level_and_clamps_confidence():
    out = parse_assessment('{"threat_level": "SEVERE", "confidence": 7}')
    assert out.threat_level == ThreatLevel.UNKNOWN
    assert out.confidence == 1.0


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity"])
def test_parse_non_finite_confidence_defaults(raw):
    out = parse_assessment('{"threat_level": "high", "confidence": %s}' % raw)
    assert out.threat_level == ThreatLevel.HIGH
    assert out.confidence == 0.5


def test_parse_without_json():
    out = parse_assessment("I cannot help with that.")
    assert out.threat_level == ThreatLevel.UNKNOWN
    assert out.detected_risks == ["Unable to parse AI response"]
    assert out.confidence == 0
    assert out.extra_info["raw_response"] == "I cannot help with that."


def test_parse_broken_json():
    out = parse_assessment('{"threat_level": "low",}')
    assert out.detected_risks == ["Response parsing error"]
    assert "error" in out.extra_info


@pytest.mark.asyncio
async def test_analyze_image_sends_inline_data():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"threat_level": "critical", "confidence": 0.8}'))

    client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(handler))
    out = await client.analyze_image(b"\xff\xd8jpeg", "image/jpeg", note="near the station")
    await client.aclose()

    assert out.threat_level == ThreatLevel.CRITICAL
    assert seen["key"] == "test-key"
    assert seen["url"].endswith("/models/gemini-2.5-pro:generateContent")
    parts = seen["body"]["contents"][0]["parts"]
    assert "near the station" in parts[0]["text"]
    assert parts[1]["inline_data"] == {
        "mime_type": "image/jpeg",
        "data": base64.b64encode(b"\xff\xd8jpeg").decode(),
    }


@pytest.mark.asyncio
async def test_analyze_text_uses_text_model():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"threat_level": "low"}'))

    client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
    out = await client.analyze_text("walking home")
    await client.aclose()

    assert out.threat_level == ThreatLevel.LOW
    assert seen["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert '"walking home"' in seen["body"]["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_http_error_raises_gemini_error():
    client = GeminiClient(
        api_key="k",
        transport=httpx.MockTransport(lambda r: httpx.Response(503, json={"error": "down"})),
    )
    with pytest.raises(GeminiError):
        await client.analyze_text("hello")
    await client.aclose()


@pytest.mark.asyncio
async def test_empty_reply_raises_gemini_error():
    client = GeminiClient(
        api_key="k",
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"candidates": []})),
    )
    with pytest.raises(GeminiError):
        await client.analyze_text("hello")
    await client.aclose()


@pytest.mark.asyncio
async def test_missing_api_key_raises():
    client = GeminiClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    client.api_key = ""
    with pytest.raises(GeminiError, match="GEMINI_API_KEY"):
        await client.analyze_text("hello")


@pytest.mark.asyncio
async def test_oversized_inline_media_rejected_before_request(monkeypatch):
    monkeypatch.setattr(get_settings(), "GEMINI_MAX_INLINE_BYTES", 16)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_reply('{"threat_level": "low"}'))

    client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
    with pytest.raises(InvalidInput, match="too large"):
        await client.analyze_video(b"v" * 64, "video/mp4")
    await client.aclose()
    assert calls == []
