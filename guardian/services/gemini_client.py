"""
Gemini client wrapper (async, httpx) for the "real" analysis backend.

Talks to the Generative Language REST API (`models/{model}:generateContent`)
and turns the free-text reply into a ThreatAssessment by extracting the
first JSON object it contains. Model names, base URL and the API key come
from guardian.core.config.get_settings.
"""

from __future__ import annotations

import base64
import json
import math
import re
from typing import Any, Dict, List, Optional

import httpx

from guardian.core.config import get_settings
from guardian.core.errors import InvalidInput
from guardian.core.logger import get_logger
from guardian.schemas.threat import ThreatAssessment, ThreatLevel

log = get_logger(__name__)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

_RESPONSE_FORMAT = """Respond in JSON format with:
{
  "threat_level": "low" | "medium" | "high" | "critical",
  "detected_risks": ["risk1", "risk2"],
  "recommended_actions": ["action1", "action2"],
  "confidence": 0.0-1.0,
  "explanation": "short justification",
  "extra_info": {}
}"""

IMAGE_PROMPT = """Analyze this image for personal safety threats. Look for:
- Suspicious individuals or behavior
- Dangerous situations (weapons, violence, etc.)
- Environmental hazards (poor lighting, isolated areas, etc.)
- Any signs of immediate danger
"""

VIDEO_PROMPT = """Analyze this video for personal safety threats. Look for:
- Suspicious individuals or behavior patterns (following, running, approaching)
- Dangerous situations developing over time
- Environmental hazards (dark or isolated areas)
- Escalating threats
"""

AUDIO_PROMPT = """Analyze this audio for personal safety threats. Look for:
- Distressed voices or screams
- Aggressive or threatening language
- Background sounds indicating danger (breaking glass, alarms, footsteps, etc.)
- Signs of conflict or violence, panic or fear in the speaker's voice
"""

TEXT_PROMPT = """Analyze this text for personal safety threats. Look for:
- Threats or intimidation
- Signs of danger or violence
- Suspicious behavior descriptions
- Emergency situations
- Location-based risks

Text to analyze:
"{text}"
"""


class GeminiError(RuntimeError):
    """Raised when the Gemini API cannot produce a reply."""


def parse_assessment(text: str) -> ThreatAssessment:
    """Extract a ThreatAssessment from a model reply, defaulting missing fields."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return ThreatAssessment(
            threat_level=ThreatLevel.UNKNOWN,
            detected_risks=["Unable to parse AI response"],
            recommended_actions=["Please try again"],
            confidence=0.0,
            extra_info={"raw_response": text},
        )
    try:
        parsed = json.loads(match.group(0))
        if not isinstance(parsed, dict):
            raise ValueError("expected a JSON object")
    except ValueError as e:
        log.warning("Could not parse Gemini reply: %s", e)
        return ThreatAssessment(
            threat_level=ThreatLevel.UNKNOWN,
            detected_risks=["Response parsing error"],
            recommended_actions=["Please try again"],
            confidence=0.0,
            extra_info={"error": str(e), "raw_response": text},
        )

    try:
        level = ThreatLevel(str(parsed.get("threat_level", "")).lower())
    except ValueError:
        level = ThreatLevel.UNKNOWN

    confidence = parsed.get("confidence")
    if (isinstance(confidence, bool) or not isinstance(confidence, (int, float))
            or not math.isfinite(confidence)):
        confidence = 0.5
    extra = parsed.get("extra_info")

    return ThreatAssessment(
        threat_level=level,
        detected_risks=_str_list(parsed.get("detected_risks")),
        recommended_actions=_str_list(parsed.get("recommended_actions")),
        confidence=min(max(float(confidence), 0.0), 1.0),
        explanation=str(parsed.get("explanation") or ""),
        extra_info=extra if isinstance(extra, dict) else {},
    )


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


class GeminiClient:
    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._settings = get_settings()
        self.api_key = api_key or self._settings.GEMINI_API_KEY
        self._timeout = timeout or self._settings.GEMINI_TIMEOUT
        self._transport = transport
        self._aclient: Optional[httpx.AsyncClient] = None

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._aclient is None:
            self._aclient = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._aclient

    async def agenerate(self, model: str, parts: List[Dict[str, Any]]) -> str:
        """Send one generateContent request and return the concatenated reply text.

        Raises GeminiError on missing credentials, transport errors, non-2xx
        responses, or a reply without any text part.
        """
        if not self.api_key:
            raise GeminiError("GEMINI_API_KEY is not set")

        url = f"{self._settings.GEMINI_BASE_URL.rstrip('/')}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        payload = {"contents": [{"parts": parts}]}

        try:
            resp = await self._get_async_client().post(url, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.exception("Gemini request failed: %s", e)
            raise GeminiError(f"Gemini request failed: {e}") from e

        texts = [
            part.get("text", "")
            for candidate in data.get("candidates") or []
            for part in (candidate.get("content") or {}).get("parts") or []
            if isinstance(part, dict)
        ]
        reply = "".join(texts).strip()
        if not reply:
            raise GeminiError("Gemini returned an empty reply")
        return reply

    async def analyze_media(self, prompt: str, data: bytes, mime_type: str,
                            model: Optional[str] = None) -> ThreatAssessment:
        encoded = base64.b64encode(data).decode()
        limit = self._settings.GEMINI_MAX_INLINE_BYTES
        if len(encoded) > limit:
            raise InvalidInput(
                f"File is too large for AI analysis (limit {limit // (1024 * 1024)}MB encoded)",
                risks=["File upload error"],
                actions=["Please upload a shorter or smaller file"],
                extra_info={"encoded_bytes": len(encoded)},
            )
        parts = [
            {"text": f"{prompt}\n{_RESPONSE_FORMAT}"},
            {"inline_data": {"mime_type": mime_type, "data": encoded}},
        ]
        reply = await self.agenerate(model or self._settings.GEMINI_VISION_MODEL, parts)
        return parse_assessment(reply)

    async def analyze_image(self, data: bytes, mime_type: str = "image/jpeg",
                            note: Optional[str] = None) -> ThreatAssessment:
        prompt = IMAGE_PROMPT
        if note:
            prompt = f"{prompt}\nUser note: {note}\n"
        return await self.analyze_media(prompt, data, mime_type)

    async def analyze_video(self, data: bytes, mime_type: str = "video/mp4") -> ThreatAssessment:
        return await self.analyze_media(VIDEO_PROMPT, data, mime_type)

    async def analyze_audio(self, data: bytes, mime_type: str = "audio/webm") -> ThreatAssessment:
        return await self.analyze_media(
            AUDIO_PROMPT, data, mime_type, model=self._settings.GEMINI_TEXT_MODEL
        )

    async def analyze_text(self, text: str) -> ThreatAssessment:
        parts = [{"text": f"{TEXT_PROMPT.format(text=text)}\n{_RESPONSE_FORMAT}"}]
        reply = await self.agenerate(self._settings.GEMINI_TEXT_MODEL, parts)
        return parse_assessment(reply)

    async def aclose(self) -> None:
        if self._aclient is not None:
            await self._aclient.aclose()
            self._aclient = None


_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    global _client
    if _client is None:
        _client = GeminiClient()
    return _client
