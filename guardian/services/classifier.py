"""
Threat classifier: one entry point, `classify(signal)`, for every modality.

MockClassifier draws a score from an injected ThreatScorer for media, runs
keyword profiles for text, and hashes coordinates for geo signals.
GeminiClassifier sends media and text to Gemini and falls back to the
deterministic route planner for coordinates.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from guardian.core.config import get_settings
from guardian.core.errors import AnalysisFailed, GuardianError
from guardian.core.logger import get_logger
from guardian.schemas.threat import ThreatAssessment
from guardian.services import playbook, safe_route, text_analyzer
from guardian.services.gemini_client import GeminiClient, get_gemini_client
from guardian.services.scoring import ThreatScorer, get_scorer

log = get_logger(__name__)


@dataclass(frozen=True)
class TextSignal:
    text: str
    profile: Union[text_analyzer.ScoredProfile, text_analyzer.TieredProfile] = (
        text_analyzer.ANALYZE_TEXT
    )


@dataclass(frozen=True)
class MediaSignal:
    modality: str  # playbook.IMAGE / VIDEO / AUDIO
    data: bytes
    mime_type: str
    note: Optional[str] = None


@dataclass(frozen=True)
class GeoSignal:
    lat: float
    lng: float
    destination: Optional[str] = None


Signal = Union[TextSignal, MediaSignal, GeoSignal]


class ThreatClassifier(Protocol):
    name: str

    async def classify(self, signal: Signal) -> ThreatAssessment: ...


class MockClassifier:
    name = "mock"

    def __init__(self, scorer: Optional[ThreatScorer] = None, latency: float = 0.0) -> None:
        self.scorer = scorer or get_scorer()
        self.latency = latency

    async def classify(self, signal: Signal) -> ThreatAssessment:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        if isinstance(signal, TextSignal):
            return signal.profile.assess(signal.text)
        if isinstance(signal, GeoSignal):
            return safe_route.plan_route(signal.lat, signal.lng, signal.destination)
        if isinstance(signal, MediaSignal):
            return self._classify_media(signal)
        raise TypeError(f"Unsupported signal: {type(signal).__name__}")

    def _classify_media(self, signal: MediaSignal) -> ThreatAssessment:
        score = self.scorer.draw()
        level = playbook.level_for_score(score)
        advice = playbook.advice_for(signal.modality, level)
        extra = {"score": round(score, 4), "mime_type": signal.mime_type, "bytes": len(signal.data)}
        if signal.modality == playbook.VIDEO:
            extra["people_detected"] = list(playbook.VIDEO_PEOPLE)
            extra["movement_patterns"] = list(playbook.VIDEO_MOVEMENT)
        if signal.note:
            extra["note"] = signal.note
        log.info("mock %s analysis: score=%.3f level=%s", signal.modality, score, level.value)
        return ThreatAssessment(
            threat_level=level,
            detected_risks=list(playbook.DETECTED_LABELS[signal.modality]),
            recommended_actions=playbook.with_emergency_protocol(level, advice.actions),
            confidence=playbook.MOCK_CONFIDENCE[signal.modality],
            explanation=advice.narrative,
            extra_info=extra,
        )


class GeminiClassifier:
    name = "gemini"

    def __init__(self, client: Optional[GeminiClient] = None) -> None:
        self.client = client or get_gemini_client()

    async def classify(self, signal: Signal) -> ThreatAssessment:
        if isinstance(signal, TextSignal):
            return await self.client.analyze_text(signal.text)
        if isinstance(signal, GeoSignal):
            return safe_route.plan_route(signal.lat, signal.lng, signal.destination)
        if isinstance(signal, MediaSignal):
            if signal.modality == playbook.IMAGE:
                return await self.client.analyze_image(signal.data, signal.mime_type, signal.note)
            if signal.modality == playbook.VIDEO:
                return await self.client.analyze_video(signal.data, signal.mime_type)
            if signal.modality == playbook.AUDIO:
                return await self.client.analyze_audio(signal.data, signal.mime_type)
        raise TypeError(f"Unsupported signal: {type(signal).__name__}")


_classifier: Optional[ThreatClassifier] = None


def get_classifier() -> ThreatClassifier:
    global _classifier
    if _classifier is None:
        settings = get_settings()
        backend = settings.ANALYSIS_BACKEND.lower()
        if backend == "gemini":
            _classifier = GeminiClassifier()
        else:
            if backend != "mock":
                log.warning("Unknown ANALYSIS_BACKEND %r, using mock", settings.ANALYSIS_BACKEND)
            _classifier = MockClassifier(latency=settings.MOCK_LATENCY_SEC)
        log.info("Threat classifier: %s", _classifier.name)
    return _classifier


async def run_classifier(classifier: ThreatClassifier, signal: Signal) -> ThreatAssessment:
    """Classify and turn unexpected failures into a 500 fallback payload."""
    try:
        return await classifier.classify(signal)
    except GuardianError:
        raise
    except Exception as e:
        log.exception("%s classifier failed on %s", classifier.name, type(signal).__name__)
        raise AnalysisFailed(
            "Analysis failed. Please try again.", extra_info={"error": str(e)}
        ) from e
