from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from guardian.schemas.threat import TextAssessment, ThreatAssessment, ThreatLevel


class ImageAnalysisResponse(ThreatAssessment):
    detected_objects: List[str] = []
    confidence_score: float = 0.0

    @classmethod
    def from_assessment(cls, a: ThreatAssessment) -> "ImageAnalysisResponse":
        return cls(
            **a.model_dump(),
            detected_objects=a.detected_risks,
            confidence_score=a.confidence,
        )


class VideoAnalysisResponse(ThreatAssessment):
    hazards_seen: List[str] = []
    people_detected: List[str] = []
    movement_patterns: List[str] = []
    summary: str = ""
    actions: List[str] = []

    @classmethod
    def from_assessment(cls, a: ThreatAssessment) -> "VideoAnalysisResponse":
        return cls(
            **a.model_dump(),
            hazards_seen=a.detected_risks,
            people_detected=list(a.extra_info.get("people_detected", [])),
            movement_patterns=list(a.extra_info.get("movement_patterns", [])),
            summary=a.explanation,
            actions=a.recommended_actions,
        )


class AudioAnalysisResponse(ThreatAssessment):
    sound_events: List[str] = []
    risk_reasoning: str = ""
    actions: List[str] = []

    @classmethod
    def from_assessment(cls, a: ThreatAssessment) -> "AudioAnalysisResponse":
        return cls(
            **a.model_dump(),
            sound_events=a.detected_risks,
            risk_reasoning=a.explanation,
            actions=a.recommended_actions,
        )


class AnalyzeTextResponse(TextAssessment):
    suggestions: List[str] = []
    confidence_score: float = 0.0

    @classmethod
    def from_assessment(cls, a: TextAssessment) -> "AnalyzeTextResponse":
        return cls(
            **a.model_dump(),
            suggestions=a.recommended_actions,
            confidence_score=a.confidence,
        )


class ChatResponse(ThreatAssessment):
    response: str = ""


class SafeRouteResponse(ThreatAssessment):
    route_link: str = ""
    route_description: str = ""
    unsafe_areas: List[str] = []
    safe_areas: List[str] = []
    caution_areas: Optional[List[str]] = None

    @classmethod
    def from_assessment(cls, a: ThreatAssessment) -> "SafeRouteResponse":
        info = a.extra_info
        caution = list(info.get("caution_areas", []))
        return cls(
            **a.model_dump(),
            route_link=info.get("route_link", ""),
            route_description=a.explanation,
            unsafe_areas=list(info.get("unsafe_areas", [])),
            safe_areas=list(info.get("safe_areas", [])),
            caution_areas=caution or None,
        )


class ErrorResponse(BaseModel):
    """Fallback body for every failed request.

    Carries `threat_level: unknown` so clients render errors like any other
    assessment.
    """

    error: str
    threat_level: ThreatLevel = ThreatLevel.UNKNOWN
    detected_risks: List[str] = []
    recommended_actions: List[str] = ["Please try again"]
    confidence: float = 0.0
    extra_info: dict = {}
