from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ThreatLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"

    @property
    def is_urgent(self) -> bool:
        return self in (ThreatLevel.HIGH, ThreatLevel.CRITICAL)


class ThreatAssessment(BaseModel):
    """Result of classifying one signal.

    Built fresh for every request and never mutated afterwards. Modality
    specific responses rename the fields (e.g. `detected_risks` becomes
    `hazards_seen` for video) but carry the same meaning.
    """

    model_config = ConfigDict(frozen=True)

    threat_level: ThreatLevel = ThreatLevel.UNKNOWN
    detected_risks: List[str] = Field(default_factory=list)
    recommended_actions: List[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    explanation: str = ""
    extra_info: Dict[str, Any] = Field(default_factory=dict)


class TextAssessment(ThreatAssessment):
    danger_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    urgent_help_needed: bool = False
    emotional_cues: List[str] = Field(default_factory=list)
