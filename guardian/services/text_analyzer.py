"""
Keyword-based text assessment.

Two flavours exist side by side:
- ScoredProfile: three keyword sets (safety, emotional, urgency) add fixed
  increments to a base probability, which is mapped to a level through the
  shared thresholds. Used by /api/analyze-text and /api/chat.
- TieredProfile: a direct-threat marker means "high", any other safety
  keyword means "medium". Used by the mock /api/text-analysis.

Matching is a case-insensitive substring test, so "follow" also matches
"following" and "followed".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from guardian.schemas.threat import TextAssessment, ThreatLevel
from guardian.services import playbook

BEHIND_ME = ("someone behind me", "someone is behind me")


@dataclass(frozen=True)
class KeywordHits:
    text: str
    safety: bool = False
    emotional: bool = False
    urgent: bool = False

    def mentions(self, *needles: str) -> bool:
        return any(n in self.text for n in needles)


def _matches(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def _confidence(hits: KeywordHits) -> float:
    score = 0.6
    if hits.safety:
        score += 0.15
    if hits.emotional:
        score += 0.1
    if hits.urgent:
        score += 0.15
    return round(min(score, 0.95), 2)


@dataclass(frozen=True)
class RiskLabels:
    safety: str
    stalking: str
    dark: str
    emotional: str
    urgent: str
    behind_me: str = ""


@dataclass(frozen=True)
class ScoredProfile:
    name: str
    modality: str
    safety: Tuple[str, ...]
    emotional: Tuple[str, ...]
    urgent: Tuple[str, ...]
    base: float
    weights: Tuple[float, float, float]
    labels: RiskLabels

    def scan(self, text: str) -> KeywordHits:
        lower = text.lower()
        return KeywordHits(
            text=lower,
            safety=_matches(lower, self.safety),
            emotional=_matches(lower, self.emotional),
            urgent=_matches(lower, self.urgent),
        )

    def probability(self, hits: KeywordHits) -> float:
        w_safety, w_emotional, w_urgent = self.weights
        p = self.base
        if hits.safety:
            p += w_safety
        if hits.emotional:
            p += w_emotional
        if hits.urgent:
            p += w_urgent
        # rounding keeps 0.3 + 0.3 + 0.2 on the 0.8 threshold
        return round(min(max(p, 0.0), 1.0), 2)

    def risks(self, hits: KeywordHits) -> List[str]:
        out: List[str] = []
        if hits.safety:
            out.append(self.labels.safety)
            if hits.mentions("follow", "stalking"):
                out.append(self.labels.stalking)
            if hits.mentions("dark"):
                out.append(self.labels.dark)
            if self.labels.behind_me and hits.mentions(*BEHIND_ME):
                out.append(self.labels.behind_me)
        if hits.emotional:
            out.append(self.labels.emotional)
        if hits.urgent:
            out.append(self.labels.urgent)
        return out

    def base_actions(self, hits: KeywordHits, level: ThreatLevel) -> Tuple[str, ...]:
        if self.modality == playbook.TEXT:
            if hits.safety or level.is_urgent:
                return TEXT_ALERT_SUGGESTIONS
            return TEXT_CALM_SUGGESTIONS
        return playbook.advice_for(self.modality, level).actions

    def assess(self, text: str) -> TextAssessment:
        hits = self.scan(text)
        probability = self.probability(hits)
        level = playbook.level_for_score(probability)
        advice = playbook.advice_for(self.modality, level)
        return TextAssessment(
            threat_level=level,
            detected_risks=self.risks(hits),
            recommended_actions=playbook.with_emergency_protocol(
                level, self.base_actions(hits, level)
            ),
            confidence=_confidence(hits),
            explanation=advice.narrative,
            danger_probability=probability,
            urgent_help_needed=hits.urgent or probability > 0.7,
            emotional_cues=list(EMOTIONAL_CUES if hits.emotional else NEUTRAL_CUES),
            extra_info={"profile": self.name},
        )


@dataclass(frozen=True)
class TieredProfile:
    name: str
    safety: Tuple[str, ...]
    high_markers: Tuple[str, ...]
    concern_markers: Tuple[str, ...] = ("emergency", "help", "danger")

    def assess(self, text: str) -> TextAssessment:
        lower = text.lower()
        safety = _matches(lower, self.safety)
        risks: List[str] = []
        if not safety:
            level = ThreatLevel.LOW
            explanation = "No immediate threat detected."
        elif _matches(lower, self.high_markers):
            level = ThreatLevel.HIGH
            explanation = (
                "Your text indicates potential danger. Stay alert and consider going to a "
                "safe public area."
            )
            risks.append("Potential stalking or following behavior mentioned")
        elif _matches(lower, self.concern_markers):
            level = ThreatLevel.MEDIUM
            explanation = (
                "Some safety concerns detected. Stay aware of your surroundings and keep "
                "your phone accessible."
            )
        else:
            level = ThreatLevel.MEDIUM
            explanation = (
                "Moderate safety concerns detected. Continue to stay alert and trust your "
                "instincts."
            )
        if safety:
            risks.insert(0, "Safety threat indicators detected in text")

        hits = KeywordHits(text=lower, safety=safety)
        return TextAssessment(
            threat_level=level,
            detected_risks=risks,
            recommended_actions=list(TIERED_ACTIONS[level]),
            confidence=_confidence(hits),
            explanation=explanation,
            danger_probability=TIERED_PROBABILITY[level],
            urgent_help_needed=level.is_urgent or _matches(lower, URGENT_KEYWORDS),
            emotional_cues=[],
            extra_info={"profile": self.name},
        )


TEXT_ALERT_SUGGESTIONS = (
    "Relocate to a safe, public location immediately",
    "Contact a trusted individual and share current location",
    "Maintain heightened awareness of surroundings",
    "If threat is immediate, contact emergency services",
    "Avoid isolated areas and seek well-lit public spaces",
)

TEXT_CALM_SUGGESTIONS = (
    "Maintain situational awareness",
    "Keep communication device accessible",
    "Trust personal instincts if situation feels unsafe",
    "Consider sharing location with trusted contact",
)

EMOTIONAL_CUES = (
    "Elevated stress indicators detected",
    "Expressed fear or concern identified",
    "Anxiety markers present",
)
NEUTRAL_CUES = ("Neutral emotional tone observed", "No immediate distress signals detected")

TIERED_ACTIONS = {
    ThreatLevel.LOW: (
        "Stay alert",
        "Avoid isolated areas",
        "Contact a trusted person if necessary",
    ),
    ThreatLevel.MEDIUM: (
        "Stay alert and aware of your surroundings",
        "Keep phone accessible for emergency calls",
        "Avoid shortcuts through dark or isolated areas",
        "Consider sharing your location with a trusted contact",
        "Trust your instincts if something feels wrong",
    ),
    ThreatLevel.HIGH: (
        "Move to a well-lit public area immediately",
        "Call emergency services if you feel threatened",
        "Share your location with a trusted contact",
        "Stay alert and maintain awareness of surroundings",
        "Do NOT engage with any potential threats",
        "Keep phone accessible for emergency calls",
    ),
}

# Representative probability per tier so responses stay comparable
TIERED_PROBABILITY = {
    ThreatLevel.LOW: 0.2,
    ThreatLevel.MEDIUM: 0.5,
    ThreatLevel.HIGH: 0.7,
}

EMOTIONAL_KEYWORDS = (
    "scared", "afraid", "fear", "panic", "worried", "anxious",
    "nervous", "terrified", "helpless", "trapped",
)
URGENT_KEYWORDS = (
    "emergency", "help", "danger", "threat", "unsafe", "call police",
    "need help", "immediate", "urgent",
)

ANALYZE_TEXT = ScoredProfile(
    name="analyze-text",
    modality=playbook.TEXT,
    safety=(
        "follow", "following", "stalking", "threat", "danger", "unsafe",
        "scared", "afraid", "help", "emergency", "dangerous", "fear",
        "worried", "anxious", "threatened",
    ),
    emotional=EMOTIONAL_KEYWORDS,
    urgent=URGENT_KEYWORDS,
    base=0.3,
    weights=(0.3, 0.2, 0.2),
    labels=RiskLabels(
        safety="Safety threat indicators detected in text",
        stalking="Potential stalking or following behavior mentioned",
        dark="Dark or poorly lit environment referenced",
        emotional="Elevated stress or fear indicators present",
        urgent="Urgent help request identified",
        behind_me="Direct threat perception indicated",
    ),
)

CHAT = ScoredProfile(
    name="chat",
    modality=playbook.CHAT,
    safety=(
        "follow", "following", "stalking", *BEHIND_ME, "being followed",
        "threat", "danger", "unsafe", "scared", "afraid", "dark",
        "worried", "anxious", "threatened",
    ),
    emotional=EMOTIONAL_KEYWORDS,
    urgent=URGENT_KEYWORDS,
    base=0.2,
    weights=(0.3, 0.2, 0.3),
    labels=RiskLabels(
        safety="Safety threat mentioned",
        stalking="Potential stalking or following behavior",
        dark="Dark or poorly lit area mentioned",
        emotional="Elevated stress or fear indicators",
        urgent="Urgent help request detected",
    ),
)

TEXT_ANALYSIS = TieredProfile(
    name="text-analysis",
    safety=(
        "follow", "following", "stalking", "scared", "afraid", "threat",
        "danger", "unsafe", "help", "emergency", "dangerous", "fear",
        "worried", "anxious", "threatened", *BEHIND_ME,
    ),
    high_markers=("follow", "stalking", "scared", *BEHIND_ME),
)

CHAT_EMOJI = {
    ThreatLevel.CRITICAL: "\U0001F534",
    ThreatLevel.HIGH: "\U0001F7E0",
    ThreatLevel.MEDIUM: "\U0001F7E1",
    ThreatLevel.LOW: "\U0001F7E2",
}

CHAT_REPLIES = {
    ThreatLevel.CRITICAL: (
        "I'm really concerned about your safety right now. This sounds like an immediate "
        "danger. Please hide behind something safe, move to a well-lit public area, and call "
        "emergency services if possible. Don't engage with any threat."
    ),
    ThreatLevel.HIGH: (
        "That sounds dangerous! Please move to a well-lit area immediately, call someone you "
        "trust, and stay aware of your surroundings. If you feel threatened, don't hesitate "
        "to call emergency services."
    ),
    ThreatLevel.MEDIUM: (
        "I understand your concern. Please stay alert and consider moving to a safer, "
        "well-lit location. Keep your phone handy and trust your instincts."
    ),
    ThreatLevel.LOW: (
        "I'm here to help keep you safe. Stay aware of your surroundings, and if you have "
        "any concerns, you can upload a photo, video, or text for detailed analysis."
    ),
}


def chat_reply(level: ThreatLevel) -> str:
    emoji = CHAT_EMOJI.get(level, "\u26AA")
    return f"{emoji} {CHAT_REPLIES.get(level, CHAT_REPLIES[ThreatLevel.LOW])}"
