"""
Canned, level-indexed advice shared by every mock analysis path.

One threshold table maps any score in [0, 1] (keyword probability or random
draw) to a threat level, and one lookup keyed by (modality, level) holds
the narrative and base actions. High and critical levels always get the
emergency protocol prepended.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from guardian.schemas.threat import ThreatLevel

# Descending; first threshold the score reaches wins
LEVEL_THRESHOLDS: Tuple[Tuple[float, ThreatLevel], ...] = (
    (0.8, ThreatLevel.CRITICAL),
    (0.6, ThreatLevel.HIGH),
    (0.4, ThreatLevel.MEDIUM),
)

EMERGENCY_PROTOCOL: Tuple[str, ...] = (
    "Hide immediately behind a safe object.",
    "Do NOT engage with the threat.",
    "Move into a public, well-lit location.",
    "Call emergency services if possible.",
    "Share your location with a trusted contact.",
)

IMAGE = "image"
VIDEO = "video"
AUDIO = "audio"
TEXT = "text"
CHAT = "chat"


def level_for_score(score: float) -> ThreatLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return ThreatLevel.LOW


def with_emergency_protocol(level: ThreatLevel, actions: Sequence[str]) -> List[str]:
    if level.is_urgent:
        return [*EMERGENCY_PROTOCOL, *actions]
    return list(actions)


@dataclass(frozen=True)
class Advice:
    narrative: str
    actions: Tuple[str, ...]


_SAFE_ACTIONS = (
    "Stay aware of your surroundings",
    "Keep phone accessible for emergency calls",
    "Trust your instincts if something feels wrong",
)

PLAYBOOK: Dict[Tuple[str, ThreatLevel], Advice] = {
    # Image
    (IMAGE, ThreatLevel.CRITICAL): Advice(
        "CRITICAL THREAT DETECTED: Immediate danger identified in the image. "
        "Take immediate protective action.",
        (
            "Move to a well-lit public area immediately",
            "Stay alert and maintain awareness of all surroundings",
            "Keep phone accessible for emergency calls",
        ),
    ),
    (IMAGE, ThreatLevel.HIGH): Advice(
        "HIGH THREAT DETECTED: Significant safety concerns identified. Exercise extreme caution.",
        (
            "Immediately move to a well-lit public area",
            "Stay alert and maintain awareness of all surroundings",
            "Call a trusted contact and share your location",
            "If feeling threatened, call emergency services",
        ),
    ),
    (IMAGE, ThreatLevel.MEDIUM): Advice(
        "The image shows a person in a dimly lit area. While no immediate threats are "
        "visible, the combination of low lighting and isolated location increases safety risk.",
        (
            "Move to a well-lit public area",
            "Stay alert and aware of surroundings",
            "Keep phone accessible for emergency calls",
            "Consider sharing your location with a trusted contact",
        ),
    ),
    (IMAGE, ThreatLevel.LOW): Advice(
        "The image appears relatively safe. Continue to stay aware of your surroundings.",
        _SAFE_ACTIONS,
    ),
    # Video
    (VIDEO, ThreatLevel.CRITICAL): Advice(
        "CRITICAL THREAT DETECTED: Immediate danger identified in the video. Aggressive "
        "behavior or weapons may be present. Take immediate protective action.",
        (
            "Stay alert and maintain awareness of all surroundings",
            "Keep phone accessible for emergency calls",
            "Avoid isolated paths and shortcuts",
        ),
    ),
    (VIDEO, ThreatLevel.HIGH): Advice(
        "HIGH THREAT DETECTED: The video shows concerning behavior patterns. The combination "
        "of low lighting and isolated location presents elevated safety concerns. Exercise "
        "extreme caution.",
        (
            "Immediately move to a well-lit public area",
            "Stay alert and maintain awareness of all surroundings",
            "Call a trusted contact and share your location",
            "If feeling threatened, call emergency services",
            "Avoid isolated paths and shortcuts",
        ),
    ),
    (VIDEO, ThreatLevel.MEDIUM): Advice(
        "The video shows a person walking in a dimly lit area. While no aggressive behavior "
        "is immediately apparent, the combination of low lighting and isolated location "
        "presents elevated safety concerns.",
        (
            "Move to a well-lit public area",
            "Stay alert and aware of surroundings",
            "Keep phone accessible for emergency calls",
            "Consider sharing your location with a trusted contact",
            "Avoid isolated paths and shortcuts",
        ),
    ),
    (VIDEO, ThreatLevel.LOW): Advice(
        "The video appears relatively safe. Continue to stay aware of your surroundings.",
        _SAFE_ACTIONS,
    ),
    # Audio
    (AUDIO, ThreatLevel.CRITICAL): Advice(
        "CRITICAL THREAT DETECTED: Audio analysis indicates immediate danger. Aggressive "
        "sounds, shouting, or signs of violence detected. Take immediate protective action.",
        (
            "Stay alert to your surroundings",
            "Keep phone accessible for emergency calls",
            "Avoid isolated areas and seek public spaces",
        ),
    ),
    (AUDIO, ThreatLevel.HIGH): Advice(
        "HIGH THREAT DETECTED: The audio analysis detected elevated stress indicators, "
        "aggressive tones, or concerning background sounds that suggest significant danger. "
        "Exercise extreme caution.",
        (
            "Move to a quieter, more controlled environment if possible",
            "Stay alert to your surroundings",
            "Keep phone accessible for emergency calls",
            "If feeling unsafe, call a trusted contact or emergency services",
            "Avoid isolated areas and seek public spaces",
        ),
    ),
    (AUDIO, ThreatLevel.MEDIUM): Advice(
        "The audio analysis detected elevated stress indicators and background sounds that "
        "suggest an uncertain environment. While no immediate threats are clearly audible, "
        "the combination of factors warrants caution.",
        (
            "Move to a quieter, more controlled environment if possible",
            "Stay alert to your surroundings",
            "Keep phone accessible for emergency calls",
            "If feeling unsafe, call a trusted contact or emergency services",
            "Avoid isolated areas and seek public spaces",
        ),
    ),
    (AUDIO, ThreatLevel.LOW): Advice(
        "The audio appears relatively safe. Continue to stay aware of your surroundings.",
        _SAFE_ACTIONS,
    ),
    # Scored text (/api/analyze-text)
    (TEXT, ThreatLevel.CRITICAL): Advice(
        "CRITICAL THREAT ASSESSMENT: Analysis of the provided text indicates immediate danger. "
        "Multiple threat indicators are present, including safety concerns, emotional "
        "distress, and potential urgent need for assistance. Immediate protective action is "
        "strongly recommended.",
        (),
    ),
    (TEXT, ThreatLevel.HIGH): Advice(
        "HIGH THREAT ASSESSMENT: Text analysis reveals significant safety concerns. The "
        "combination of threat indicators, emotional cues, and situational factors suggests "
        "elevated risk. Exercise extreme caution and take proactive safety measures.",
        (),
    ),
    (TEXT, ThreatLevel.MEDIUM): Advice(
        "MEDIUM THREAT ASSESSMENT: The text analysis indicates moderate safety concerns. Some "
        "threat indicators are present, warranting increased awareness and precautionary "
        "measures.",
        (),
    ),
    (TEXT, ThreatLevel.LOW): Advice(
        "LOW THREAT ASSESSMENT: Text analysis shows minimal immediate safety concerns. "
        "However, continued situational awareness is recommended.",
        (),
    ),
    # Chat
    (CHAT, ThreatLevel.CRITICAL): Advice(
        "CRITICAL THREAT DETECTED: Your message indicates immediate danger. Take immediate "
        "protective action.",
        (
            "Stay alert and maintain awareness of all surroundings",
            "Keep phone accessible for emergency calls",
            "If feeling threatened, call emergency services immediately",
        ),
    ),
    (CHAT, ThreatLevel.HIGH): Advice(
        "HIGH THREAT DETECTED: Your message indicates significant safety concerns. Exercise "
        "extreme caution.",
        (
            "Immediately move to a well-lit public area",
            "Stay alert and maintain awareness of all surroundings",
            "Call a trusted contact and share your location",
            "If feeling threatened, call emergency services",
        ),
    ),
    (CHAT, ThreatLevel.MEDIUM): Advice(
        "Your message suggests some safety concerns. Stay alert and take precautions.",
        (
            "Move to a well-lit public area",
            "Stay alert and aware of your surroundings",
            "Keep phone accessible for emergency calls",
            "Consider sharing your location with a trusted contact",
        ),
    ),
    (CHAT, ThreatLevel.LOW): Advice(
        "Your message appears relatively safe. Continue to stay aware of your surroundings.",
        _SAFE_ACTIONS,
    ),
}

# What the mock media analysis claims to have noticed
DETECTED_LABELS: Dict[str, Tuple[str, ...]] = {
    IMAGE: ("Person in frame", "Low lighting detected", "Isolated area"),
    VIDEO: ("Dim lighting throughout video", "Isolated location with limited visibility"),
    AUDIO: (
        "Background noise detected",
        "Possible footsteps in distance",
        "Elevated speaking tone",
    ),
}

VIDEO_PEOPLE = ("One person visible in frame", "Possible second person in background")
VIDEO_MOVEMENT = ("Steady walking pace", "Person appears to be maintaining distance")

MOCK_CONFIDENCE: Dict[str, float] = {IMAGE: 0.75, VIDEO: 0.7, AUDIO: 0.7}


def advice_for(modality: str, level: ThreatLevel) -> Advice:
    try:
        return PLAYBOOK[(modality, level)]
    except KeyError:
        raise ValueError(f"No advice for {modality}/{level.value}") from None
