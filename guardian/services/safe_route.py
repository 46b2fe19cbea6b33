"""
Deterministic safe-route suggestions for a raw (lat, lng) position.

The position is hashed through a trigonometric formula into one of five
scenarios, from "safe indoor location" to "emergency". Each scenario has a
fixed narrative, area lists and a destination offset that is turned into a
Google Maps walking-directions link. No map data is consulted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from guardian.schemas.threat import ThreatAssessment, ThreatLevel

MAPS_DIR_URL = "https://www.google.com/maps/dir/?api=1"


@dataclass(frozen=True)
class Scenario:
    level: ThreatLevel
    description: str
    offset: Tuple[float, float]
    safe_areas: Tuple[str, ...]
    caution_areas: Tuple[str, ...] = ()
    unsafe_areas: Tuple[str, ...] = ()


SCENARIOS: Tuple[Scenario, ...] = (
    Scenario(
        level=ThreatLevel.LOW,
        description=(
            "You appear to be in a safe indoor location. If you need to go outside, head to "
            "the nearest well-lit public area. Recommended route: Exit to Main Street "
            "(well-lit, active businesses). Continue straight for 2 blocks to reach Central "
            "Plaza (public area with good lighting and people). Estimated walking time: 5-7 "
            "minutes."
        ),
        offset=(0.005, 0.003),
        safe_areas=(
            "Current indoor location (safe, secure)",
            "Main Street (well-lit commercial area with active businesses)",
            "Central Plaza (public space, well-lit, populated)",
            "Nearby shopping center (well-lit, security presence)",
        ),
    ),
    Scenario(
        level=ThreatLevel.LOW,
        description=(
            "You're in a well-lit public area. Continue on your current path or head to the "
            "nearest police station or public building for maximum safety. Recommended route: "
            "Continue north on Main Street (well-lit, active businesses). Turn right onto Park "
            "Avenue (residential with streetlights). This route passes through Central Plaza "
            "(public area with good lighting) and avoids isolated areas. Estimated walking "
            "time: 8-10 minutes."
        ),
        offset=(0.008, -0.004),
        safe_areas=(
            "Main Street (well-lit commercial area with active businesses)",
            "Central Plaza (public space, well-lit, populated)",
            "Park Avenue (residential with streetlights)",
            "Police Station area (safe zone, 0.3 miles away)",
        ),
    ),
    Scenario(
        level=ThreatLevel.MEDIUM,
        description=(
            "CAUTION: Your current location has dim lighting and some isolated areas nearby. "
            "Recommended route: Head immediately east on Oak Street (moderate lighting, some "
            "foot traffic), then turn left onto Market Boulevard (well-lit commercial area). "
            "Continue to the well-lit shopping district. Avoid shortcuts through alleys. "
            "Estimated walking time: 12-15 minutes."
        ),
        offset=(-0.006, 0.005),
        safe_areas=(
            "Oak Street (moderate lighting, some foot traffic)",
            "Market Boulevard (commercial area with businesses, well-lit)",
            "Shopping district (well-lit, populated, security cameras)",
            "Main Street intersection (well-lit, high visibility)",
        ),
        caution_areas=(
            "Parking lot behind shopping center (low visibility, use caution)",
            "Residential side street (moderate lighting, limited foot traffic)",
            "Path through park after dark (proceed with awareness)",
        ),
        unsafe_areas=(
            "Alley between 2nd and 3rd Street (poor lighting, isolated)",
            "Dark side street behind residential area (minimal visibility)",
        ),
    ),
    Scenario(
        level=ThreatLevel.HIGH,
        description=(
            "URGENT CAUTION: Your current location is in a dark, isolated area with potential "
            "safety concerns. Immediate action recommended: Head immediately west on Elm "
            "Street (well-lit commercial area), then turn right onto Broadway (main "
            "thoroughfare with high foot traffic). Continue to the police station area or "
            "Central Park (public, well-lit). Do NOT take shortcuts. Estimated walking time: "
            "15-18 minutes to nearest safe location."
        ),
        offset=(0.007, -0.003),
        safe_areas=(
            "Elm Street (well-lit commercial area with active businesses)",
            "Broadway (main thoroughfare with high foot traffic, well-lit)",
            "Police Station area (safe zone, 0.6 miles away)",
            "Central Park (public space, well-lit, security presence)",
            "24-hour convenience store (well-lit, public, security cameras)",
        ),
        caution_areas=(
            "Parking lot behind shopping center (low visibility after dark, use extra caution)",
            "Side street between Elm and Broadway (moderate lighting, proceed with awareness)",
            "Industrial area side roads (limited foot traffic, proceed carefully)",
        ),
        unsafe_areas=(
            "Alley behind Cafe 23 (dark, isolated, minimal surveillance)",
            "Residential shortcut path (minimal foot traffic, poor lighting)",
            "Abandoned parking lot (no lighting, isolated)",
            "Underpass area (poor visibility, isolated)",
        ),
    ),
    Scenario(
        level=ThreatLevel.CRITICAL,
        description=(
            "CRITICAL: Your current location presents significant safety risks. This is an "
            "emergency situation. Immediate action required: Head immediately north on Main "
            "Street (well-lit, active businesses). Continue directly to the police station or "
            "nearest public building. Do NOT take shortcuts through alleys or isolated paths. "
            "Call emergency services if you feel threatened. Estimated walking time: 10-12 "
            "minutes to nearest safe location."
        ),
        offset=(0.009, 0.006),
        safe_areas=(
            "Main Street (well-lit commercial district with active businesses)",
            "Police Station (safe zone, 0.5 miles away - highest priority)",
            "Public Library (well-lit, open 24/7, security presence)",
            "Central Plaza (public space, high foot traffic, well-lit)",
            "Hospital emergency entrance (safe zone, 24/7 security)",
        ),
        caution_areas=(
            "Side streets with limited lighting (proceed with extreme caution)",
            "Areas with minimal surveillance (stay alert, move quickly)",
            "Underpasses and bridges (poor visibility, isolated)",
        ),
        unsafe_areas=(
            "Multiple dark alleys in surrounding area (no lighting, isolated)",
            "Isolated parking lots (no surveillance, poor lighting)",
            "Residential paths with no lighting (completely dark)",
            "Abandoned building area (no security, isolated)",
            "Industrial wasteland (isolated, no foot traffic)",
        ),
    ),
)

ROUTE_ACTIONS = {
    ThreatLevel.CRITICAL: (
        "Call emergency services immediately if you feel threatened",
        "Hide immediately behind a safe object if in danger",
        "Do NOT engage with any threats or suspicious individuals",
        "Move into a public, well-lit location immediately",
        "Head directly to the nearest police station or public building",
        "Share your location with a trusted contact right away",
        "Keep phone accessible and ready for emergency calls",
        "Stay alert and maintain constant awareness of surroundings",
        "Avoid all shortcuts through alleys or isolated areas",
        "If possible, wait in a well-lit area until help arrives",
    ),
    ThreatLevel.HIGH: (
        "Move into a public, well-lit location immediately",
        "Stay alert and maintain awareness of all surroundings",
        "Call a trusted contact and share your location",
        "Keep phone accessible for emergency calls",
        "Avoid shortcuts through dark or isolated areas",
        "Head to nearest police station or well-lit public building",
        "Do NOT engage with any suspicious individuals",
        "Walk confidently and maintain steady pace",
        "If feeling threatened, call emergency services",
    ),
    ThreatLevel.MEDIUM: (
        "Stay alert and aware of your surroundings",
        "Keep phone accessible for emergency calls",
        "Avoid shortcuts through dark or isolated areas",
        "Stick to well-lit main streets when possible",
        "Consider sharing your location with a trusted contact",
        "Walk confidently and maintain steady pace",
        "Trust your instincts if something feels wrong",
        "If you notice anything suspicious, change direction immediately",
    ),
    ThreatLevel.LOW: (
        "Stay aware of your surroundings",
        "Keep phone accessible for emergency calls",
        "Trust your instincts if something feels wrong",
        "Consider sharing your location with a trusted contact",
        "Continue on well-lit paths when possible",
    ),
}


class InvalidCoordinates(ValueError):
    pass


def validate_coordinates(lat: object, lng: object) -> Tuple[float, float]:
    """Return (lat, lng) as floats or raise InvalidCoordinates.

    Booleans and numeric strings are rejected; JSON numbers only.
    """
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidCoordinates(
                "Invalid location coordinates. Please provide valid latitude and longitude."
            )
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):  # type: ignore[operator]
        raise InvalidCoordinates("Location coordinates are out of valid range.")
    return float(lat), float(lng)  # type: ignore[arg-type]


def location_bucket(lat: float, lng: float) -> int:
    location_hash = abs(math.sin(lat * 100) + math.cos(lng * 100)) * 1000
    return int(location_hash % len(SCENARIOS))


def destination_for(lat: float, lng: float) -> Tuple[float, float]:
    d_lat, d_lng = SCENARIOS[location_bucket(lat, lng)].offset
    return lat + d_lat, lng + d_lng


def route_link(origin: Tuple[float, float], destination: Tuple[float, float]) -> str:
    return (
        f"{MAPS_DIR_URL}&origin={origin[0]},{origin[1]}"
        f"&destination={destination[0]},{destination[1]}&travelmode=walking"
    )


def plan_route(lat: float, lng: float, destination: Optional[str] = None) -> ThreatAssessment:
    """Assess the area around (lat, lng) and suggest a walking route out of it."""
    bucket = location_bucket(lat, lng)
    scenario = SCENARIOS[bucket]
    dest = destination_for(lat, lng)
    extra = {
        "scenario": bucket,
        "origin": {"lat": lat, "lng": lng},
        "destination": {"lat": dest[0], "lng": dest[1]},
        "route_link": route_link((lat, lng), dest),
        "safe_areas": list(scenario.safe_areas),
        "caution_areas": list(scenario.caution_areas),
        "unsafe_areas": list(scenario.unsafe_areas),
        "analysis_type": "route_safety",
    }
    if destination:
        extra["requested_destination"] = destination
    return ThreatAssessment(
        threat_level=scenario.level,
        detected_risks=list(scenario.unsafe_areas),
        recommended_actions=list(ROUTE_ACTIONS[scenario.level]),
        confidence=0.7,
        explanation=scenario.description,
        extra_info=extra,
    )
