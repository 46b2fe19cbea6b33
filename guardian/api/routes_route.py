from fastapi import APIRouter, Depends

from guardian.core.errors import InvalidInput
from guardian.core.logger import get_logger
from guardian.schemas.requests import SafeRouteRequest
from guardian.schemas.responses import SafeRouteResponse
from guardian.services import safe_route
from guardian.services.classifier import (
    GeoSignal,
    TextSignal,
    ThreatClassifier,
    get_classifier,
    run_classifier,
)

router = APIRouter()
log = get_logger(__name__)


def _route_text(origin: str, destination: str, details: str | None) -> str:
    lines = [
        "Route Analysis Request:",
        f"Origin: {origin}",
        f"Destination: {destination}",
    ]
    if details:
        lines.append(f"Additional Details: {details}")
    lines.append("")
    lines.append("Please analyze this route for safety considerations.")
    return "\n".join(lines)


@router.post("/safe-route", response_model=SafeRouteResponse, response_model_exclude_none=True)
async def plan_safe_route(
    body: SafeRouteRequest,
    classifier: ThreatClassifier = Depends(get_classifier),
):
    """Suggest a safer walking route.

    With `currentLocation` the area is assessed from the coordinates alone and
    a maps link to a nearby safe point is returned. With `origin` and
    `destination` strings the route description is assessed as text instead.
    """
    if body.current_location is None and body.origin:
        if not body.destination:
            raise InvalidInput(
                "Please provide origin and destination",
                risks=["Missing route information"],
                actions=["Please provide origin and destination"],
            )
        signal = TextSignal(_route_text(body.origin, body.destination, body.route_description))
        assessment = await run_classifier(classifier, signal)
        assessment = assessment.model_copy(update={"extra_info": {
            **assessment.extra_info,
            "origin": body.origin,
            "destination": body.destination,
            "analysis_type": "route_safety",
        }})
        return SafeRouteResponse.from_assessment(assessment)

    location = body.current_location
    if not isinstance(location, dict):
        raise InvalidInput(
            "Current location is required",
            risks=["Missing route information"],
            actions=["Please share your current location"],
        )
    try:
        lat, lng = safe_route.validate_coordinates(location.get("lat"), location.get("lng"))
    except safe_route.InvalidCoordinates as e:
        raise InvalidInput(
            str(e),
            risks=["Invalid location"],
            actions=["Please share a valid location"],
        ) from e

    assessment = await run_classifier(classifier, GeoSignal(lat, lng, body.destination))
    log.info("safe-route: scenario=%s level=%s",
             assessment.extra_info.get("scenario"), assessment.threat_level.value)
    return SafeRouteResponse.from_assessment(assessment)
