from fastapi import APIRouter

from guardian.core.config import get_settings

router = APIRouter()


@router.get("/ready")
def readiness_probe():
    return {"status": "ready", "backend": get_settings().ANALYSIS_BACKEND}


@router.get("/live")
def liveness_probe():
    return {"status": "alive"}
