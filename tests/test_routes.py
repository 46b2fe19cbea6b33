import httpx
import pytest
from fastapi.testclient import TestClient

from guardian.core.config import get_settings
from guardian.main import app
from guardian.schemas.threat import ThreatAssessment, ThreatLevel
from guardian.services import playbook, safe_route
from guardian.services.classifier import GeminiClassifier, MockClassifier, get_classifier
from guardian.services.gemini_client import GeminiClient
from guardian.services.scoring import FixedScorer


class SpyClassifier:
    name = "spy"

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result or ThreatAssessment(threat_level=ThreatLevel.LOW)
        self.error = error

    async def classify(self, signal):
        self.calls.append(signal)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(get_settings(), "UPLOAD_DIR", str(tmp_path / "uploads"))
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_classifier(clf):
    app.dependency_overrides[get_classifier] = lambda: clf
    return clf


def test_image_critical_draw(client, tmp_path):
    use_classifier(MockClassifier(FixedScorer(0.9)))
    r = client.post(
        "/api/analyze-image",
        files={"image": ("street.jpg", b"\xff\xd8fake-jpeg", "image/jpeg")},
        data={"textNote": "walking to my car"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "critical"
    assert body["recommended_actions"][:5] == list(playbook.EMERGENCY_PROTOCOL)
    assert body["detected_objects"] == list(playbook.DETECTED_LABELS[playbook.IMAGE])
    assert body["confidence_score"] == 0.75
    assert body["extra_info"]["note"] == "walking to my car"
    # staged file is removed after analysis
    assert list((tmp_path / "uploads").iterdir()) == []


def test_image_invalid_type(client):
    spy = use_classifier(SpyClassifier())
    r = client.post("/api/analyze-image", files={"image": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400
    body = r.json()
    assert "Invalid file type" in body["error"]
    assert body["threat_level"] == "unknown"
    assert spy.calls == []


def test_image_missing_file(client):
    r = client.post("/api/analyze-image", data={"textNote": "no file"})
    assert r.status_code == 400
    assert r.json()["error"] == "No image file provided"


def test_image_over_limit_never_reaches_classifier(client):
    spy = use_classifier(SpyClassifier())
    payload = b"\x00" * (10 * 1024 * 1024 + 1)
    r = client.post("/api/analyze-image", files={"image": ("big.png", payload, "image/png")})
    assert r.status_code == 400
    assert r.json()["error"] == "File size exceeds 10MB limit"
    assert spy.calls == []


def test_audio_over_configured_limit(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "MAX_AUDIO_BYTES", 1024)
    spy = use_classifier(SpyClassifier())
    r = client.post("/api/analyze-audio", files={"audio": ("a.wav", b"x" * 2048, "audio/wav")})
    assert r.status_code == 400
    assert "exceeds" in r.json()["error"]
    assert spy.calls == []


def test_video_medium_draw(client):
    use_classifier(MockClassifier(FixedScorer(0.5)))
    r = client.post("/api/analyze-video", files={"video": ("clip.mp4", b"mp4data", "video/mp4")})
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "medium"
    assert body["hazards_seen"] == list(playbook.DETECTED_LABELS[playbook.VIDEO])
    assert body["people_detected"] == list(playbook.VIDEO_PEOPLE)
    assert body["summary"] == playbook.advice_for(playbook.VIDEO, ThreatLevel.MEDIUM).narrative
    assert body["actions"] == body["recommended_actions"]


def test_video_rejects_audio_mime(client):
    r = client.post("/api/analyze-video", files={"video": ("clip.mp3", b"id3", "audio/mpeg")})
    assert r.status_code == 400
    assert "MP4, MOV, AVI, or WEBM" in r.json()["error"]


def test_audio_low_draw(client):
    use_classifier(MockClassifier(FixedScorer(0.1)))
    r = client.post("/api/analyze-audio", files={"audio": ("rec.webm", b"webm", "audio/webm")})
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "low"
    assert body["sound_events"] == list(playbook.DETECTED_LABELS[playbook.AUDIO])
    assert body["risk_reasoning"].startswith("The audio appears relatively safe")


def test_classifier_failure_returns_fallback_500(client, tmp_path):
    use_classifier(SpyClassifier(error=RuntimeError("upstream exploded")))
    r = client.post("/api/analyze-image", files={"image": ("a.png", b"png", "image/png")})
    assert r.status_code == 500
    body = r.json()
    assert body["threat_level"] == "unknown"
    assert body["recommended_actions"] == ["Please try again"]
    assert body["extra_info"]["error"] == "upstream exploded"
    assert list((tmp_path / "uploads").iterdir()) == []


def test_text_analysis_accepts_message_or_text(client):
    use_classifier(MockClassifier(FixedScorer(0.0)))
    r1 = client.post("/api/text-analysis", json={"message": "Someone is following me"})
    r2 = client.post("/api/text-analysis", json={"text": "Someone is following me"})
    assert r1.status_code == r2.status_code == 200
    assert r1.json()["threat_level"] == r2.json()["threat_level"] == "high"
    assert "explanation" in r1.json()


def test_text_analysis_empty_and_too_long(client):
    r = client.post("/api/text-analysis", json={"message": "   "})
    assert r.status_code == 400
    assert r.json()["error"] == "Message is empty"

    r = client.post("/api/text-analysis", json={"text": "a" * 10_001})
    assert r.status_code == 400
    assert r.json()["error"] == "Text must be under 10,000 characters."


def test_analyze_text_critical_example(client):
    r = client.post("/api/analyze-text", json={"inputText": "someone is following me, help!"})
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "critical"
    assert body["danger_probability"] == 0.8
    assert body["urgent_help_needed"] is True
    assert body["suggestions"] == body["recommended_actions"]


def test_analyze_text_malformed_json(client):
    r = client.post(
        "/api/analyze-text", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request format. Please try again."
    assert r.json()["threat_level"] == "unknown"


def test_chat_reply(client):
    r = client.post("/api/chat", json={"message": "I'm scared, someone is behind me, I need help"})
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "critical"
    assert body["response"].startswith("\U0001F534")
    assert body["recommended_actions"][0] == playbook.EMERGENCY_PROTOCOL[0]

    r = client.post("/api/chat", json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Message is required"


def test_safe_route_geo_is_deterministic(client):
    use_classifier(MockClassifier(FixedScorer(0.0)))
    payload = {"currentLocation": {"lat": 37.7749, "lng": -122.4194}}
    first = client.post("/api/safe-route", json=payload).json()
    second = client.post("/api/safe-route", json=payload).json()
    assert first == second

    bucket = safe_route.location_bucket(37.7749, -122.4194)
    scenario = safe_route.SCENARIOS[bucket]
    assert first["threat_level"] == scenario.level.value
    assert first["route_description"] == scenario.description
    dest = safe_route.destination_for(37.7749, -122.4194)
    assert f"destination={dest[0]},{dest[1]}" in first["route_link"]
    if scenario.caution_areas:
        assert first["caution_areas"] == list(scenario.caution_areas)
    else:
        assert "caution_areas" not in first


@pytest.mark.parametrize(
    "payload,message",
    [
        ({}, "Current location is required"),
        ({"currentLocation": "here"}, "Current location is required"),
        ({"currentLocation": {"lat": "1", "lng": 2}}, "Invalid location coordinates"),
        ({"currentLocation": {"lat": 95, "lng": 2}}, "out of valid range"),
        ({"origin": "Library"}, "Please provide origin and destination"),
    ],
)
def test_safe_route_validation(client, payload, message):
    r = client.post("/api/safe-route", json=payload)
    assert r.status_code == 400
    assert message in r.json()["error"]


def test_safe_route_text_request(client):
    spy = use_classifier(SpyClassifier(ThreatAssessment(threat_level=ThreatLevel.MEDIUM)))
    r = client.post(
        "/api/safe-route",
        json={"origin": "Library", "destination": "Dorm", "routeDescription": "through the park"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["threat_level"] == "medium"
    assert body["extra_info"]["origin"] == "Library"
    assert body["extra_info"]["analysis_type"] == "route_safety"
    assert "Additional Details: through the park" in spy.calls[0].text


def test_unknown_endpoint_fallback(client):
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json()["threat_level"] == "unknown"


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
    assert client.get("/health/live").json() == {"status": "alive"}
    assert client.get("/health/ready").json()["status"] == "ready"


def test_video_too_large_for_gemini_inline_is_400(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "GEMINI_MAX_INLINE_BYTES", 16)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    gemini = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
    use_classifier(GeminiClassifier(client=gemini))
    r = client.post("/api/analyze-video", files={"video": ("clip.mp4", b"v" * 64, "video/mp4")})
    assert r.status_code == 400
    assert "too large for AI analysis" in r.json()["error"]
    assert calls == []
