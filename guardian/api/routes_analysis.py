from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from guardian.core.config import get_settings
from guardian.core.errors import InvalidInput
from guardian.core.logger import get_logger
from guardian.schemas.requests import AnalyzeTextRequest, ChatRequest, TextAnalysisRequest
from guardian.schemas.responses import (
    AnalyzeTextResponse,
    AudioAnalysisResponse,
    ChatResponse,
    ImageAnalysisResponse,
    VideoAnalysisResponse,
)
from guardian.schemas.threat import ThreatAssessment
from guardian.services import playbook, text_analyzer
from guardian.services.classifier import (
    MediaSignal,
    TextSignal,
    ThreatClassifier,
    get_classifier,
    run_classifier,
)
from guardian.services.uploads import policy_for, staged

router = APIRouter()
log = get_logger(__name__)


async def _classify_upload(classifier: ThreatClassifier, modality: str,
                           file: Optional[UploadFile], note: Optional[str] = None) -> ThreatAssessment:
    async with staged(file, policy_for(modality)) as upload:
        log.info("%s upload staged: %s (%d bytes)", modality, upload.mime_type, upload.size)
        signal = MediaSignal(modality, upload.read_bytes(), upload.mime_type, note=note or None)
        return await run_classifier(classifier, signal)


def _require_text(value: Optional[str], empty_message: str) -> str:
    if value is None or not value.strip():
        raise InvalidInput(
            empty_message,
            risks=["No text provided"],
            actions=["Please provide text to analyze"],
        )
    limit = get_settings().MAX_TEXT_CHARS
    if len(value) > limit:
        raise InvalidInput(
            f"Text must be under {limit:,} characters.",
            risks=["Text too long"],
            actions=[f"Please provide text under {limit:,} characters"],
        )
    return value.strip()


@router.post("/analyze-image", response_model=ImageAnalysisResponse)
async def analyze_image(
    image: Optional[UploadFile] = File(None),
    text_note: Optional[str] = Form(None, alias="textNote"),
    classifier: ThreatClassifier = Depends(get_classifier),
):
    """Assess a photo of the user's surroundings. `textNote` adds context for the model."""
    assessment = await _classify_upload(classifier, playbook.IMAGE, image, text_note)
    return ImageAnalysisResponse.from_assessment(assessment)


@router.post("/analyze-video", response_model=VideoAnalysisResponse)
async def analyze_video(
    video: Optional[UploadFile] = File(None),
    classifier: ThreatClassifier = Depends(get_classifier),
):
    assessment = await _classify_upload(classifier, playbook.VIDEO, video)
    return VideoAnalysisResponse.from_assessment(assessment)


@router.post("/analyze-audio", response_model=AudioAnalysisResponse)
async def analyze_audio(
    audio: Optional[UploadFile] = File(None),
    classifier: ThreatClassifier = Depends(get_classifier),
):
    assessment = await _classify_upload(classifier, playbook.AUDIO, audio)
    return AudioAnalysisResponse.from_assessment(assessment)


@router.post("/text-analysis", response_model=ThreatAssessment)
async def text_analysis(
    body: TextAnalysisRequest,
    classifier: ThreatClassifier = Depends(get_classifier),
):
    """Assess a free-text description with the configured classifier."""
    text = _require_text(body.content, "Message is empty")
    signal = TextSignal(text, profile=text_analyzer.TEXT_ANALYSIS)
    return await run_classifier(classifier, signal)


@router.post("/analyze-text", response_model=AnalyzeTextResponse)
async def analyze_text(body: AnalyzeTextRequest):
    """Keyword analysis with emotional cues, danger probability and urgency flag."""
    text = _require_text(body.content, "Please enter text for analysis.")
    assessment = text_analyzer.ANALYZE_TEXT.assess(text)
    if assessment.urgent_help_needed:
        log.warning("analyze-text: urgent help indicated (level=%s)", assessment.threat_level.value)
    return AnalyzeTextResponse.from_assessment(assessment)


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest):
    """Short conversational reply plus the assessment shown in the results modal."""
    message = _require_text(body.message, "Message is required")
    assessment = text_analyzer.CHAT.assess(message)
    return ChatResponse(
        **assessment.model_dump(include=set(ThreatAssessment.model_fields)),
        response=text_analyzer.chat_reply(assessment.threat_level),
    )
