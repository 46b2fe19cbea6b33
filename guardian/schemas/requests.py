from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TextAnalysisRequest(BaseModel):
    """Body for /api/text-analysis.

    The chat-style frontend sends `message`, the API client sends `text`.
    """

    message: Optional[str] = None
    text: Optional[str] = None

    @property
    def content(self) -> Optional[str]:
        return self.message if self.message is not None else self.text


class AnalyzeTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input_text: Optional[str] = Field(default=None, alias="inputText")
    text: Optional[str] = None

    @property
    def content(self) -> Optional[str]:
        return self.input_text if self.input_text is not None else self.text


class ChatRequest(BaseModel):
    message: Optional[str] = None


class SafeRouteRequest(BaseModel):
    """Either a live position (`currentLocation`) or a textual route.

    `currentLocation` is kept loose so that coordinate validation can report
    a specific message instead of a generic schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_location: Optional[Any] = Field(default=None, alias="currentLocation")
    destination: Optional[str] = None
    origin: Optional[str] = None
    route_description: Optional[str] = Field(default=None, alias="routeDescription")
