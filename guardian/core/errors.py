from __future__ import annotations

from typing import Any, Dict, List, Optional


class GuardianError(Exception):
    """Base for errors rendered as a fallback assessment body."""

    status_code = 500
    default_risks: List[str] = ["Analysis failed"]
    default_actions: List[str] = ["Please try again"]

    def __init__(self, message: str, *, risks: Optional[List[str]] = None,
                 actions: Optional[List[str]] = None,
                 extra_info: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.risks = risks if risks is not None else list(self.default_risks)
        self.actions = actions if actions is not None else list(self.default_actions)
        self.extra_info = extra_info or {}


class InvalidInput(GuardianError):
    status_code = 400
    default_risks = ["Invalid request"]
    default_actions = ["Please check your input and try again"]


class AnalysisFailed(GuardianError):
    status_code = 500
