"""Services layer for PitchRoll sessions and detection."""

from .detection_service import PitchDetectionService
from .session_manager import (
    PitchSession,
    LiveSession,
    FileAnalysisSession,
    SessionManager,
)

__all__ = [
    "PitchDetectionService",
    "PitchSession",
    "LiveSession",
    "FileAnalysisSession",
    "SessionManager",
]
