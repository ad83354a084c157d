"""Adapters for the external models the workflow consults."""

from PODAssistant.agents.base import (
    AgentResult,
    GeneralAssistant,
    VisionVerifier,
    extract_text,
)
from PODAssistant.agents.general_assistant import GeminiAssistant
from PODAssistant.agents.vision_verifier import GeminiVisionVerifier

__all__ = [
    "AgentResult",
    "GeneralAssistant",
    "VisionVerifier",
    "extract_text",
    "GeminiAssistant",
    "GeminiVisionVerifier",
]
