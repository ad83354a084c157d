"""
base.py

Abstract base classes for the external model adapters and the
AgentResult model they return.

Adapters never raise into the workflow: a failed call is reported
through ``AgentResult.error`` so the nodes can turn it into a chat
message.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from PODAssistant.images import PODImage


class AgentResult(BaseModel):
    """Standardised result returned by every adapter."""

    response: str = Field(
        default="",
        description="The main textual output from the model",
    )
    raw_output: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra details about the call, for logging and debugging",
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message if the invocation failed",
    )

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.response.strip())


def extract_text(response: Any) -> str:
    """Pull plain text out of a chat model response.

    Gemini may return ``content`` either as a string or as a list of
    content parts; text parts are concatenated in order.
    """
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return "" if content is None else str(content)


class VisionVerifier(ABC):
    """Judges whether an image is a valid proof of delivery for a docket."""

    @abstractmethod
    async def analyze(self, image: PODImage, context: Dict[str, str]) -> AgentResult:
        """Return the model's free-text verdict for ``image``.

        Parameters
        ----------
        image:
            The uploaded POD image.
        context:
            Docket reference fields: ``id``, ``customer_name``, ``address``.

        Returns
        -------
        AgentResult
            ``response`` holds the verdict text; ``error`` is set on failure.
        """
        ...


class GeneralAssistant(ABC):
    """Answers free-form questions that are not part of the workflow."""

    @abstractmethod
    async def respond(self, utterance: str) -> AgentResult:
        """Return a conversational reply to ``utterance``."""
        ...
