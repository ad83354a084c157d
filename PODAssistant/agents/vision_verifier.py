"""
vision_verifier.py

Adapter for the Gemini multimodal model that judges POD images.

Sends the image together with the docket reference fields and returns
the model's verdict as opaque text.  Deciding whether the verdict means
"accepted" is left to the workflow.
"""

import logging
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage

from PODAssistant.agents.base import AgentResult, VisionVerifier, extract_text
from PODAssistant.agents.gemini import build_llm
from PODAssistant.config import LLM_MODEL
from PODAssistant.images import PODImage
from PODAssistant.prompts import POD_VERIFICATION_PROMPT_TEMPLATE

logger = logging.getLogger(__name__)


class GeminiVisionVerifier(VisionVerifier):
    """Thin wrapper around ``ChatGoogleGenerativeAI`` for image verification."""

    def __init__(self, llm: Optional[Any] = None):
        self._llm = llm

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = build_llm()
        return self._llm

    def build_message(self, image: PODImage, context: Dict[str, str]) -> HumanMessage:
        prompt = POD_VERIFICATION_PROMPT_TEMPLATE.format(
            docket_id=context.get("id", ""),
            customer_name=context.get("customer_name", ""),
            delivery_address=context.get("address", ""),
        )
        return HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": image.data_url},
            ]
        )

    async def analyze(self, image: PODImage, context: Dict[str, str]) -> AgentResult:
        docket_id = context.get("id", "")
        logger.info(
            "Verifying POD for %s (%s, %.2fMB)", docket_id, image.mime_type, image.size_mb
        )

        try:
            response = await self.llm.ainvoke([self.build_message(image, context)])
            verdict = extract_text(response)
        except Exception as exc:
            error_msg = f"Vision verifier error: {exc}"
            logger.exception(error_msg)
            return AgentResult(error=error_msg)

        if not verdict.strip():
            logger.warning("Vision verifier returned no text for %s", docket_id)
            return AgentResult(error="Vision model returned no usable text.")

        return AgentResult(
            response=verdict,
            raw_output={"model": LLM_MODEL, "docket_id": docket_id},
        )
