"""
general_assistant.py

Adapter for the Gemini text model that handles free-form chat.
"""

import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from PODAssistant.agents.base import AgentResult, GeneralAssistant, extract_text
from PODAssistant.agents.gemini import build_llm
from PODAssistant.config import LLM_MODEL
from PODAssistant.prompts import GENERAL_ASSISTANT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class GeminiAssistant(GeneralAssistant):
    """Single-exchange logistics assistant; keeps no dialogue memory."""

    def __init__(self, llm: Optional[Any] = None):
        self._llm = llm

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = build_llm()
        return self._llm

    async def respond(self, utterance: str) -> AgentResult:
        messages = [
            SystemMessage(content=GENERAL_ASSISTANT_SYSTEM_PROMPT),
            HumanMessage(content=utterance),
        ]
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as exc:
            error_msg = f"General assistant error: {exc}"
            logger.exception(error_msg)
            return AgentResult(error=error_msg)

        return AgentResult(response=extract_text(response), raw_output={"model": LLM_MODEL})
