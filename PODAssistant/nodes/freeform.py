"""
freeform.py

Fallback node for utterances outside the workflow grammar.

Forwards the text to the general assistant and relays its reply.  Has
no effect on session state.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from PODAssistant.agents.base import GeneralAssistant
from PODAssistant.messages import assistant_message
from PODAssistant.prompts import FREEFORM_EMPTY, FREEFORM_UNAVAILABLE
from PODAssistant.state import WorkflowState

logger = logging.getLogger(__name__)


def make_freeform_node(
    assistant: GeneralAssistant,
) -> Callable[[WorkflowState], Awaitable[Dict[str, Any]]]:
    """Bind the freeform node to a general assistant."""

    async def freeform_response_node(state: WorkflowState) -> Dict[str, Any]:
        text = state["intent"].text

        try:
            result = await assistant.respond(text)
        except Exception as exc:
            logger.exception("General assistant raised: %s", exc)
            return {"emitted": [assistant_message(FREEFORM_UNAVAILABLE)]}

        if result.error:
            logger.warning("General assistant unavailable: %s", result.error)
            content = FREEFORM_UNAVAILABLE
        elif not result.response.strip():
            content = FREEFORM_EMPTY
        else:
            content = result.response

        return {"emitted": [assistant_message(content)]}

    return freeform_response_node
