"""
reset_session.py

Clears the active docket and any pending evidence.
"""

import logging
from typing import Any, Dict

from PODAssistant.messages import assistant_message
from PODAssistant.prompts import RESET_CONFIRMATION
from PODAssistant.state import WorkflowState

logger = logging.getLogger(__name__)


def reset_session_node(state: WorkflowState) -> Dict[str, Any]:
    """Return the session to ``NoDocket``.

    Bumps ``epoch`` so verifications started before the reset cannot
    attach evidence afterwards.
    """
    previous = state.get("active_docket")
    logger.info("Session reset (was %s)", previous.id if previous else "no docket")
    return {
        "active_docket": None,
        "pending_evidence": None,
        "epoch": state.get("epoch", 0) + 1,
        "emitted": [assistant_message(RESET_CONFIRMATION)],
    }
