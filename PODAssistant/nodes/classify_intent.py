"""
classify_intent.py

Intent classification node for the POD workflow.

Classification is a small closed grammar evaluated in a fixed order:

1. ``RequestCommit`` -- the utterance mentions "update" (any case).
2. ``DocketLookup``  -- the utterance contains a ``DKT-<digits>`` token;
   only the first one is used, upper-cased.
3. ``Freeform``      -- everything else.

A commit request wins even when the utterance also carries a docket id.
"""

import logging
import re
from typing import Any, Dict, Optional

from PODAssistant.config import DOCKET_ID_PATTERN
from PODAssistant.state import (
    DocketLookup,
    Freeform,
    Intent,
    RequestCommit,
    SessionState,
    WorkflowState,
)

logger = logging.getLogger(__name__)

COMMIT_CUES = ("update", "please update")

_DOCKET_ID_RE = re.compile(DOCKET_ID_PATTERN, re.IGNORECASE)


def find_docket_id(text: str) -> Optional[str]:
    """Return the first docket id in ``text``, upper-cased, or ``None``."""
    match = _DOCKET_ID_RE.search(text)
    return match.group(0).upper() if match else None


def classify_intent(utterance: str, session_state: Optional[SessionState] = None) -> Intent:
    """Map a raw utterance to exactly one intent.

    ``session_state`` is accepted so callers can pass the current session,
    but no rule depends on it today.
    """
    lowered = utterance.lower()
    if any(cue in lowered for cue in COMMIT_CUES):
        return RequestCommit()

    docket_id = find_docket_id(utterance)
    if docket_id is not None:
        return DocketLookup(docket_id=docket_id)

    return Freeform(text=utterance)


def classify_intent_node(state: WorkflowState) -> Dict[str, Any]:
    """Classify the user utterance.

    Updates state keys: ``intent``.
    """
    intent = classify_intent(state.get("utterance", ""))
    logger.info("Intent classified: %s", intent.kind)
    return {"intent": intent}
