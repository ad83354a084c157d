"""
lookup_docket.py

Docket lookup node for the POD workflow.

Fetches the docket named by a ``DocketLookup`` intent.  A hit makes it
the active docket; a miss (or a store failure) leaves the session
untouched and suggests the sample ids.
"""

import logging
from typing import Any, Callable, Dict, List

from PODAssistant.config import SAMPLE_DOCKET_IDS
from PODAssistant.docket_store import DocketStore, StoreError
from PODAssistant.messages import assistant_message
from PODAssistant.prompts import DOCKET_FOUND_TEMPLATE, DOCKET_NOT_FOUND_TEMPLATE
from PODAssistant.state import Docket, WorkflowState

logger = logging.getLogger(__name__)


def format_suggestions(ids: List[str]) -> str:
    """``["A", "B", "C"]`` -> ``"A, B, or C"``."""
    if not ids:
        return "another docket number"
    if len(ids) == 1:
        return ids[0]
    return f"{', '.join(ids[:-1])}, or {ids[-1]}"


def format_docket_found(docket: Docket) -> str:
    return DOCKET_FOUND_TEMPLATE.format(
        docket_id=docket.id,
        customer_name=docket.customer_name,
        delivery_address=docket.delivery_address,
        status=docket.status,
    )


def make_lookup_docket_node(store: DocketStore) -> Callable[[WorkflowState], Dict[str, Any]]:
    """Bind the lookup node to a docket store."""

    def lookup_docket_node(state: WorkflowState) -> Dict[str, Any]:
        """Resolve the requested docket.

        Updates state keys: ``active_docket``, ``pending_evidence``,
        ``epoch`` (only when the active docket changes), ``emitted``.
        """
        docket_id = state["intent"].docket_id

        try:
            docket = store.get(docket_id)
        except StoreError:
            logger.exception("Docket lookup failed for %s, treating as not found", docket_id)
            docket = None

        if docket is None:
            logger.info("Docket %s not found", docket_id)
            content = DOCKET_NOT_FOUND_TEMPLATE.format(
                docket_id=docket_id,
                suggestions=format_suggestions(SAMPLE_DOCKET_IDS),
            )
            return {"emitted": [assistant_message(content)]}

        update: Dict[str, Any] = {
            "active_docket": docket,
            "emitted": [assistant_message(format_docket_found(docket))],
        }

        current = state.get("active_docket")
        if current is None or current.id != docket.id:
            # Evidence is scoped to the docket it was verified against.
            update["pending_evidence"] = None
            update["epoch"] = state.get("epoch", 0) + 1

        logger.info("Active docket set to %s", docket.id)
        return update

    return lookup_docket_node
