"""
commit_delivery.py

Commit node for the POD workflow.

Persists ``Delivered`` / verified for the active docket, but only once a
POD has been accepted for it.  Missing preconditions and store failures
are reported as chat messages and leave the session as it was.
"""

import logging
from typing import Any, Callable, Dict

from PODAssistant.docket_store import DocketStore, StoreError
from PODAssistant.messages import assistant_message
from PODAssistant.prompts import (
    COMMIT_FAILED,
    COMMIT_NO_DOCKET,
    COMMIT_NO_EVIDENCE,
    COMMIT_SUCCESS_TEMPLATE,
)
from PODAssistant.state import Docket, DocketStatus, WorkflowState

logger = logging.getLogger(__name__)


def _refresh(store: DocketStore, docket: Docket) -> Docket:
    """Re-read the docket after a commit, falling back to a local copy."""
    try:
        refreshed = store.get(docket.id)
    except StoreError:
        logger.warning("Could not re-read docket %s after commit", docket.id)
        refreshed = None

    if refreshed is not None:
        return refreshed
    return docket.model_copy(
        update={"status": DocketStatus.DELIVERED.value, "pod_verified": True}
    )


def make_commit_delivery_node(store: DocketStore) -> Callable[[WorkflowState], Dict[str, Any]]:
    """Bind the commit node to a docket store."""

    def commit_delivery_node(state: WorkflowState) -> Dict[str, Any]:
        """Commit the verified delivery for the active docket.

        Updates state keys: ``active_docket``, ``pending_evidence``,
        ``emitted``.
        """
        docket = state.get("active_docket")
        if docket is None:
            return {"emitted": [assistant_message(COMMIT_NO_DOCKET)]}

        if state.get("pending_evidence") is None:
            return {"emitted": [assistant_message(COMMIT_NO_EVIDENCE)]}

        try:
            updated = store.update(docket.id, DocketStatus.DELIVERED, True)
        except StoreError:
            logger.exception("Commit failed for docket %s", docket.id)
            updated = False

        if not updated:
            return {"emitted": [assistant_message(COMMIT_FAILED)]}

        logger.info("Committed delivery for docket %s", docket.id)
        return {
            "active_docket": _refresh(store, docket),
            "pending_evidence": None,
            "emitted": [
                assistant_message(COMMIT_SUCCESS_TEMPLATE.format(docket_id=docket.id))
            ],
        }

    return commit_delivery_node
