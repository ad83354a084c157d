"""
upload_pod.py

Image upload nodes for the POD workflow.

An upload only starts a verification when a docket is active and no
other verification is running for the session.  Starting one records
the user's image turn plus a ``loading`` assistant message, and hands
back an ``AnalysisRequest`` that remembers that message's id.
"""

import logging
from typing import Any, Dict

from PODAssistant.messages import assistant_message, user_message
from PODAssistant.prompts import (
    ANALYSIS_LOADING,
    UPLOAD_BUSY,
    UPLOAD_NO_DOCKET,
    UPLOAD_USER_MESSAGE,
)
from PODAssistant.state import AnalysisRequest, WorkflowState

logger = logging.getLogger(__name__)


def upload_without_docket_node(state: WorkflowState) -> Dict[str, Any]:
    logger.info("Upload rejected: no active docket")
    return {"emitted": [assistant_message(UPLOAD_NO_DOCKET)]}


def upload_busy_node(state: WorkflowState) -> Dict[str, Any]:
    logger.info("Upload rejected: verification already in flight")
    return {"emitted": [assistant_message(UPLOAD_BUSY)]}


def begin_analysis_node(state: WorkflowState) -> Dict[str, Any]:
    """Open a verification for the uploaded image.

    Updates state keys: ``emitted``, ``analysis_request``,
    ``verification_in_flight``.
    """
    docket = state["active_docket"]
    image = state["image"]

    uploaded = user_message(UPLOAD_USER_MESSAGE, image=image.data_url)
    loading = assistant_message(ANALYSIS_LOADING, status="loading")

    request = AnalysisRequest(
        session_id=state.get("session_id", ""),
        message_id=loading.id,
        docket=docket,
        image=image,
        epoch=state.get("epoch", 0),
    )
    logger.info("Verification %s started for docket %s", loading.id, docket.id)

    return {
        "emitted": [uploaded, loading],
        "analysis_request": request,
        "verification_in_flight": True,
    }
