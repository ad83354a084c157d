"""Node implementations for the POD workflow graphs."""

from PODAssistant.nodes.analyze_pod import (
    is_pod_accepted,
    make_call_verifier_node,
    resolve_verdict_node,
)
from PODAssistant.nodes.classify_intent import classify_intent, classify_intent_node
from PODAssistant.nodes.commit_delivery import make_commit_delivery_node
from PODAssistant.nodes.freeform import make_freeform_node
from PODAssistant.nodes.lookup_docket import make_lookup_docket_node
from PODAssistant.nodes.record_user_turn import record_user_turn_node
from PODAssistant.nodes.reset_session import reset_session_node
from PODAssistant.nodes.upload_pod import (
    begin_analysis_node,
    upload_busy_node,
    upload_without_docket_node,
)

__all__ = [
    "classify_intent",
    "classify_intent_node",
    "record_user_turn_node",
    "make_lookup_docket_node",
    "make_commit_delivery_node",
    "make_freeform_node",
    "reset_session_node",
    "begin_analysis_node",
    "upload_busy_node",
    "upload_without_docket_node",
    "make_call_verifier_node",
    "resolve_verdict_node",
    "is_pod_accepted",
]
