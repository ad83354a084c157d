"""
graph.py

Defines and constructs the LangGraph workflows for the POD Assistant.

Two graphs are built:

- the *turn graph* handles one user event (text, image upload or reset):
  text is recorded, classified and routed to lookup / commit / freeform;
  uploads are gated on an active docket and on no verification already
  running; resets clear the session.
- the *analysis graph* runs a single POD verification: call the vision
  verifier, then resolve its verdict.

The turn graph never waits on the vision model, so a verification can be
outstanding while further text events are handled.
"""

from langgraph.graph import END, START, StateGraph

from PODAssistant.agents.base import GeneralAssistant, VisionVerifier
from PODAssistant.docket_store import DocketStore
from PODAssistant.nodes.analyze_pod import make_call_verifier_node, resolve_verdict_node
from PODAssistant.nodes.classify_intent import classify_intent_node
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
from PODAssistant.state import AnalysisState, WorkflowState


# ---------------------------------------------------------------------------
# Router functions (used by conditional edges)
# ---------------------------------------------------------------------------

def event_router(state: WorkflowState) -> str:
    """Route on the kind of user event.

    Text and reset events route by name; image events are routed through
    ``upload_router``.
    """
    event = state.get("event", "text")
    if event == "image":
        return upload_router(state)
    if event not in ("text", "reset"):
        raise ValueError(f"Unknown event: {event}")
    return event


def intent_router(state: WorkflowState) -> str:
    """Route after intent classification.

    Returns ``"commit"``, ``"lookup"`` or ``"freeform"``.
    """
    intent = state.get("intent")
    if intent is None:
        return "freeform"
    return {
        "request_commit": "commit",
        "docket_lookup": "lookup",
    }.get(intent.kind, "freeform")


def upload_router(state: WorkflowState) -> str:
    """Route an upload: ``"no_docket"``, ``"busy"`` or ``"analyze"``."""
    if state.get("active_docket") is None:
        return "no_docket"
    if state.get("verification_in_flight", False):
        return "busy"
    return "analyze"


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------

def build_turn_graph(store: DocketStore, assistant: GeneralAssistant):
    """Construct and compile the per-event workflow.

    Returns the compiled graph ready for ``await app.ainvoke(state)``.
    """
    workflow = StateGraph(WorkflowState)

    # -- Nodes --
    workflow.add_node("record_user_turn", record_user_turn_node)
    workflow.add_node("classify_intent", classify_intent_node)
    workflow.add_node("lookup_docket", make_lookup_docket_node(store))
    workflow.add_node("commit_delivery", make_commit_delivery_node(store))
    workflow.add_node("freeform_response", make_freeform_node(assistant))
    workflow.add_node("upload_without_docket", upload_without_docket_node)
    workflow.add_node("upload_busy", upload_busy_node)
    workflow.add_node("begin_analysis", begin_analysis_node)
    workflow.add_node("reset_session", reset_session_node)

    # -- Edges --
    workflow.add_conditional_edges(
        START,
        event_router,
        {
            "text": "record_user_turn",
            "reset": "reset_session",
            "no_docket": "upload_without_docket",
            "busy": "upload_busy",
            "analyze": "begin_analysis",
        },
    )

    workflow.add_edge("record_user_turn", "classify_intent")

    workflow.add_conditional_edges(
        "classify_intent",
        intent_router,
        {
            "commit": "commit_delivery",
            "lookup": "lookup_docket",
            "freeform": "freeform_response",
        },
    )

    for node in (
        "lookup_docket",
        "commit_delivery",
        "freeform_response",
        "upload_without_docket",
        "upload_busy",
        "begin_analysis",
        "reset_session",
    ):
        workflow.add_edge(node, END)

    return workflow.compile()


def build_analysis_graph(verifier: VisionVerifier):
    """Construct and compile the AnalyzePOD workflow."""
    workflow = StateGraph(AnalysisState)

    workflow.add_node("call_verifier", make_call_verifier_node(verifier))
    workflow.add_node("resolve_verdict", resolve_verdict_node)

    workflow.add_edge(START, "call_verifier")
    workflow.add_edge("call_verifier", "resolve_verdict")
    workflow.add_edge("resolve_verdict", END)

    return workflow.compile()
