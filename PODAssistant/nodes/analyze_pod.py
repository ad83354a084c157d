"""
analyze_pod.py

Nodes of the AnalyzePOD graph.

``call_verifier`` asks the vision model for a verdict; ``resolve_verdict``
turns that verdict into the final content and status of the loading
message, and decides acceptance.  The verdict is free text: a POD is
accepted when it contains the acceptance marker, case-insensitively.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from PODAssistant.agents.base import VisionVerifier
from PODAssistant.config import ACCEPTANCE_MARKER
from PODAssistant.prompts import ANALYSIS_FAILED
from PODAssistant.state import AnalysisState

logger = logging.getLogger(__name__)


def is_pod_accepted(verdict: str, marker: str = ACCEPTANCE_MARKER) -> bool:
    return marker.lower() in verdict.lower()


def make_call_verifier_node(
    verifier: VisionVerifier,
) -> Callable[[AnalysisState], Awaitable[Dict[str, Any]]]:
    """Bind the verifier node to a vision verifier."""

    async def call_verifier_node(state: AnalysisState) -> Dict[str, Any]:
        """Run the verifier.  Never raises.

        Updates state keys: ``verdict``, ``verifier_error``.
        """
        request = state["request"]

        try:
            result = await verifier.analyze(
                request.image, request.docket.reference_fields()
            )
        except Exception as exc:
            logger.exception("Vision verifier raised: %s", exc)
            return {"verdict": "", "verifier_error": str(exc) or type(exc).__name__}

        if not result.ok:
            return {"verdict": "", "verifier_error": result.error or "Empty verdict"}

        return {"verdict": result.response, "verifier_error": ""}

    return call_verifier_node


def resolve_verdict_node(state: AnalysisState) -> Dict[str, Any]:
    """Decide the loading message's final status and whether to accept.

    Updates state keys: ``status``, ``content``, ``accepted``.
    """
    request = state["request"]
    verdict = state.get("verdict", "")

    if state.get("verifier_error") or not verdict:
        logger.warning(
            "Verification %s failed: %s",
            request.message_id,
            state.get("verifier_error", "no verdict"),
        )
        return {"status": "error", "content": ANALYSIS_FAILED, "accepted": False}

    accepted = is_pod_accepted(verdict)
    logger.info(
        "Verification %s for %s: %s",
        request.message_id,
        request.docket.id,
        "accepted" if accepted else "rejected",
    )
    return {"status": "success", "content": verdict, "accepted": accepted}
