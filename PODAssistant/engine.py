"""
engine.py

The workflow engine: the command API the conversation renderer talks to.

Every user event is handled under the session's lock by the turn graph.
A POD verification is split in two: the turn graph opens it (loading
message + ``AnalysisRequest``), the analysis graph runs the vision model
without holding the lock, and the result is applied back under the lock
to the exact message the request names.
"""

import logging
from typing import List, Optional, Tuple

from PODAssistant.agents.base import GeneralAssistant, VisionVerifier
from PODAssistant.docket_store import DocketStore
from PODAssistant.graph import build_analysis_graph, build_turn_graph
from PODAssistant.images import PODImage
from PODAssistant.messages import Message
from PODAssistant.session import ConversationSession, SessionRegistry
from PODAssistant.state import AnalysisRequest, SessionSnapshot

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Runs the POD workflow for any number of independent sessions."""

    def __init__(
        self,
        store: DocketStore,
        verifier: VisionVerifier,
        assistant: GeneralAssistant,
        registry: Optional[SessionRegistry] = None,
    ):
        self.store = store
        self.registry = registry if registry is not None else SessionRegistry()
        self._turn_graph = build_turn_graph(store, assistant)
        self._analysis_graph = build_analysis_graph(verifier)

    # -- Sessions --

    def open_session(self, session_id: Optional[str] = None) -> ConversationSession:
        return self.registry.create(session_id)

    def close_session(self, session_id: str) -> bool:
        return self.registry.close(session_id)

    def snapshot(self, session: ConversationSession) -> SessionSnapshot:
        return session.snapshot()

    # -- Commands --

    async def submit_text(self, session: ConversationSession, text: str) -> List[Message]:
        """Handle one typed utterance.  Blank input is ignored.

        Returns the messages appended by this event.
        """
        utterance = (text or "").strip()
        if not utterance:
            return []

        async with session.lock:
            emitted, _ = await self._run_turn(session, "text", utterance=utterance)
        return emitted

    async def reset(self, session: ConversationSession) -> List[Message]:
        """Clear the active docket and any pending evidence."""
        async with session.lock:
            emitted, _ = await self._run_turn(session, "reset")
        return emitted

    async def upload_image(self, session: ConversationSession, image: PODImage) -> List[Message]:
        """Handle an uploaded POD image.

        When a verification starts, this returns once it has been resolved;
        other events for the session may be handled meanwhile.  The
        returned list holds the user turn and the resolved verdict message.
        """
        async with session.lock:
            emitted, request = await self._run_turn(session, "image", image=image)

        if request is None:
            return emitted

        try:
            outcome = await self._analysis_graph.ainvoke({"request": request})
        finally:
            session.verification_in_flight = False

        async with session.lock:
            resolved = session.apply_analysis(request, outcome)

        if resolved is None:
            return [m for m in emitted if m.id != request.message_id]
        return [resolved if m.id == request.message_id else m for m in emitted]

    # -- Internals --

    async def _run_turn(
        self, session: ConversationSession, event: str, **payload
    ) -> Tuple[List[Message], Optional[AnalysisRequest]]:
        """Run the turn graph for one event and apply its result.

        Returns the emitted messages and, for an accepted upload, the
        ``AnalysisRequest`` to run.
        """
        if session.closed:
            logger.warning("Ignoring %s event for closed session %s", event, session.session_id)
            return [], None

        result = await self._turn_graph.ainvoke(session.workflow_input(event, **payload))
        emitted = session.apply_turn(result)

        logger.info(
            "Session %s handled %s event -> %s",
            session.session_id, event, session.state.stage.value,
        )
        return emitted, result.get("analysis_request")
