"""
session.py

Explicit conversation sessions, keyed by session id.

Each ``ConversationSession`` owns its state, message log and lock; no
workflow state lives at module level, so any number of sessions can be
served by one engine.
"""

import asyncio
import logging
import uuid
from typing import Dict, Iterator, List, Optional

from PODAssistant.config import SAMPLE_DOCKET_IDS
from PODAssistant.messages import Message, MessageLog, assistant_message
from PODAssistant.prompts import (
    ACTION_CONFIRM_UPDATE,
    ACTION_UPLOAD_POD,
    CONFIRM_UPDATE_UTTERANCE,
    WELCOME_MESSAGE,
)
from PODAssistant.state import (
    AnalysisRequest,
    AnalysisState,
    SessionSnapshot,
    SessionState,
    SuggestedAction,
    WorkflowState,
)

logger = logging.getLogger(__name__)


class ConversationSession:
    """State, history and concurrency guards for one user conversation."""

    def __init__(self, session_id: Optional[str] = None, greeting: bool = True):
        self.session_id = session_id or uuid.uuid4().hex
        self.state = SessionState()
        self.messages = MessageLog()
        self.epoch = 0
        self.verification_in_flight = False
        self.closed = False
        self.lock = asyncio.Lock()

        if greeting:
            self.messages.append(assistant_message(WELCOME_MESSAGE))

    def __repr__(self) -> str:
        return (
            f"ConversationSession(id={self.session_id!r}, stage={self.state.stage.value}, "
            f"messages={len(self.messages)})"
        )

    # -- Graph input / output --

    def workflow_input(self, event: str, **payload) -> WorkflowState:
        """Build the turn-graph input for one user event."""
        return WorkflowState(
            session_id=self.session_id,
            event=event,
            utterance=payload.get("utterance", ""),
            image=payload.get("image"),
            active_docket=self.state.active_docket,
            pending_evidence=self.state.pending_evidence,
            verification_in_flight=self.verification_in_flight,
            epoch=self.epoch,
            intent=None,
            emitted=[],
            analysis_request=None,
        )

    def apply_turn(self, result: WorkflowState) -> List[Message]:
        """Adopt the state produced by the turn graph and log its messages."""
        self.state = SessionState(
            active_docket=result.get("active_docket"),
            pending_evidence=result.get("pending_evidence"),
        )
        self.epoch = result.get("epoch", self.epoch)
        # Only a turn that opened a verification may raise the flag; it is
        # cleared by the engine when that verification completes.
        if result.get("analysis_request") is not None:
            self.verification_in_flight = True

        emitted = list(result.get("emitted", []))
        self.messages.extend(emitted)
        return emitted

    def apply_analysis(
        self, request: AnalysisRequest, outcome: AnalysisState
    ) -> Optional[Message]:
        """Resolve the loading message created for ``request``.

        Evidence is attached only if the session still discusses the same
        docket in the same epoch it did when the verification started.
        Returns the resolved message, or ``None`` if the session is closed.
        """
        if self.closed:
            logger.warning(
                "Discarding verification %s: session %s is closed",
                request.message_id, self.session_id,
            )
            return None

        resolved = self.messages.resolve(
            request.message_id, outcome["status"], outcome["content"]
        )

        if outcome.get("accepted"):
            active = self.state.active_docket
            if (
                active is not None
                and active.id == request.docket.id
                and self.epoch == request.epoch
            ):
                self.state = SessionState(
                    active_docket=active, pending_evidence=request.image
                )
                logger.info("Evidence pending for docket %s", active.id)
            else:
                logger.info(
                    "Verification %s accepted but docket context changed; "
                    "evidence not attached",
                    request.message_id,
                )

        return resolved

    # -- Queries --

    def snapshot(self) -> SessionSnapshot:
        """Current state as the renderer needs it, with suggested actions."""
        docket = self.state.active_docket
        evidence_pending = self.state.pending_evidence is not None

        if docket is None:
            actions = [
                SuggestedAction(label=docket_id, kind="utterance", value=docket_id)
                for docket_id in SAMPLE_DOCKET_IDS
            ]
        else:
            actions = [SuggestedAction(label=ACTION_UPLOAD_POD, kind="upload")]
            if evidence_pending:
                actions.append(
                    SuggestedAction(
                        label=ACTION_CONFIRM_UPDATE,
                        kind="utterance",
                        value=CONFIRM_UPDATE_UTTERANCE,
                    )
                )

        return SessionSnapshot(
            session_id=self.session_id,
            stage=self.state.stage,
            active_docket=docket,
            evidence_pending=evidence_pending,
            verification_in_flight=self.verification_in_flight,
            suggested_actions=actions,
        )


class SessionRegistry:
    """In-memory sessions keyed by session id."""

    def __init__(self):
        self._sessions: Dict[str, ConversationSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[ConversationSession]:
        return iter(list(self._sessions.values()))

    def create(self, session_id: Optional[str] = None, greeting: bool = True) -> ConversationSession:
        if session_id is not None and session_id in self._sessions:
            raise ValueError(f"Session already exists: {session_id}")
        session = ConversationSession(session_id=session_id, greeting=greeting)
        self._sessions[session.session_id] = session
        logger.info("Opened session %s", session.session_id)
        return session

    def get(self, session_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        """Drop a session.  In-flight verifications for it are discarded."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.closed = True
        logger.info("Closed session %s", session_id)
        return True
