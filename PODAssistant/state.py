"""
state.py

Defines the LangGraph state TypedDicts and all Pydantic schemas used
across the POD Assistant workflow (dockets, intents, session state,
verification requests and UI snapshots).
"""

import operator
from enum import Enum
from typing import Annotated, List, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from PODAssistant.images import PODImage
from PODAssistant.messages import Message


# ---------------------------------------------------------------------------
# Dockets
# ---------------------------------------------------------------------------

class DocketStatus(str, Enum):
    """Statuses the workflow itself writes.  Stored dockets may carry others."""

    PENDING = "Pending"
    DELIVERED = "Delivered"


class Docket(BaseModel):
    """Snapshot of a delivery record as read from the docket store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^DKT-\d+$", description="Docket identifier")
    customer_name: str
    delivery_address: str
    status: str = Field(
        default=DocketStatus.PENDING.value,
        description="Delivery status as stored, e.g. Pending or Delivered",
    )
    pod_verified: bool = False
    updated_at: Optional[str] = Field(
        default=None, description="Last-updated timestamp as stored"
    )

    def reference_fields(self) -> dict:
        """Fields a POD is checked against."""
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "address": self.delivery_address,
        }


# ---------------------------------------------------------------------------
# Intents -- tagged variants produced by the classifier
# ---------------------------------------------------------------------------

class RequestCommit(BaseModel):
    """The user asked to commit the verified delivery."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["request_commit"] = "request_commit"


class DocketLookup(BaseModel):
    """The user mentioned a docket id."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["docket_lookup"] = "docket_lookup"
    docket_id: str


class Freeform(BaseModel):
    """Anything else; forwarded to the general assistant."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["freeform"] = "freeform"
    text: str


Intent = Annotated[
    Union[RequestCommit, DocketLookup, Freeform], Field(discriminator="kind")
]


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class WorkflowStage(str, Enum):
    NO_DOCKET = "NoDocket"
    DOCKET_ACTIVE = "DocketActive"
    EVIDENCE_PENDING = "EvidencePending"


class SessionState(BaseModel):
    """Conversation state owned by a single session."""

    model_config = ConfigDict(frozen=True)

    active_docket: Optional[Docket] = None
    pending_evidence: Optional[PODImage] = None

    @model_validator(mode="after")
    def _evidence_requires_docket(self) -> "SessionState":
        if self.pending_evidence is not None and self.active_docket is None:
            raise ValueError("pending_evidence requires an active_docket")
        return self

    @property
    def stage(self) -> WorkflowStage:
        if self.active_docket is None:
            return WorkflowStage.NO_DOCKET
        if self.pending_evidence is None:
            return WorkflowStage.DOCKET_ACTIVE
        return WorkflowStage.EVIDENCE_PENDING


class AnalysisRequest(BaseModel):
    """Everything needed to run and later apply one POD verification."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    message_id: str = Field(..., description="Id of the loading message to resolve")
    docket: Docket
    image: PODImage
    epoch: int = Field(..., description="Session epoch when the analysis started")


class SuggestedAction(BaseModel):
    """A contextual button the UI can render."""

    label: str
    kind: Literal["utterance", "upload"]
    value: Optional[str] = Field(
        default=None, description="Utterance to submit when kind is 'utterance'"
    )


class SessionSnapshot(BaseModel):
    """Read-only view of a session for the conversation renderer."""

    session_id: str
    stage: WorkflowStage
    active_docket: Optional[Docket] = None
    evidence_pending: bool = False
    verification_in_flight: bool = False
    suggested_actions: List[SuggestedAction] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# LangGraph states
# ---------------------------------------------------------------------------

class WorkflowState(TypedDict, total=False):
    """State flowing through the turn graph for a single user event."""

    # -- Input --
    session_id: str
    event: str                                # text / image / reset
    utterance: str                            # raw user text
    image: Optional[PODImage]                 # uploaded image, for image events

    # -- Session state --
    active_docket: Optional[Docket]
    pending_evidence: Optional[PODImage]
    verification_in_flight: bool
    epoch: int                                # bumped when the docket context changes

    # -- Classification --
    intent: Optional[Intent]

    # -- Output --
    emitted: Annotated[List[Message], operator.add]
    analysis_request: Optional[AnalysisRequest]


class AnalysisState(TypedDict, total=False):
    """State flowing through the AnalyzePOD graph."""

    request: AnalysisRequest
    verdict: str                              # raw verifier text
    verifier_error: str                       # set when the verifier failed
    status: str                               # success / error
    content: str                              # final message content
    accepted: bool                            # acceptance marker found
