"""
messages.py

Chat message records and the append-only message log of a session.

A message is immutable once created, with one exception: an assistant
message created in ``loading`` status is resolved exactly once into
``success`` or ``error``.  Resolution is addressed by message id so that
an asynchronous call always lands on the message it created, never on
whichever message happens to be last.
"""

import logging
import uuid
from typing import Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]
MessageStatus = Literal["loading", "success", "error"]


class MessageResolutionError(Exception):
    """Raised when a resolution targets an unknown or already-final message."""

    pass


def new_message_id() -> str:
    return uuid.uuid4().hex[:12]


class Message(BaseModel):
    """One conversational turn."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str
    image: Optional[str] = Field(
        default=None, description="Image payload as a data URL, if any"
    )
    status: Optional[MessageStatus] = Field(
        default=None,
        description="Set only for turns backed by an asynchronous verification",
    )


def user_message(content: str, image: Optional[str] = None) -> Message:
    return Message(role="user", content=content, image=image)


def assistant_message(content: str, status: Optional[MessageStatus] = None) -> Message:
    return Message(role="assistant", content=content, status=status)


class MessageLog:
    """Ordered, append-only history of messages for one session."""

    def __init__(self, messages: Optional[List[Message]] = None):
        self._messages: List[Message] = list(messages or [])
        self._index = {m.id: i for i, m in enumerate(self._messages)}

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, position: int) -> Message:
        return self._messages[position]

    def append(self, message: Message) -> Message:
        if message.id in self._index:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._index[message.id] = len(self._messages)
        self._messages.append(message)
        return message

    def extend(self, messages: List[Message]) -> None:
        for message in messages:
            self.append(message)

    def get(self, message_id: str) -> Optional[Message]:
        position = self._index.get(message_id)
        return None if position is None else self._messages[position]

    def resolve(self, message_id: str, status: MessageStatus, content: str) -> Message:
        """Rewrite a ``loading`` message into its final status and content.

        Raises
        ------
        MessageResolutionError
            If ``message_id`` is unknown, the message is not ``loading``,
            or ``status`` is not a final status.
        """
        if status not in ("success", "error"):
            raise MessageResolutionError(f"Cannot resolve to status '{status}'")

        position = self._index.get(message_id)
        if position is None:
            raise MessageResolutionError(f"Unknown message id: {message_id}")

        current = self._messages[position]
        if current.status != "loading":
            raise MessageResolutionError(
                f"Message {message_id} is not loading (status={current.status})"
            )

        resolved = current.model_copy(update={"status": status, "content": content})
        self._messages[position] = resolved
        logger.info("Resolved message %s -> %s", message_id, status)
        return resolved

    def to_list(self) -> List[dict]:
        return [m.model_dump() for m in self._messages]
