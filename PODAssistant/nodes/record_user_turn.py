"""
record_user_turn.py

Appends the user's text to the conversation before it is handled.
"""

from typing import Any, Dict

from PODAssistant.messages import user_message
from PODAssistant.state import WorkflowState


def record_user_turn_node(state: WorkflowState) -> Dict[str, Any]:
    return {"emitted": [user_message(state.get("utterance", ""))]}
