"""
POD Assistant - conversational proof-of-delivery verification.

Looks up delivery dockets, sends uploaded POD photos to a vision model
for verification, and commits the verified delivery status once the
operator confirms. The conversation flow is a LangGraph workflow driven
by the ``WorkflowEngine``.
"""
