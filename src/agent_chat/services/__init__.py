"""
agent_chat.services

Service layer.

Responsibilities:
- Chat session composition (backend client + live run + HITL controller).
- Message construction and filtering helpers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer only delegates here; it never touches the HITL core directly.
