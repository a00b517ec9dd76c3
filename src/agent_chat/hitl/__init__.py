"""
agent_chat.hitl

Human-in-the-loop interrupt synchronization.

Responsibilities:
- Detect a paused run from the live stream or the persisted thread state.
- Display at most one interrupt per conversation and resolve it exactly once.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package performs HTTP directly; callers inject the probe, the state
# query, and the resume submitter so the protocol stays testable without a backend.
