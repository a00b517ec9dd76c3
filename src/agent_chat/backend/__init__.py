"""
agent_chat.backend

Boundary to the agent-orchestration backend.

Responsibilities:
- HTTP client for threads, thread state, and streamed runs.
- In-memory tracking of the run currently being streamed.
"""

# Package marker.
