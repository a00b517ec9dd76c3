"""
agent_chat.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request and conversation context propagation for consistent log enrichment.
"""

# Package marker.
