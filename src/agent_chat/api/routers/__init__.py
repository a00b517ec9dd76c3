"""
agent_chat.api.routers

Router modules (health, session).
"""
