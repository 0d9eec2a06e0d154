"""Statebot: turn-based conversational state machine with pluggable persistence.

A chat-bot endpoint that walks each user through a short profile
collection topic (name, then telephone number), keeping conversation
and user state in a key-value store that can be swapped without
touching the engine.
"""

__version__ = "0.1.0"
