"""Game domain services: boards, sessions, the room registry and the
transport-agnostic game service.

This package holds the game rules and is imported by HTTP routes and socket
handlers, keeping transport concerns separated from core game mechanics.
"""
