# blockpilot/exceptions.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Exceptions for the chat command agent."""


class MovementUnavailableError(Exception):
    """Raised when the movement controller cannot be reached."""
    pass


class ProtocolMismatchError(Exception):
    """Raised by a session factory when client and server versions disagree.

    The supervisor also recognizes version mismatches from the error text,
    so factories are free to raise their own exception types.
    """
    pass


class SessionFactoryError(Exception):
    """Raised when the configured session factory cannot be loaded."""
    pass
