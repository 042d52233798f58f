"""Exception types raised by the tracker core."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors the CLI reports to the user."""


class MalformedInputError(TrackerError):
    """CSV input is structurally unusable (missing columns, unnamed rows)."""


class ValidationError(TrackerError):
    """Entry-time validation failed. ``messages`` holds every problem found."""

    def __init__(self, messages: list[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
