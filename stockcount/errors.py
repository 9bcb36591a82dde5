from __future__ import annotations

from typing import Iterable


class StockCountError(Exception):
    """Base class for errors raised by the stockcount services."""


class ValidationError(StockCountError, ValueError):
    """Input rejected before any write. Carries human-readable messages."""

    def __init__(self, messages: Iterable[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__(" ".join(self.messages))


class DuplicateCodeError(ValidationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"A product with code {code} already exists.")


class ValidationServiceError(StockCountError):
    """The AI validation call failed (network, API or unparseable reply)."""
