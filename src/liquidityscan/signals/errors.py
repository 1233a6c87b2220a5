"""Signal intake errors."""

from __future__ import annotations

from typing import Any


class SignalValidationError(Exception):
    """A webhook payload failed validation; nothing from it was accepted.

    ``errors`` holds one dict per violation with ``index`` (position in the
    batch, None for a single payload), ``field`` and ``message``.
    """

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        fields = ", ".join(sorted({str(e["field"]) for e in errors}))
        super().__init__(f"invalid signal payload: {fields}")

    @property
    def fields(self) -> list[str]:
        return sorted({str(e["field"]) for e in self.errors})
