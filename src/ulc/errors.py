"""Error taxonomy. Every fatal condition raised by ulc derives from LedgerError."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class LedgerError(Exception):
    """Base class for fatal ulc errors (printed and mapped to exit status 1)."""


class LedgerIOError(LedgerError):
    """A ledger file or directory could not be read or written."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(LedgerIOError):
    """The requested ledger entry does not exist."""


class ParseError(LedgerError):
    """A ledger file is not a well-formed JSON object."""

    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"failed to read or parse JSON: {path}\n{detail}")
        self.path = path
        self.detail = detail


class ValidationError(LedgerError):
    """One or more required fields are missing, blank or invalid."""

    def __init__(
        self,
        missing_fields: Sequence[str] = (),
        invalid_fields: Sequence[str] = (),
        detail: str | None = None,
    ) -> None:
        self.missing_fields = list(missing_fields)
        self.invalid_fields = list(invalid_fields)
        parts = []
        if self.missing_fields:
            parts.append(
                f"ledger entry missing required field(s): {', '.join(self.missing_fields)}"
            )
        if self.invalid_fields:
            parts.append(f"ledger entry has invalid field(s): {', '.join(self.invalid_fields)}")
        if detail:
            parts.append(detail)
        super().__init__("\n".join(parts) or "ledger entry failed validation")


class ConflictError(LedgerError):
    """init target already exists and --force was not given."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"ledger entry already exists: {path}\nUse --force to overwrite.")
        self.path = path


class InputError(LedgerError):
    """A command-line flag is missing or carries a malformed value."""


class ConfigError(LedgerError):
    """ulc.toml could not be read or is not valid TOML."""
