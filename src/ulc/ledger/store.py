"""File-backed ledger store: one ``<lid>.json`` per record under a root directory."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ulc.errors import InputError, LedgerIOError, NotFoundError, ParseError, ValidationError
from ulc.ledger.record import LedgerRecord
from ulc.ledger.validate import validate_quality, validate_required

logger = logging.getLogger(__name__)

_UNSAFE_LID = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


@dataclass
class LedgerEntry:
    """One row of ``ulc list`` output."""

    lid: str
    project: str
    created_at: str
    summary: str
    file: str


@dataclass
class SkippedFile:
    file: str
    reason: str


@dataclass
class Listing:
    entries: list[LedgerEntry] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)


class LedgerStore:
    """Read/write access to a ledger directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    # ── Paths ─────────────────────────────────────────────────

    def path_for(self, lid: str) -> Path:
        """Map a LID to its file; rejects ids that would escape the directory."""
        if not lid or not lid.strip() or lid.startswith(".") or _UNSAFE_LID.search(lid):
            raise InputError(f"invalid value for --lid: {lid!r} (must be a plain file-name stem)")
        return self.root / f"{lid}.json"

    def exists(self, lid: str) -> bool:
        return self.path_for(lid).is_file()

    # ── Read ──────────────────────────────────────────────────

    def _read_json(self, path: Path) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LedgerIOError(f"failed to read ledger file: {path}\n{e}", path) from e
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(path, str(e)) from e

    def load_raw(self, lid: str) -> dict[str, Any]:
        """Return the parsed JSON object for ``lid`` without validation."""
        path = self.path_for(lid)
        if not path.is_file():
            raise NotFoundError(
                f"ledger entry not found: {path}\n"
                f"Tip: ulc init --lid {lid} --project \"<name>\", or point --ledger-dir elsewhere",
                path,
            )
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise ParseError(path, "top-level JSON value must be an object")
        return data

    def load(self, lid: str) -> LedgerRecord:
        """Load, hard-validate and coerce a record."""
        record, _ = self.load_checked(lid)
        return record

    def load_checked(self, lid: str) -> tuple[LedgerRecord, list[str]]:
        """Like ``load`` but also return soft-validation warnings for the raw file."""
        data = validate_required(self.load_raw(lid))
        if data["lid"] != lid:
            raise ValidationError(
                invalid_fields=["lid"],
                detail=f"`lid` is {data['lid']!r} but the file is named {lid}.json",
            )
        return LedgerRecord.from_dict(data), validate_quality(data)

    # ── Write ─────────────────────────────────────────────────

    def save(self, record: LedgerRecord) -> Path:
        """Write ``record`` as pretty-printed JSON and return its path."""
        path = self.path_for(record.lid)
        text = json.dumps(record.to_dict(), indent=2, ensure_ascii=False) + "\n"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise LedgerIOError(f"failed to write ledger file: {path}\n{e}", path) from e
        logger.info("Wrote ledger entry %s (%d bytes)", path, len(text))
        return path

    # ── Listing ───────────────────────────────────────────────

    def list(self) -> Listing:
        """Best-effort scan of the directory, newest ``created_at`` first.

        Unreadable, non-JSON or incomplete files are skipped and reported in
        ``Listing.skipped`` instead of raising.
        """
        listing = Listing()
        if not self.root.is_dir():
            return listing

        for path in sorted(self.root.glob("*.json")):
            if not path.is_file():
                continue
            try:
                data = self._read_json(path)
            except (LedgerIOError, ParseError) as e:
                self._skip(listing, path, str(e).splitlines()[-1])
                continue
            if not isinstance(data, dict):
                self._skip(listing, path, "not a JSON object")
                continue
            lid, project = data.get("lid"), data.get("project")
            if not isinstance(lid, str) or not lid or not isinstance(project, str) or not project:
                self._skip(listing, path, "missing lid or project")
                continue
            created_at = data.get("created_at")
            summary = data.get("summary")
            listing.entries.append(
                LedgerEntry(
                    lid=lid,
                    project=project,
                    created_at=created_at if isinstance(created_at, str) else "",
                    summary=summary if isinstance(summary, str) else "",
                    file=str(path),
                )
            )

        # Lexicographic on purpose: correct for ISO-8601 values, no date parsing.
        listing.entries.sort(key=lambda e: e.created_at, reverse=True)
        return listing

    def _skip(self, listing: Listing, path: Path, reason: str) -> None:
        logger.debug("Skipping %s: %s", path, reason)
        listing.skipped.append(SkippedFile(file=str(path), reason=reason))
