"""Field-level patching of ledger records (``ulc update``).

Edits are applied in a fixed order and each one only counts as a change if
it actually alters the record. Goals and constraints allow duplicates;
notes are append-only and deduplicated by exact string match.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ulc.errors import InputError
from ulc.ledger.record import LastState, LedgerRecord, Style
from ulc.ledger.validate import validate_required

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("yes", "true", "1")
_FALSE_VALUES = ("no", "false", "0")


def parse_yes_no(value: str | None, flag: str = "--ask-when-uncertain") -> bool | None:
    """``yes|true|1`` → True, ``no|false|0`` → False, None → None; anything else is rejected."""
    if value is None:
        return None
    s = str(value).strip().lower()
    if s in _TRUE_VALUES:
        return True
    if s in _FALSE_VALUES:
        return False
    raise InputError(f"invalid value for {flag}: {value!r} (expected yes|no)")


@dataclass
class PatchRequest:
    """The set of optional edits for one ``update`` invocation."""

    summary: str | None = None
    project: str | None = None
    add_goals: list[str] = field(default_factory=list)
    remove_goals: list[str] = field(default_factory=list)
    add_constraints: list[str] = field(default_factory=list)
    remove_constraints: list[str] = field(default_factory=list)
    tone: str | None = None
    format: str | None = None
    ask_when_uncertain: bool | None = None
    add_notes: list[str] = field(default_factory=list)


def _set_text(current: str, value: str | None) -> tuple[str, bool]:
    if value is None or not value.strip() or value == current:
        return current, False
    return value, True


def _append(items: list[str] | None, values: list[str]) -> tuple[list[str] | None, bool]:
    if not values:
        return items, False
    return (items or []) + list(values), True


def _remove(items: list[str] | None, values: list[str]) -> tuple[list[str] | None, bool]:
    if not values or items is None:
        return items, False
    kept = [item for item in items if item not in values]
    return kept, len(kept) != len(items)


def patch(
    record: LedgerRecord,
    edits: PatchRequest,
    now: Callable[[], datetime] = datetime.now,
) -> tuple[LedgerRecord, bool]:
    """Apply ``edits`` to a copy of ``record``.

    Returns ``(patched, changed)``. When nothing changed the original record
    is returned untouched; otherwise ``last_state.as_of`` and ``modified_at``
    are stamped from ``now`` and the result is hard-validated again.
    """
    rec = record.copy()
    changed = False

    def mark(flag: bool) -> None:
        nonlocal changed
        changed = changed or flag

    rec.summary, did = _set_text(rec.summary, edits.summary)
    mark(did)
    rec.project, did = _set_text(rec.project, edits.project)
    mark(did)

    rec.goals, did = _append(rec.goals, edits.add_goals)
    mark(did)
    rec.goals, did = _remove(rec.goals, edits.remove_goals)
    mark(did)

    rec.constraints, did = _append(rec.constraints, edits.add_constraints)
    mark(did)
    rec.constraints, did = _remove(rec.constraints, edits.remove_constraints)
    mark(did)

    if edits.tone is not None or edits.format is not None or edits.ask_when_uncertain is not None:
        style = rec.style or Style()
        before = (style.tone, style.format, style.ask_when_uncertain)
        if edits.tone is not None and edits.tone.strip():
            style.tone = edits.tone
        if edits.format is not None and edits.format.strip():
            style.format = edits.format
        if edits.ask_when_uncertain is not None:
            style.ask_when_uncertain = edits.ask_when_uncertain
        if (style.tone, style.format, style.ask_when_uncertain) != before:
            rec.style = style
            mark(True)

    if edits.add_notes:
        last_state = rec.last_state or LastState()
        notes = list(last_state.notes or [])
        added = False
        for note in edits.add_notes:
            if note not in notes:
                notes.append(note)
                added = True
        if added:
            last_state.notes = notes
            rec.last_state = last_state
            mark(True)

    if not changed:
        logger.debug("Patch for %s produced no changes", record.lid)
        return record, False

    stamp = now()
    rec.last_state = rec.last_state or LastState()
    rec.last_state.as_of = stamp.date().isoformat()
    if rec.last_state.notes is None:
        rec.last_state.notes = []
    rec.modified_at = stamp.isoformat(timespec="seconds")

    validate_required(rec.to_dict())
    return rec, True
