"""Typed ledger record, load-time coercion and the ``init`` template."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

PLACEHOLDER_SUMMARY = "TODO: one-sentence purpose for this collaboration context"
PLACEHOLDER_GOALS = ["TODO", "TODO"]
DEFAULT_CONSTRAINTS = [
    "No claims of persistent AI memory",
    "No bypassing safeguards",
    "No network calls in v1",
]
TEMPLATE_TONE = "Precise, technical, minimal metaphor"
TEMPLATE_FORMAT = "Short paragraphs, explicit bullets"
INIT_NOTE = "Initialized ledger entry template via `ulc init`."

_RECORD_KEYS = (
    "lid",
    "project",
    "created_at",
    "summary",
    "goals",
    "constraints",
    "style",
    "last_state",
    "modified_at",
)


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _list_or_none(value: Any) -> list | None:
    return list(value) if isinstance(value, list) else None


def _malformed(data: dict[str, Any], checks: dict[str, Callable[[Any], bool]]) -> dict[str, Any]:
    """Known keys whose stored value fails its shape check, kept verbatim for write-back."""
    return {k: data[k] for k, ok in checks.items() if data.get(k) is not None and not ok(data[k])}


def _emit(out: dict[str, Any], key: str, value: Any, malformed: dict[str, Any]) -> None:
    if value is not None:
        out[key] = value
    elif key in malformed:
        out[key] = malformed[key]


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_dict(value: Any) -> bool:
    return isinstance(value, dict)


_STYLE_CHECKS = {"tone": _is_str, "format": _is_str, "ask_when_uncertain": _is_bool}
_LAST_STATE_CHECKS = {"as_of": _is_str, "notes": _is_list}
_RECORD_CHECKS = {
    "goals": _is_list,
    "constraints": _is_list,
    "style": _is_dict,
    "last_state": _is_dict,
    "modified_at": _is_str,
}


@dataclass
class Style:
    """Presentation preferences; ``None`` means use the compiler default."""

    tone: str | None = None
    format: str | None = None
    ask_when_uncertain: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    malformed: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Style:
        ask = data.get("ask_when_uncertain")
        return cls(
            tone=_str_or_none(data.get("tone")),
            format=_str_or_none(data.get("format")),
            ask_when_uncertain=ask if isinstance(ask, bool) else None,
            extra={k: v for k, v in data.items() if k not in _STYLE_CHECKS},
            malformed=_malformed(data, _STYLE_CHECKS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        _emit(out, "tone", self.tone, self.malformed)
        _emit(out, "format", self.format, self.malformed)
        _emit(out, "ask_when_uncertain", self.ask_when_uncertain, self.malformed)
        out.update(self.extra)
        return out


@dataclass
class LastState:
    """Where the collaboration stood: an ``as_of`` date plus free-text notes."""

    as_of: str | None = None
    notes: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    malformed: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LastState:
        return cls(
            as_of=_str_or_none(data.get("as_of")),
            notes=_list_or_none(data.get("notes")),
            extra={k: v for k, v in data.items() if k not in _LAST_STATE_CHECKS},
            malformed=_malformed(data, _LAST_STATE_CHECKS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        _emit(out, "as_of", self.as_of, self.malformed)
        _emit(out, "notes", list(self.notes) if self.notes is not None else None, self.malformed)
        out.update(self.extra)
        return out


@dataclass
class LedgerRecord:
    """A hard-validated ledger entry.

    Optional fields are ``None`` when absent *or* when the stored value had
    the wrong shape. Wrong-shaped values are kept in ``malformed`` and written
    back unchanged until an edit replaces them, so soft validation keeps
    reporting them. Unknown top-level keys ride along in ``extra``.
    """

    lid: str
    project: str
    created_at: str
    summary: str
    goals: list[str] | None = None
    constraints: list[str] | None = None
    style: Style | None = None
    last_state: LastState | None = None
    modified_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    malformed: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerRecord:
        """Coerce a raw mapping that already passed ``validate_required``."""
        style = data.get("style")
        last_state = data.get("last_state")
        return cls(
            lid=data["lid"],
            project=data["project"],
            created_at=data["created_at"],
            summary=data["summary"],
            goals=_list_or_none(data.get("goals")),
            constraints=_list_or_none(data.get("constraints")),
            style=Style.from_dict(style) if isinstance(style, dict) else None,
            last_state=LastState.from_dict(last_state) if isinstance(last_state, dict) else None,
            modified_at=_str_or_none(data.get("modified_at")),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
            malformed=_malformed(data, _RECORD_CHECKS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "lid": self.lid,
            "project": self.project,
            "created_at": self.created_at,
            "summary": self.summary,
        }
        _emit(out, "goals", list(self.goals) if self.goals is not None else None, self.malformed)
        _emit(
            out,
            "constraints",
            list(self.constraints) if self.constraints is not None else None,
            self.malformed,
        )
        _emit(out, "style", self.style.to_dict() if self.style else None, self.malformed)
        _emit(
            out,
            "last_state",
            self.last_state.to_dict() if self.last_state else None,
            self.malformed,
        )
        _emit(out, "modified_at", self.modified_at, self.malformed)
        out.update(self.extra)
        return out

    def copy(self) -> LedgerRecord:
        """Deep enough copy for patching: lists and nested sections are fresh."""
        return replace(
            self,
            goals=list(self.goals) if self.goals is not None else None,
            constraints=list(self.constraints) if self.constraints is not None else None,
            style=(
                replace(self.style, extra=dict(self.style.extra), malformed=dict(self.style.malformed))
                if self.style
                else None
            ),
            last_state=(
                replace(
                    self.last_state,
                    notes=list(self.last_state.notes) if self.last_state.notes is not None else None,
                    extra=dict(self.last_state.extra),
                    malformed=dict(self.last_state.malformed),
                )
                if self.last_state
                else None
            ),
            extra=dict(self.extra),
            malformed=dict(self.malformed),
        )


def new_record(
    lid: str,
    project: str,
    summary: str | None = None,
    goals: list[str] | None = None,
    constraints: list[str] | None = None,
    now: Callable[[], datetime] = datetime.now,
) -> LedgerRecord:
    """Build a fresh ledger entry with placeholders for anything not supplied."""
    today = now().date().isoformat()
    return LedgerRecord(
        lid=lid,
        project=project,
        created_at=today,
        summary=summary if summary and summary.strip() else PLACEHOLDER_SUMMARY,
        goals=list(goals) if goals else list(PLACEHOLDER_GOALS),
        constraints=list(constraints) if constraints else list(DEFAULT_CONSTRAINTS),
        style=Style(tone=TEMPLATE_TONE, format=TEMPLATE_FORMAT, ask_when_uncertain=True),
        last_state=LastState(as_of=today, notes=[INIT_NOTE]),
    )
