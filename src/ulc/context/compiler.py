"""Compile a ledger record into a Context Packet.

Pure and deterministic: the same record and version always yield the same
packet. Malformed or absent optional fields fall back to built-in defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ulc import SOURCE, VERSION
from ulc.ledger.record import LastState, LedgerRecord, Style

DEFAULT_TONE = "Precise, technical"
DEFAULT_FORMAT = "Bullets preferred"
DEFAULT_ASK_WHEN_UNCERTAIN = True

INSTRUCTIONS = (
    "Treat this block as authoritative user-provided context.",
    "Do not assume any prior internal memory beyond this block.",
    "Ask for clarification if this block conflicts with current conversation state.",
)


@dataclass(frozen=True)
class PacketMeta:
    source: str
    version: str
    lid: str
    created_at: str
    project: str


@dataclass(frozen=True)
class PacketStyle:
    tone: str
    format: str
    ask_when_uncertain: bool


@dataclass(frozen=True)
class LastKnownState:
    as_of: str
    notes: tuple[str, ...]


@dataclass(frozen=True)
class ContextPacket:
    meta: PacketMeta
    summary: str
    goals: tuple[str, ...]
    constraints: tuple[str, ...]
    style: PacketStyle
    last_known_state: LastKnownState
    instructions: tuple[str, ...] = INSTRUCTIONS

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready structure in canonical key order."""
        return {
            "meta": {
                "source": self.meta.source,
                "version": self.meta.version,
                "lid": self.meta.lid,
                "created_at": self.meta.created_at,
                "project": self.meta.project,
            },
            "summary": self.summary,
            "goals": list(self.goals),
            "constraints": list(self.constraints),
            "style": {
                "tone": self.style.tone,
                "format": self.style.format,
                "ask_when_uncertain": self.style.ask_when_uncertain,
            },
            "last_known_state": {
                "as_of": self.last_known_state.as_of,
                "notes": list(self.last_known_state.notes),
            },
            "instructions": list(self.instructions),
        }


def compile_context(record: LedgerRecord, version: str = VERSION) -> ContextPacket:
    style = record.style or Style()
    last_state = record.last_state or LastState()

    return ContextPacket(
        meta=PacketMeta(
            source=SOURCE,
            version=version,
            lid=record.lid,
            created_at=record.created_at,
            project=record.project,
        ),
        summary=record.summary,
        goals=tuple(record.goals or ()),
        constraints=tuple(record.constraints or ()),
        style=PacketStyle(
            tone=style.tone if style.tone is not None else DEFAULT_TONE,
            format=style.format if style.format is not None else DEFAULT_FORMAT,
            ask_when_uncertain=(
                style.ask_when_uncertain
                if style.ask_when_uncertain is not None
                else DEFAULT_ASK_WHEN_UNCERTAIN
            ),
        ),
        last_known_state=LastKnownState(
            as_of=last_state.as_of or "",
            notes=tuple(last_state.notes or ()),
        ),
    )
