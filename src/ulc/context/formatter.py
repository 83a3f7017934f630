"""Render a Context Packet as canonical JSON or as the fixed text block."""

from __future__ import annotations

import json

from ulc.context.compiler import ContextPacket

BLOCK_START = "[CONTEXT_BLOCK_START]"
BLOCK_END = "[CONTEXT_BLOCK_END]"


def to_json(packet: ContextPacket) -> str:
    return json.dumps(packet.to_dict(), indent=2, ensure_ascii=False) + "\n"


def _section(lines: list[str], title: str, items: tuple[str, ...] | list[str]) -> None:
    lines.append(f"{title}:")
    for item in items:
        lines.append(f"- {item}")
    lines.append("")


def to_text(packet: ContextPacket) -> str:
    """Fixed-layout block; section order and ``- `` bullets are exact."""
    meta = packet.meta
    lines = [
        BLOCK_START,
        f"Source: {meta.source} v{meta.version}",
        f"Ledger ID: {meta.lid}",
        f"Project: {meta.project}",
        f"Created: {meta.created_at}",
        "",
    ]
    _section(lines, "Summary", [packet.summary])
    if packet.goals:
        _section(lines, "Goals", packet.goals)
    if packet.constraints:
        _section(lines, "Constraints", packet.constraints)

    style = packet.style
    _section(
        lines,
        "Style",
        [
            f"Tone: {style.tone}",
            f"Format: {style.format}",
            f"Ask when uncertain: {'yes' if style.ask_when_uncertain else 'no'}",
        ],
    )

    state = packet.last_known_state
    if state.as_of or state.notes:
        items = [f"As of: {state.as_of}"] if state.as_of else []
        _section(lines, "Last Known State", items + list(state.notes))

    lines.append("Instructions:")
    for instruction in packet.instructions:
        lines.append(f"- {instruction}")
    lines.append(BLOCK_END)
    return "\n".join(lines) + "\n"
