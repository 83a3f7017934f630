"""Hard (blocking) and soft (advisory) validation of raw ledger mappings."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ulc.errors import ValidationError

REQUIRED_FIELDS = ("lid", "project", "created_at", "summary")


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_required(data: Any) -> Any:
    """Return ``data`` unchanged if every required field is usable.

    Raises ValidationError listing every missing or blank field; failures are
    accumulated, not short-circuited.
    """
    if not isinstance(data, Mapping):
        raise ValidationError(REQUIRED_FIELDS, detail="ledger entry must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if _blank(data.get(name))]
    if missing:
        raise ValidationError(missing)
    return data


def validate_quality(data: Mapping[str, Any]) -> list[str]:
    """Collect advisory warnings; never raises on shape problems."""
    warnings: list[str] = []

    goals = data.get("goals")
    constraints = data.get("constraints")
    style = data.get("style")
    last_state = data.get("last_state")
    summary = data.get("summary")

    if goals is not None and not isinstance(goals, list):
        warnings.append("`goals` should be an array of strings.")
    if constraints is not None and not isinstance(constraints, list):
        warnings.append("`constraints` should be an array of strings.")

    if style is not None and not isinstance(style, dict):
        warnings.append("`style` should be an object.")
    if isinstance(style, dict):
        ask = style.get("ask_when_uncertain")
        if ask is not None and not isinstance(ask, bool):
            warnings.append("`style.ask_when_uncertain` should be boolean.")

    if last_state is not None and not isinstance(last_state, dict):
        warnings.append("`last_state` should be an object.")
    if isinstance(last_state, dict):
        notes = last_state.get("notes")
        if notes is not None and not isinstance(notes, list):
            warnings.append("`last_state.notes` should be an array.")

    if isinstance(summary, str) and summary.strip().upper().startswith("TODO"):
        warnings.append(
            "`summary` still looks like a TODO. "
            'Consider setting a real one (ulc update --summary "...").'
        )
    if isinstance(goals, list) and any(
        isinstance(g, str) and g.strip().upper() == "TODO" for g in goals
    ):
        warnings.append(
            "`goals` contains TODO placeholder(s). "
            "Consider setting real goals (ulc update --add-goal ... --remove-goal TODO)."
        )

    return warnings
