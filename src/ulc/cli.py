"""Command handlers for wake / init / list / update.

Each ``cmd_*`` takes the parsed per-command namespace plus the loaded config,
writes user-facing output to stdout (warnings to stderr) and returns an exit
status. Fatal conditions are raised as ``LedgerError`` and handled in
``ulc.__main__``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from ulc import VERSION
from ulc.config import UlcConfig
from ulc.context.compiler import compile_context
from ulc.context.formatter import to_json, to_text
from ulc.errors import ConflictError, InputError, LedgerIOError
from ulc.ledger.patch import PatchRequest, parse_yes_no, patch
from ulc.ledger.record import new_record
from ulc.ledger.store import LedgerStore
from ulc.ledger.validate import validate_quality

logger = logging.getLogger(__name__)

USAGE = f"""\
Universal Ledger CLI (ULC) v{VERSION}

Usage:
  ulc [--config <path>] <command> [options]

Commands:
  wake            Emit a Pre-Conversation Context Block (PCCB) from a Ledger entry
  init            Create a new Ledger entry template
  list            List Ledger entries in the ledger directory
  update          Patch fields of an existing Ledger entry
  help            Show this help

Run `ulc <command> --help` for command options.

Examples:
  ulc init --lid 2026-01-01-TEST --project "Universal Ledger CLI"
  ulc list
  ulc wake --lid 2026-01-01-TEST
  ulc update --lid 2026-01-01-TEST --add-goal "Ship v1" --remove-goal TODO
  ulc wake --lid 2025-12-21-CODA --ledger-dir ./examples/ledger
"""


# ── Argument parsing ──────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    """Top-level parser: global options, then the command and its raw arguments."""
    p = argparse.ArgumentParser(prog="ulc", add_help=False)
    p.add_argument("--config", type=Path, default=None)
    p.add_argument("-h", "--help", action="store_true")
    p.add_argument("command", nargs="?")
    p.add_argument("args", nargs=argparse.REMAINDER)
    return p


def _ledger_dir_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--ledger-dir", help="Override ledger directory (default: ~/.ulc/ledger)"
    )


def build_command_parser(command: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=f"ulc {command}")
    p.add_argument("--lid", help="Ledger ID (required)")
    _ledger_dir_arg(p)

    if command == "wake":
        p.add_argument("--json", action="store_true", help="Output structured JSON instead of text")
        p.add_argument("--file", help="Write output to a file (also prints to stdout)")
    elif command == "init":
        p.add_argument("--project", help="Project name (required)")
        p.add_argument("--summary", help="Set initial summary")
        p.add_argument("--goal", action="append", default=[], help="Add an initial goal (repeatable)")
        p.add_argument(
            "--constraint", action="append", default=[], help="Add an initial constraint (repeatable)"
        )
        p.add_argument("--force", action="store_true", help="Overwrite if the file already exists")
    elif command == "list":
        p.add_argument("--json", action="store_true", help="Output structured JSON")
    elif command == "update":
        p.add_argument("--summary", help="Set summary")
        p.add_argument("--project", help="Set project name")
        p.add_argument("--add-goal", action="append", default=[], help="Append a goal")
        p.add_argument("--remove-goal", action="append", default=[], help="Remove a goal (exact match)")
        p.add_argument("--add-constraint", action="append", default=[], help="Append a constraint")
        p.add_argument(
            "--remove-constraint", action="append", default=[], help="Remove a constraint (exact match)"
        )
        p.add_argument("--tone", help="Set style.tone")
        p.add_argument("--format", help="Set style.format")
        p.add_argument("--ask-when-uncertain", metavar="yes|no", help="Set style.ask_when_uncertain")
        p.add_argument(
            "--add-note", action="append", default=[], help="Append a note to last_state.notes"
        )
    return p


def _require(value: str | None, message: str) -> str:
    if not value:
        raise InputError(message)
    return value


def _store(args: argparse.Namespace, config: UlcConfig) -> LedgerStore:
    if args.ledger_dir:
        return LedgerStore(Path(args.ledger_dir).expanduser().resolve())
    return LedgerStore(config.ledger_dir)


def _warn(warnings: list[str]) -> None:
    for w in warnings:
        print(f"ulc: warning: {w}", file=sys.stderr)


# ── Commands ──────────────────────────────────────────────


def cmd_wake(args: argparse.Namespace, config: UlcConfig) -> int:
    lid = _require(args.lid, "wake requires --lid <LID>")
    store = _store(args, config)

    record, warnings = store.load_checked(lid)
    _warn(warnings)

    packet = compile_context(record)
    output = to_json(packet) if args.json else to_text(packet)

    if args.file:
        target = Path(args.file)
        try:
            target.resolve().parent.mkdir(parents=True, exist_ok=True)
            target.write_text(output, encoding="utf-8")
        except OSError as e:
            raise LedgerIOError(f"failed to write output file: {target}\n{e}", target) from e
        logger.info("Wrote context block to %s", target)

    sys.stdout.write(output)
    return 0


def cmd_init(args: argparse.Namespace, config: UlcConfig) -> int:
    lid = _require(args.lid, "init requires --lid <LID>")
    project = _require(args.project, 'init requires --project "<name>"')
    store = _store(args, config)

    path = store.path_for(lid)
    if path.exists() and not args.force:
        raise ConflictError(path)

    record = new_record(
        lid,
        project,
        summary=args.summary,
        goals=args.goal,
        constraints=args.constraint,
    )
    path = store.save(record)
    print(f"Created: {path}")
    return 0


def cmd_list(args: argparse.Namespace, config: UlcConfig) -> int:
    store = _store(args, config)
    listing = store.list()

    if args.json:
        envelope: dict = {
            "ledger_dir": str(store.root),
            "entries": [asdict(e) for e in listing.entries],
        }
        if listing.skipped:
            envelope["skipped"] = [asdict(s) for s in listing.skipped]
        print(json.dumps(envelope, indent=2, ensure_ascii=False))
        return 0

    if not listing.entries:
        print(f"No ledger entries found in: {store.root}")
        print('Tip: ulc init --lid <LID> --project "<name>"')
        return 0

    print(f"Ledger directory: {store.root}\n")
    for e in listing.entries:
        print(f"- {e.lid} — {e.project}")
        if e.created_at:
            print(f"  created: {e.created_at}")
        if e.summary:
            print(f"  summary: {e.summary}")
    return 0


def cmd_update(args: argparse.Namespace, config: UlcConfig) -> int:
    lid = _require(args.lid, "update requires --lid <LID>")
    edits = PatchRequest(
        summary=args.summary,
        project=args.project,
        add_goals=args.add_goal,
        remove_goals=args.remove_goal,
        add_constraints=args.add_constraint,
        remove_constraints=args.remove_constraint,
        tone=args.tone,
        format=args.format,
        ask_when_uncertain=parse_yes_no(args.ask_when_uncertain),
        add_notes=args.add_note,
    )
    store = _store(args, config)

    record = store.load(lid)
    patched, changed = patch(record, edits)
    if not changed:
        print("No changes applied.")
        return 0

    _warn(validate_quality(patched.to_dict()))
    path = store.save(patched)
    print(f"Updated: {path}")
    return 0


COMMANDS = {
    "wake": cmd_wake,
    "init": cmd_init,
    "list": cmd_list,
    "update": cmd_update,
}
