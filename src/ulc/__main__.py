"""Entry point: ulc <command> / python -m ulc <command>

- wake    Emit a context block from a ledger entry
- init    Create a new ledger entry template
- list    List ledger entries
- update  Patch an existing ledger entry
- help    Show usage (also: no arguments)
"""

from __future__ import annotations

import logging
import sys

from ulc.cli import COMMANDS, USAGE, build_command_parser, build_parser
from ulc.config import load_config
from ulc.errors import LedgerError

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    top = build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    cmd = top.command

    if top.help or cmd in (None, "help"):
        print(USAGE, end="")
        return 0

    handler = COMMANDS.get(cmd)
    if handler is None:
        print(f"ulc: unknown command: {cmd}\nRun: ulc help", file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return 1

    args = build_command_parser(cmd).parse_args(top.args)

    try:
        config = load_config(top.config)
        _setup_logging(config.log_level)
        return handler(args, config)
    except LedgerError as e:
        logger.debug("%s failed", cmd, exc_info=True)
        print(f"ulc: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
