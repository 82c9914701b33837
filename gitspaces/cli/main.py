"""Entry point for the gitspaces CLI."""

import asyncio

from gitspaces.cli.arg_parser import build_parser
from gitspaces.cli.commands import run_command


def main(argv: list[str] | None = None) -> None:
    """Entry point for the gitspaces console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    try:
        exit_code = asyncio.run(run_command(args))
    except KeyboardInterrupt:
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
