#!/usr/bin/env python3
"""deployconf - multi-chain deployment configuration resolver.

Entry point for the deployconf command.
"""

import sys

from deployconf.cli import create_parser, run_cli


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments."""
    return create_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for deployconf."""
    args = parse_args(argv)

    exit_code = run_cli(args)
    if exit_code < 0:
        # No command given
        create_parser().print_help()
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
