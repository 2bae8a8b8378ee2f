"""Entry point for the portus CLI."""

import logging
import os
import sys


def main():
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=os.environ.get("PORTUS_LOG_LEVEL", "WARNING").upper(),
    )

    from portus.cli import build_parser

    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
