import argparse
import logging
import sys

from polski_ls.common.config import settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="polski-ls",
        description="Polish language LSP server with completion support",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Listen on standard input/output rather than TCP.",
    )
    args = parser.parse_args(argv)

    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)

    if not args.stdio:
        print("TCP mode not implemented. Use --stdio", file=sys.stderr)
        return 2

    from polski_ls.lsp.server import start

    start(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
