"""
Browser subcommand: browser-level operations.
"""

import argparse
import sys

from ..devtools import ChromeDevTools
from ..exceptions import CDPError


def browser_close_handler(args: argparse.Namespace) -> int:
    """
    Handle 'browser close'.

    Sends Browser.close; Chrome shuts down and drops the socket.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        with ChromeDevTools.from_config(args.config) as devtools:
            devtools.close_browser()
        print("Browser closed", file=sys.stderr)
        return 0

    except CDPError as e:
        if args.config.log_level.upper() == "DEBUG":
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    browser_parser = subparsers.add_parser(
        "browser",
        parents=[parent],
        help="Browser-level operations",
        description="Operate on the whole browser rather than a single tab",
        epilog="""
Examples:
  devtools browser close
  devtools browser close --ws-url ws://127.0.0.1:9333/devtools/browser/<id>
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    browser_parser.add_argument(
        "action",
        choices=["close"],
        help="Action to perform (currently only 'close' is supported)",
    )
    browser_parser.set_defaults(func=browser_close_handler)
