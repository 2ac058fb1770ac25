"""
Main CLI entry point for the devtools command.

Usage:
    python -m chrome_devtools.cli.main <subcommand> [options]

Subcommands:
    open    - Open a tab, navigate and report title/URL
    eval    - Evaluate JavaScript in a freshly opened tab
    find    - Print the outerHTML of the first element matching a selector
    browser - Browser-level operations (close)
"""

import argparse
import sys
from typing import List, Optional

from chrome_devtools.config import Configuration, DEFAULT_CONFIG_FILE
from chrome_devtools.logging_setup import setup_logging


def create_parent_parser() -> argparse.ArgumentParser:
    """
    Create parent parser with global options shared across all subcommands.

    Defaults are None so that unset flags fall through to environment
    variables, the config file and finally built-in defaults.

    Returns:
        ArgumentParser with global options
    """
    parent = argparse.ArgumentParser(add_help=False)

    parent.add_argument(
        "--ws-url",
        dest="websocket_url",
        help="Browser WebSocket debugger URL (default: ws://127.0.0.1:9222/devtools/browser)",
    )
    parent.add_argument(
        "--timeout",
        type=float,
        help="Connect timeout in seconds (default: 15.0)",
    )
    parent.add_argument(
        "--load-timeout",
        type=float,
        help="Seconds to wait for page load (default: wait indefinitely)",
    )
    parent.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on unexpected protocol messages instead of logging them",
    )
    parent.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )
    parent.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )

    verbosity_group = parent.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-essential output (only show results)",
    )
    verbosity_group.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output, including CDP traffic",
    )

    return parent


def create_main_parser(parent: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """
    Create main parser with all subcommands.

    Args:
        parent: Parent parser with global options

    Returns:
        Main ArgumentParser with subcommands configured
    """
    parser = argparse.ArgumentParser(
        prog="devtools",
        description="Drive a Chrome tab over the DevTools Protocol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Open a page and wait for an element
  devtools open https://example.com --wait-selector h1

  # Evaluate JavaScript
  devtools eval https://example.com "document.querySelectorAll('a').length"

  # Extract an element
  devtools find https://example.com "h1"

  # Shut the browser down
  devtools browser close

For more information on subcommands, run: devtools <subcommand> --help
        """,
    )

    subparsers = parser.add_subparsers(
        dest="subcommand",
        title="subcommands",
        description="Available operations",
        required=True,
    )

    from . import page_cmd, browser_cmd

    page_cmd.register_subcommand(subparsers, parent)
    browser_cmd.register_subcommand(subparsers, parent)

    return parser


def build_config(args: argparse.Namespace) -> Configuration:
    """Resolve configuration: CLI > env vars > config file > defaults."""
    config = Configuration()
    config.load_from_file(DEFAULT_CONFIG_FILE)
    config.load_from_env()
    config.merge(
        websocket_url=getattr(args, "websocket_url", None),
        timeout=getattr(args, "timeout", None),
        load_timeout=getattr(args, "load_timeout", None),
        strict_protocol=getattr(args, "strict", None),
        log_level=getattr(args, "log_level", None),
    )

    if getattr(args, "quiet", False):
        config.log_level = "ERROR"
    elif getattr(args, "verbose", False):
        config.log_level = "DEBUG"

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parent = create_parent_parser()
    parser = create_main_parser(parent)
    args = parser.parse_args(argv)

    config = build_config(args)
    setup_logging(
        format_type=config.log_format,
        level=config.log_level.upper() if isinstance(config.log_level, str) else "INFO",
        quiet=getattr(args, "quiet", False),
        verbose=getattr(args, "verbose", False),
    )

    # Subcommands read connection settings from here
    args.config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
