"""
Page subcommands: open, eval, find.

Each invocation opens a fresh tab on the configured browser, navigates it,
runs one action and closes the tab again.
"""

import argparse
import json
import logging
import sys
from typing import Any, Callable, Dict

from ..devtools import ChromeDevTools
from ..exceptions import CDPError

logger = logging.getLogger(__name__)


def run_in_tab(
    args: argparse.Namespace,
    action: Callable[[ChromeDevTools], Dict[str, Any]],
) -> int:
    """
    Open a tab at args.url, run action and print its output.

    Args:
        args: Parsed command-line arguments (args.config must be set)
        action: Receives the connected client, returns the fields to print

    Returns:
        Exit code (0 for success, 1 for CDP errors)
    """
    try:
        with ChromeDevTools.from_config(args.config) as devtools:
            devtools.create_target("about:blank")
            try:
                devtools.navigate(args.url)
                output = action(devtools)
            except BaseException:
                if not args.keep_open:
                    close_page_after_failure(devtools)
                raise
            if not args.keep_open:
                devtools.close_page()

        print_output(args, output)
        return 0

    except CDPError as e:
        if args.config.log_level.upper() == "DEBUG":
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def close_page_after_failure(devtools: ChromeDevTools) -> None:
    """Close the tab while another error is propagating; CDP errors are only logged."""
    try:
        devtools.close_page()
    except CDPError as e:
        logger.warning(f"Could not close tab: {e}")


def print_output(args: argparse.Namespace, output: Dict[str, Any]) -> None:
    if args.format == "json":
        print(json.dumps(output, indent=2))
        return
    for key, value in output.items():
        if len(output) == 1:
            print(value if value is not None else "")
        else:
            print(f"{key}\t{value}")


def open_handler(args: argparse.Namespace) -> int:
    """Handle 'open': navigate, optionally wait for a selector, report page."""

    def action(devtools: ChromeDevTools) -> Dict[str, Any]:
        if args.wait_selector:
            devtools.wait_selector(args.wait_selector, timeout_ms=args.wait_timeout)
        return {
            "targetId": devtools.target_id,
            "title": devtools.get_title(),
            "url": devtools.get_url(),
        }

    return run_in_tab(args, action)


def eval_handler(args: argparse.Namespace) -> int:
    """Handle 'eval': print the value of a JavaScript expression."""
    return run_in_tab(args, lambda devtools: {"value": devtools.evaluate(args.expression)})


def find_handler(args: argparse.Namespace) -> int:
    """Handle 'find': print outerHTML of the first match; exit 1 if none."""

    def action(devtools: ChromeDevTools) -> Dict[str, Any]:
        html = devtools.find_by_selector(args.selector)
        if html is None:
            raise CDPError(f"No element matches: {args.selector}")
        return {"html": html}

    return run_in_tab(args, action)


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """
    Register 'open', 'eval' and 'find' subcommands.

    Args:
        subparsers: Subparsers from main parser
        parent: Parent parser with global options
    """
    page_options = argparse.ArgumentParser(add_help=False)
    page_options.add_argument("url", help="URL to open in a new tab")
    page_options.add_argument(
        "--keep-open",
        action="store_true",
        help="Leave the tab open when done",
    )

    open_parser = subparsers.add_parser(
        "open",
        parents=[parent, page_options],
        help="Open a URL and report title and URL",
        description="Open a new tab, wait for load and print target id, title and URL",
        epilog="""
Examples:
  devtools open https://example.com
  devtools open https://example.com --wait-selector "#app" --wait-timeout 5000
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    open_parser.add_argument(
        "--wait-selector",
        help="CSS selector to wait for after load",
    )
    open_parser.add_argument(
        "--wait-timeout",
        type=int,
        default=30000,
        help="Selector wait timeout in milliseconds (default: 30000)",
    )
    open_parser.set_defaults(func=open_handler)

    eval_parser = subparsers.add_parser(
        "eval",
        parents=[parent, page_options],
        help="Evaluate JavaScript in a page",
        description="Open a URL and evaluate a JavaScript expression via Runtime.evaluate",
        epilog="""
Examples:
  devtools eval https://example.com "document.title"
  devtools eval --format json https://example.com "[...document.links].map(a => a.href)"
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    eval_parser.add_argument("expression", help="JavaScript expression to evaluate")
    eval_parser.set_defaults(func=eval_handler)

    find_parser = subparsers.add_parser(
        "find",
        parents=[parent, page_options],
        help="Print an element's outerHTML",
        description="Open a URL and print the outerHTML of the first element matching a CSS selector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    find_parser.add_argument("selector", help="CSS selector")
    find_parser.set_defaults(func=find_handler)
