#!/usr/bin/env python3
"""
Page Capture - save a rendered web page for offline viewing.

Renders a page using Playwright, optionally lets you edit it in the
browser, then saves the markup with every same-host asset it references.

Usage:
    python -m page_capture.main --url https://example.com/blog/post --name blog

Features:
    - Renders JavaScript pages with Playwright
    - Downloads images, scripts, stylesheets, icons and media
    - Mirrors the server's directory layout locally
    - Leaves third-party assets pointing at their original URLs
    - Optional in-browser editing before the page is saved
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional
from urllib.parse import urlparse

from page_capture.capture import PageCapture, CaptureError
from page_capture.capture.capture import failed_outcomes
from page_capture.capture.renderer import edit_session
from page_capture.utils.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_TIMEOUT,
)
from page_capture.utils.log import (
    console,
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning
)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='page-capture',
        description='Save a rendered web page with its same-host assets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com --name example
    %(prog)s --url https://example.com/blog/post -n post --edit
    %(prog)s -u https://example.com -n site -o ./captures --concurrency 0
        """
    )

    parser.add_argument(
        '--url', '-u',
        type=str,
        help='URL of the page to capture (prompted for if omitted)'
    )

    parser.add_argument(
        '--name', '-n',
        type=str,
        help='Folder name for the capture (prompted for if omitted)'
    )

    parser.add_argument(
        '--output-root', '-o',
        type=str,
        default=DEFAULT_OUTPUT_ROOT,
        help=f'Directory holding all captures (default: {DEFAULT_OUTPUT_ROOT})'
    )

    parser.add_argument(
        '--page-timeout',
        type=int,
        default=DEFAULT_PAGE_TIMEOUT,
        help=f'Page load timeout in milliseconds (default: {DEFAULT_PAGE_TIMEOUT})'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f'Asset download timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--concurrency', '-c',
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f'Maximum concurrent asset downloads, 0 for no limit (default: {DEFAULT_CONCURRENCY})'
    )

    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run the browser without a window (not available with --edit)'
    )

    parser.add_argument(
        '--edit',
        action='store_true',
        help='Edit the page in the browser before it is saved'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Validate and normalize the input URL.

    Args:
        url: URL string to validate

    Returns:
        Normalized URL string

    Raises:
        ValueError: If URL is invalid
    """
    url = url.strip()

    # Add protocol if missing
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)

    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")

    return url


def prompt_missing(args: argparse.Namespace) -> None:
    """Ask for the name and URL when they were not given on the command line."""
    if not args.name:
        args.name = console.input("Enter website name (folder name): ").strip()
    if not args.url:
        args.url = console.input("Enter website URL: ").strip()


def wait_for_enter() -> None:
    """Block until the user presses ENTER."""
    console.input("\nPress ENTER to save and download the edited page...")


def print_summary(result) -> None:
    """
    Print the capture summary.

    Args:
        result: CaptureResult object
    """
    print("\n" + "=" * 60)
    print_success("CAPTURE SUMMARY")
    print("=" * 60)
    print(f"  Assets queued:     {result.queued}")
    print(f"  Downloaded:        {result.succeeded}")
    print(f"  Failed:            {result.failed}")
    print(f"  Left untouched:    {result.skipped}")

    for outcome in failed_outcomes(result):
        print(f"    - {outcome.url}: {outcome.error}")

    print("=" * 60 + "\n")


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for page capture.

    Returns:
        Exit code (0 when the page was saved, 1 on fatal errors)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    if not args.quiet:
        print_status("--- Page Capture ---", "bold cyan")

    try:
        prompt_missing(args)

        if not args.name or not args.url:
            raise CaptureError("Website name and URL are required.")

        url = validate_url(args.url)

        before_capture = None
        if args.edit:
            if args.headless:
                print_warning("--headless is ignored in edit mode")
            print_info("Edit any text directly in the opened browser window.")
            print_info("When finished, return to this terminal and press ENTER.")
            before_capture = edit_session(wait_for_enter)

        if not args.quiet:
            print_info(f"Target URL: {url}")
            print_info(f"Output: {os.path.join(args.output_root, args.name)}")

        capture = PageCapture(
            url=url,
            name=args.name,
            output_root=args.output_root,
            page_timeout=args.page_timeout,
            timeout=args.timeout,
            concurrency=args.concurrency,
            headless=args.headless and not args.edit,
            before_capture=before_capture
        )

        result = await capture.run()

        if not args.quiet:
            print_summary(result)

        return 0

    except (KeyboardInterrupt, asyncio.CancelledError):
        print_error("\nCapture interrupted by user")
        return 1
    except CaptureError as e:
        print_error(str(e))
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        print_error(f"Critical error: {e}")
        if args.verbose:
            console.print_exception()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        # Ctrl-C cancels main(); asyncio.run re-raises it once main() returns
        print_error("Capture interrupted by user")
        code = 1
    sys.exit(code)


if __name__ == '__main__':
    run()
