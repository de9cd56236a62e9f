#!/usr/bin/env python3
"""
IdeaVault - Personal idea journal.

Command-line entry point for running the web application:
  - Sign in and jot down ideas with tags, a mood and an optional image
  - Browse them as a filtered list, a month calendar or a dashboard
  - Store results in Supabase (or in memory in development)

Usage:
    python main.py                      # Serve on 127.0.0.1:5001
    python main.py --port 8000          # Serve on another port
    python main.py --debug              # Flask debug mode with reloader
    python main.py --show-config        # Print configuration and exit

Examples:
    # Development run (in-memory storage, any email signs in)
    python main.py --debug

    # Production run
    APP_ENV=production python main.py --host 0.0.0.0 --port 8000
"""

import argparse
import sys

from ideavault.config import (
    DEBUG,
    is_backend_configured,
    is_production,
    print_config_summary,
    validate_config,
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5001


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="ideavault",
        description="Run the IdeaVault idea journal web app.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                           Serve on 127.0.0.1:5001
  %(prog)s --host 0.0.0.0 -p 8000    Serve on all interfaces, port 8000
  %(prog)s --debug                   Enable the Flask debugger and reloader
  %(prog)s --show-config             Show configuration and exit
        """,
    )

    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Interface to bind (default: {DEFAULT_HOST})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        metavar="N",
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        default=None,
        help="Run in Flask debug mode (default: DEBUG from environment)",
    )

    # Info options
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    return parser


def show_config() -> None:
    """Display current configuration."""
    print("=" * 60)
    print("IdeaVault Configuration")
    print("=" * 60)
    print_config_summary()

    errors = validate_config()
    if errors:
        print("\nConfiguration warnings:")
        for error in errors:
            print(f"  ⚠️  {error}")
    else:
        print("\n✓ Configuration valid")
    print("=" * 60)


def main(argv: list = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 = success, 1 = error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.show_config:
        show_config()
        return 0

    if not 1 <= args.port <= 65535:
        print(f"❌ Invalid port: {args.port}")
        return 1

    errors = validate_config()
    if errors and is_production():
        print("❌ Configuration invalid:")
        for error in errors:
            print(f"  - {error}")
        return 1
    for error in errors:
        print(f"⚠️  {error}")

    debug = DEBUG if args.debug is None else args.debug

    print("=" * 60)
    print("💡 IdeaVault")
    print("=" * 60)
    print(f"Backend: {'Supabase' if is_backend_configured() else 'in-memory (development)'}")
    print(f"Open http://{args.host}:{args.port} in your browser")
    print("Press Ctrl+C to stop")
    print("=" * 60)

    from web.app import app

    try:
        app.run(host=args.host, port=args.port, debug=debug)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except OSError as e:
        print(f"\n❌ Server error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
