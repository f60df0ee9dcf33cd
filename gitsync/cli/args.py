"""Command-line argument parsing for gitsync."""

import argparse
from gitsync.__version__ import __version__


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Keep feature branches rebased on an upstream base branch",
        epilog="Settings are auto-detected; put overrides in .gitsync.yaml at the repository root "
        "(base_branch, upstream_remote, origin_remote, exclude_patterns).",
    )
    parser.add_argument(
        "-m", "--manual", action="store_true",
        help="Manual mode - preview commands and confirm before each workflow",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"gitsync {__version__}")
    parser.add_argument(
        "--config", metavar="PATH", help="Read configuration from PATH instead of .gitsync.yaml"
    )
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Print the branch table and exit (for scripts/automation)",
    )

    workflow = parser.add_mutually_exclusive_group()
    workflow.add_argument(
        "--update", nargs="+", metavar="BRANCH",
        help="Rebase and push the named branches without the TUI",
    )
    workflow.add_argument(
        "--delete", nargs="+", metavar="BRANCH",
        help="Delete the named branches locally and on origin without the TUI",
    )
    workflow.add_argument(
        "--write-config", action="store_true",
        help="Write the detected configuration to .gitsync.yaml (or --config PATH) and exit",
    )
    parser.add_argument(
        "--stash", action="store_true",
        help="With --update/--delete: stash uncommitted changes and restore them afterwards",
    )

    args = parser.parse_args(argv)
    if args.stash and not (args.update or args.delete):
        parser.error("--stash requires --update or --delete")
    return args
