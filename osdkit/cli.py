"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from osdkit.sts import StsError, policy, policy_diff

_GLOBAL_FLAGS = (
    (
        ("-o", "--output"),
        {"default": "", "help": "Valid formats are ['', 'json', 'yaml', 'env']"},
    ),
    (
        ("-S", "--skip-version-check"),
        {
            "action": "store_true",
            "help": "skip checking to see if this is the most recent release",
        },
    ),
)


def _options_text() -> str:
    lines = ["The following options can be passed to any command:", ""]
    for names, settings in _GLOBAL_FLAGS:
        lines.append(f"  {', '.join(names)}: {settings['help']}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    """Return the parser of the whole command line."""
    parser = argparse.ArgumentParser(
        prog="osdkit", description="Tools for operating managed OpenShift clusters"
    )
    for names, settings in _GLOBAL_FLAGS:
        parser.add_argument(*names, **settings)

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("options", help="Print the list of flags inherited by all commands")

    sts = commands.add_parser("sts", help="STS related utilities")
    sts_commands = sts.add_subparsers(dest="sts_command")
    policy_parser = sts_commands.add_parser("policy", help="Get OCP STS policy")
    policy_parser.add_argument("release_version")
    diff_parser = sts_commands.add_parser(
        "policy-diff", help="Get diff between two versions of OCP STS policy"
    )
    diff_parser.add_argument("previous_version")
    diff_parser.add_argument("new_version")
    return parser


def _run_sts(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    if args.sts_command == "policy":
        print(policy(args.release_version))
    elif args.sts_command == "policy-diff":
        print(policy_diff(args.previous_version, args.new_version))
    else:
        parser.parse_args(["sts", "--help"])


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "options":
            print(_options_text())
        elif args.command == "sts":
            _run_sts(args, parser)
        else:
            parser.print_help()
    except (StsError, OSError, ValueError) as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())