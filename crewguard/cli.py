"""Command line entry point: assess one URL and print the report as JSON."""
from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from .checker import check_site
from .logging_setup import install_json_logging
from .settings import CrewGuardSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crewguard",
        description="Assess whether crawling a website is likely allowed, partially restricted, or blocked.",
    )
    parser.add_argument("url", help='Absolute site URL, e.g. "https://www.example.com"')
    parser.add_argument("-u", "--user-agent", help="Agent token used to select robots.txt rules (default: *)")
    parser.add_argument("--log-level", default=None, help="Log level (default: $LOG_LEVEL or INFO)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(override=False)
    install_json_logging(args.log_level.upper() if args.log_level else None)

    settings = CrewGuardSettings.from_env()
    try:
        report = check_site(args.url, settings, robots_user_agent=args.user_agent)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
