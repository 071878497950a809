"""Command-line entry for recurrence_lite.

Small helper CLI around the engine:

  python -m recurrence_lite expand --start ... --end ... --rrule ...
  python -m recurrence_lite infer 2025-04-07 2025-04-14 2025-04-21
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime, timedelta
from typing import Optional

from . import _init_logging
from .config_loader import Config, load_full_config
from .lite_exceptions import RecurrenceError
from .lite_logging import configure_lite_logging
from .lite_models import CalendarEvent
from .lite_pattern_inference import infer_rule
from .lite_rrule_expander import generate
from .lite_rrule_format import format_rrule, parse_rrule_string


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for recurrence_lite CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="recurrence_lite",
        description="Recurrence Lite - expand and infer calendar recurrence rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m recurrence_lite expand --start 2025-04-07T09:00 --end 2025-04-07T10:00 \\
      --rrule "FREQ=WEEKLY;BYDAY=MO;COUNT=4"
  python -m recurrence_lite infer 2025-04-07 2025-04-14 2025-04-21
        """,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML config file (default: ./recurrence_lite.yaml)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    expand = subparsers.add_parser("expand", help="Print the occurrences of a rule as JSON")
    expand.add_argument("--start", required=True, help="Base event start (ISO 8601)")
    expand.add_argument("--end", required=True, help="Base event end (ISO 8601)")
    expand.add_argument("--title", default="Event", help="Base event title")
    expand.add_argument("--all-day", action="store_true", help="Base event is all-day")
    expand.add_argument("--rrule", required=True, help="RRULE, e.g. FREQ=WEEKLY;COUNT=4")

    infer = subparsers.add_parser("infer", help="Print the rule inferred from dates")
    infer.add_argument("dates", nargs="+", metavar="DATE", help="Occurrence dates (YYYY-MM-DD)")

    return parser


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO date/time: {value!r}") from exc


def _run_expand(args: argparse.Namespace, config: Config) -> str:
    base = CalendarEvent(
        title=args.title,
        start=_parse_datetime(args.start),
        end=_parse_datetime(args.end),
        all_day=args.all_day,
    )
    occurrences = generate(parse_rrule_string(args.rrule), base, config)
    return json.dumps([occurrence.model_dump(mode="json") for occurrence in occurrences], indent=2)


def _run_infer(args: argparse.Namespace) -> str:
    events = []
    for raw in args.dates:
        day = _parse_datetime(raw).date() if "T" in raw else date.fromisoformat(raw)
        start = datetime.combine(day, datetime.min.time())
        events.append(
            CalendarEvent(title="Event", start=start, end=start + timedelta(days=1), all_day=True)
        )
    rule = infer_rule(events)
    if rule is None:
        raise RecurrenceError("At least two dates are needed to infer a recurrence rule")
    return "RRULE:" + format_rrule(rule)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the recurrence_lite CLI.

    Returns:
        Process exit code: 0 on success, 2 on invalid input
    """
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_full_config(args.config)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    _init_logging("DEBUG" if args.debug else config.log_level)
    if args.debug:
        configure_lite_logging(force_debug=True)

    try:
        if args.command == "expand":
            output = _run_expand(args, config)
        else:
            output = _run_infer(args)
    except (RecurrenceError, ValueError, argparse.ArgumentTypeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
