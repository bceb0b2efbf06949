"""Command line entry point for declaring and running portal plugin builds."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List

from contracts.errors import BuildError, BuildFailedError
from plugins.loader import load_build
from tools.reports import build_events

_LOGGER = logging.getLogger("portal_build")


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def cmd_run(args: argparse.Namespace) -> int:
    build = load_build(args.project_dir, event_log=not args.no_event_log)
    try:
        report = build.run(args.tasks or None)
    except BuildFailedError as exc:
        _print(exc.report.to_dict())
        return 1
    _print(report.to_dict())
    return 0


def cmd_tasks(args: argparse.Namespace) -> int:
    build = load_build(args.project_dir, event_log=False)
    listing: List[dict] = [
        {
            "name": task.name,
            "group": task.group,
            "description": task.description,
            "depends_on": list(task.depends_on),
        }
        for task in build.tasks()
    ]
    _print(listing)
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    build = load_build(args.project_dir, event_log=False)
    values = build.resolve(args.task)
    _print({name: value if isinstance(value, (bool, type(None))) else str(value) for name, value in values.items()})
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    base_dir = Path(args.path)
    files = sorted(base_dir.glob("**/*.jsonl"))
    if not files:
        raise SystemExit(f"No JSONL logs found under {base_dir}")
    _print(build_events.aggregate(files, top=args.top))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Portal plugin build helpers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run tasks (default: all) and their dependencies")
    run.add_argument("tasks", nargs="*")
    run.add_argument("--project-dir", default=".")
    run.add_argument(
        "--no-event-log",
        action="store_true",
        help="Do not write JSONL build events under the build dir",
    )
    run.set_defaults(func=cmd_run)

    tasks = sub.add_parser("tasks", help="List declared tasks")
    tasks.add_argument("--project-dir", default=".")
    tasks.set_defaults(func=cmd_tasks)

    resolve = sub.add_parser("resolve", help="Print the resolved inputs of a task")
    resolve.add_argument("task")
    resolve.add_argument("--project-dir", default=".")
    resolve.set_defaults(func=cmd_resolve)

    report = sub.add_parser("report", help="Aggregate build event logs")
    report.add_argument("path", help="Directory containing JSONL logs")
    report.add_argument("--top", type=int, default=5)
    report.set_defaults(func=cmd_report)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (BuildError, OSError) as exc:
        _LOGGER.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
