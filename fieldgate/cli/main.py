"""Command-line frontend for the Fieldgate validation engine.

Jobs only outlive a single command when ``JOB_STORE_PATH`` points at a
SQLite file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from fieldgate.core import api as core_api
from fieldgate.core.types import RanBy, ValidatorId, ValidatorInput

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _json_dump(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _parse_context(items: list[str]) -> dict[str, str]:
    context: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"context entries must look like key=value, got {item!r}")
        context[key.strip()] = value
    return context


def _cmd_validators(args: argparse.Namespace) -> int:
    _json_dump([info.to_dict() for info in core_api.list_validators()])
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    validator_input = ValidatorInput(
        field_id=args.field_id,
        field_label=args.field_label or args.field_id,
        value=args.value,
        context=_parse_context(args.context),
    )
    ran_by = RanBy(uid=args.ran_by) if args.ran_by else None
    result = asyncio.run(
        core_api.run_validation(
            args.validator,
            validator_input,
            ticket_id=args.ticket_id,
            level=args.level,
            ran_by=ran_by,
        )
    )
    _json_dump({"result": result.to_dict()})
    return 0


def _cmd_jobs(args: argparse.Namespace) -> int:
    jobs = asyncio.run(core_api.list_jobs(args.ticket_id, args.limit))
    _json_dump({"items": [job.to_dict() for job in jobs]})
    return 0


def _cmd_can_submit(args: argparse.Namespace) -> int:
    payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
    items = payload.get("results", []) if isinstance(payload, dict) else payload
    decision = core_api.can_submit(core_api.evaluated_from_payload(items))
    _json_dump(decision.to_dict())
    return 0 if decision.allowed else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fieldgate", description="Fieldgate validation engine CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validators = subparsers.add_parser("validators", help="List the registered validators")
    validators.set_defaults(func=_cmd_validators)

    run = subparsers.add_parser("run", help="Run one validator against a value")
    run.add_argument("validator", choices=[member.value for member in ValidatorId])
    run.add_argument("value")
    run.add_argument("--field-id", default="value")
    run.add_argument("--field-label", default="")
    run.add_argument("--ticket-id", default=None, help="Record the run as a job for this ticket")
    run.add_argument("--level", choices=["hard", "soft"], default="hard")
    run.add_argument("--context", action="append", default=[], metavar="KEY=VALUE")
    run.add_argument("--ran-by", default=None, help="Caller uid stored on the job")
    run.set_defaults(func=_cmd_run)

    jobs = subparsers.add_parser("jobs", help="List recorded jobs for a ticket, newest first")
    jobs.add_argument("ticket_id")
    jobs.add_argument("--limit", type=int, default=50)
    jobs.set_defaults(func=_cmd_jobs)

    can_submit = subparsers.add_parser(
        "can-submit",
        help="Decide submission from a JSON file of {rule, result} pairs; exits 1 when blocked",
    )
    can_submit.add_argument("input", help="JSON file: a list of pairs or {\"results\": [...]}")
    can_submit.set_defaults(func=_cmd_can_submit)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args) or 0)
    except Exception as exc:
        parser.exit(status=2, message=f"error: {exc}\n")


if __name__ == "__main__":
    raise SystemExit(main())
