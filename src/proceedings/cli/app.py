import argparse
import asyncio
import logging
import sys
from typing import Sequence

from proceedings.contracts.privacy_gate import PrivacyControls
from proceedings.persist import StorageError
from proceedings.persist.codec import encode_date
from proceedings.persist.factory import open_repository
from proceedings.store.config import get_proceedings_config
from proceedings.store.legacy import load_legacy_requests, migrate_legacy_requests
from proceedings.store.repository import ProceedingRepository

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="proceedings", description="Inspect tracked proceedings.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list proceedings with their status")
    show = sub.add_parser("show", help="show the messages of one proceeding")
    show.add_argument("reference")
    sub.add_parser("refresh", help="recompute every status and save")
    done = sub.add_parser("done", help="mark a proceeding as done")
    done.add_argument("reference")
    remove = sub.add_parser("remove", help="remove a proceeding")
    remove.add_argument("reference")
    sub.add_parser("clear", help="remove every proceeding")
    legacy = sub.add_parser("import-legacy", help="import requests saved before proceedings existed")
    legacy.add_argument("path")
    return parser


def _format_list(repository: ProceedingRepository) -> list[str]:
    lines = []
    for reference in sorted(repository.proceedings):
        proceeding = repository.proceedings[reference]
        newest = proceeding.newest_message()
        newest_date = encode_date(newest.date) if newest else "-"
        lines.append(f"{reference}\t{proceeding.status.value}\t{len(proceeding.messages)}\t{newest_date}")
    return lines


def _format_show(repository: ProceedingRepository, reference: str) -> list[str]:
    proceeding = repository.get(reference)
    if proceeding is None:
        raise ValueError(f"unknown proceeding: {reference}")
    lines = [f"{proceeding.reference} ({proceeding.status.value})"]
    for message in proceeding.sorted_messages():
        direction = "sent" if message.sent_by_me else "received"
        lines.append(f"  {message.id}\t{encode_date(message.date)}\t{direction}\t{message.type}\t{message.subject or ''}")
    return lines


async def _execute(args: argparse.Namespace, privacy: PrivacyControls | None) -> list[str]:
    config = get_proceedings_config()
    repository, gateway = await open_repository(config, privacy=privacy)
    output: list[str] = []

    if args.command == "list":
        output = _format_list(repository)
    elif args.command == "show":
        output = _format_show(repository, args.reference)
    elif args.command == "refresh":
        repository.update_statuses()
        output = _format_list(repository)
    elif args.command == "done":
        if repository.get(args.reference) is None:
            raise ValueError(f"unknown proceeding: {args.reference}")
        repository.mark_done(args.reference)
    elif args.command == "remove":
        repository.remove_proceeding(args.reference)
    elif args.command == "clear":
        repository.clear_proceedings()
    elif args.command == "import-legacy":
        imported = migrate_legacy_requests(repository, load_legacy_requests(args.path))
        output = [f"imported {imported} legacy requests"]

    await gateway.flush()
    return output


def run(argv: Sequence[str] | None = None, privacy: PrivacyControls | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        output = asyncio.run(_execute(args, privacy))
    except (ValueError, StorageError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for line in output:
        print(line)
    return 0
