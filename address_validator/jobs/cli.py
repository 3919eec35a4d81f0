"""Command line entrypoint for validating addresses and managing the history."""

import argparse
import logging
from typing import Iterable, List, Optional

from address_validator.core.config import ConfigError, get_settings
from address_validator.core.history import CorruptHistoryError
from address_validator.core.models import AddressInput, HistoryRecord, ValidationResult, format_percentage
from address_validator.jobs import flows

logger = logging.getLogger(__name__)


def format_result(result: ValidationResult) -> str:
    lines = [
        f"Status:     {'VALID' if result.is_valid else 'INVALID'}",
        f"Confidence: {format_percentage(result.confidence_percentage)}%",
        f"Message:    {result.validation_message}",
    ]
    if result.formatted_address:
        lines.append(f"Matched:    {result.formatted_address}")
    if result.position:
        lines.append(f"Position:   {result.position.lat}, {result.position.lon}")
    return "\n".join(lines)


def format_history(records: Iterable[HistoryRecord]) -> str:
    rows = list(records)
    if not rows:
        return "No validation history found."
    lines = [f"Found {len(rows)} validation records"]
    for record in rows:
        stamp = record.timestamp.strftime("%Y-%m-%d %H:%M")
        lines.append(f"{record.id}  {stamp}  {record.summary}")
    return "\n".join(lines)


def _validate(args: argparse.Namespace) -> int:
    settings = get_settings()
    service = flows.build_service(settings)
    store = flows.build_store(settings)
    if args.query:
        result, record = flows.validate_free_text(service, store, args.query)
    else:
        missing = [name for name in ("line1", "postal_code", "city", "country") if not getattr(args, name)]
        if missing:
            logger.error("Missing required address fields: %s", ", ".join(missing))
            return 2
        address_input = AddressInput(
            address_line1=args.line1,
            address_line2=args.line2,
            address_line3=args.line3,
            postal_code=args.postal_code,
            city=args.city,
            country=args.country,
        )
        result, record = flows.validate_new_address(service, store, address_input)
    print(format_result(result))
    print(f"Saved as {record.id}")
    return 0 if result.is_valid else 1


def _history(args: argparse.Namespace) -> int:
    settings = get_settings()
    limit = args.limit if args.limit is not None else settings.max_history_size
    store = flows.build_store(settings)
    print(format_history(store.get_history(limit)))
    return 0


def _revalidate(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = flows.build_store(settings)
    if not args.record_id:
        print(format_history(flows.unique_recent_records(store.get_history(None))))
        return 0

    record = store.get_by_id(args.record_id)
    if record is None:
        logger.error("No history record with id %s", args.record_id)
        return 1
    service = flows.build_service(settings)
    result, new_record = flows.revalidate_record(service, store, record)
    print(format_result(result))
    print(f"Saved as {new_record.id}")
    return 0 if result.is_valid else 1


def _clear(args: argparse.Namespace) -> int:
    if not args.yes:
        answer = input("Clear the entire validation history? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("History left untouched.")
            return 0
    store = flows.build_store(get_settings())
    if store.clear():
        print("Validation history cleared.")
    else:
        print("No validation history to clear.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate postal addresses with Azure Maps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a new address")
    validate.add_argument("--line1", help="Address line 1 (required unless --query is used)")
    validate.add_argument("--line2", help="Address line 2")
    validate.add_argument("--line3", help="Address line 3")
    validate.add_argument("--postal-code", dest="postal_code", help="Postal code or ZIP")
    validate.add_argument("--city", help="City")
    validate.add_argument("--country", help="Country")
    validate.add_argument("--query", help="Validate a single free-form address string instead")
    validate.set_defaults(handler=_validate)

    history = subparsers.add_parser("history", help="Show the validation history")
    history.add_argument("--limit", type=int, default=None, help="Defaults to MAX_HISTORY_SIZE")
    history.set_defaults(handler=_history)

    revalidate = subparsers.add_parser("revalidate", help="Re-validate an address from the history")
    revalidate.add_argument("record_id", nargs="?", help="History record id; omit to list candidates")
    revalidate.set_defaults(handler=_revalidate)

    clear = subparsers.add_parser("clear", help="Clear the validation history")
    clear.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    clear.set_defaults(handler=_clear)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except (CorruptHistoryError, OSError, ValueError) as exc:
        logger.error("Address validation failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
