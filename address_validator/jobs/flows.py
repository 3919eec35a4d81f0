"""Validation flows shared by the CLI and the HTTP service."""

import logging
from typing import Iterable, List, Tuple

from address_validator.core.config import Settings, require_api_key
from address_validator.core.history import JsonHistoryStore, seed_history
from address_validator.core.models import AddressInput, HistoryRecord, ValidationResult
from address_validator.core.validation import AddressValidationService
from address_validator.vendors.azure_maps import AzureMapsClient

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> AddressValidationService:
    client = AzureMapsClient(
        api_key=require_api_key(settings),
        endpoint=settings.azure_maps_endpoint,
        limit=settings.result_limit,
    )
    return AddressValidationService(client, threshold=settings.confidence_threshold)


def build_store(settings: Settings) -> JsonHistoryStore:
    if settings.history_sample_path:
        seed_history(settings.history_file_path, settings.history_sample_path)
    return JsonHistoryStore(settings.history_file_path, max_history_size=settings.max_history_size)


def validate_new_address(
    service: AddressValidationService,
    store: JsonHistoryStore,
    address_input: AddressInput,
) -> Tuple[ValidationResult, HistoryRecord]:
    query = address_input.to_single_line_string()
    result = service.validate_address(address_input)
    record = store.save(query, address_input, result)
    return result, record


def validate_free_text(
    service: AddressValidationService,
    store: JsonHistoryStore,
    query: str,
) -> Tuple[ValidationResult, HistoryRecord]:
    result = service.validate_query(query)
    record = store.save(query, None, result)
    return result, record


def revalidate_record(
    service: AddressValidationService,
    store: JsonHistoryStore,
    record: HistoryRecord,
) -> Tuple[ValidationResult, HistoryRecord]:
    """Validate a stored record again, preferring its structured input."""
    logger.info("Re-validating history record %s", record.id)
    if record.original_address_input is not None:
        result = service.validate_address(record.original_address_input)
    else:
        result = service.validate_query(record.original_query)
    new_record = store.save(record.original_query, record.original_address_input, result)
    return result, new_record


def unique_recent_records(records: Iterable[HistoryRecord]) -> List[HistoryRecord]:
    """Keep the first record seen for each original query, in log order.

    The log is newest first, so the first occurrence is the most recent one.
    """
    latest = {}
    for record in records:
        if record.original_query not in latest:
            latest[record.original_query] = record
    return list(latest.values())
