"""Confidence-based address validation on top of a geocoding provider."""

import logging
from dataclasses import replace
from typing import Optional, Protocol, Sequence, Union

from address_validator.core.models import (
    AddressInput,
    CandidateMatch,
    SearchResponse,
    ValidationResult,
    format_percentage,
)
from address_validator.vendors.azure_maps import AzureMapsError

logger = logging.getLogger(__name__)

NO_MATCH_MESSAGE = "No matching address found"
VALID_MESSAGE = "Address is valid"


class GeocodingProvider(Protocol):
    def search_address(self, query: str) -> SearchResponse:
        ...


def select_best_candidate(candidates: Sequence[CandidateMatch]) -> Optional[CandidateMatch]:
    """Return the highest scoring candidate; ties keep the earliest one."""
    best: Optional[CandidateMatch] = None
    for candidate in candidates:
        if best is None or candidate.score > best.score:
            best = candidate
    return best


class AddressValidationService:
    def __init__(self, provider: GeocodingProvider, threshold: float = 0.8) -> None:
        if not 0 <= threshold <= 1:
            raise ValueError("threshold must be a fraction between 0 and 1")
        self._provider = provider
        self._threshold_percentage = round(threshold * 100, 2)

    @property
    def threshold_percentage(self) -> float:
        return self._threshold_percentage

    def validate(self, address: Union[AddressInput, str]) -> ValidationResult:
        if isinstance(address, AddressInput):
            return self.validate_address(address)
        return self.validate_query(address)

    def validate_address(self, address_input: AddressInput) -> ValidationResult:
        result = self.validate_query(address_input.to_single_line_string())
        return replace(result, original_input=address_input)

    def validate_query(self, query: str) -> ValidationResult:
        """Validate a free-form address string.

        Only a blank query raises. Provider errors and anything unexpected are
        reported through an invalid `ValidationResult`.
        """
        if not query or not query.strip():
            raise ValueError("Address cannot be empty")

        try:
            response = self._provider.search_address(query)
            return self._evaluate(response)
        except AzureMapsError as exc:
            logger.warning("Geocoding failed for query=%s: %s", query, exc)
            return _failed(f"Error validating address: {exc}")
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while validating query=%s", query)
            return _failed(f"Unexpected error: {exc}")

    def _evaluate(self, response: SearchResponse) -> ValidationResult:
        best = select_best_candidate(response.results)
        if best is None:
            return _failed(NO_MATCH_MESSAGE)

        confidence = round(best.score * 100, 2)
        is_valid = confidence >= self._threshold_percentage
        if is_valid:
            message = VALID_MESSAGE
        else:
            message = (
                f"Address found but confidence score of {format_percentage(confidence)}% "
                f"is below threshold ({format_percentage(self._threshold_percentage)}%)."
            )
        logger.info("Best candidate score=%s valid=%s", best.score, is_valid)

        matched = best.address
        return ValidationResult(
            is_valid=is_valid,
            confidence_percentage=confidence,
            validation_message=message,
            formatted_address=matched.freeform_address if matched else None,
            matched_address=matched,
            position=best.position,
        )


def _failed(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, confidence_percentage=0.0, validation_message=message)
