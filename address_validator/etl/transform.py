"""Utilities for transforming Azure Maps search payloads into domain models."""

import logging
from typing import Any, Dict, List, Optional

from address_validator.core.models import (
    Address,
    CandidateMatch,
    EntryPoint,
    Position,
    SearchResponse,
    SearchSummary,
    Viewport,
)

logger = logging.getLogger(__name__)

# Azure Maps camelCase key -> Address field
_ADDRESS_FIELDS = {
    "streetNumber": "street_number",
    "streetName": "street_name",
    "municipalitySubdivision": "municipality_subdivision",
    "municipality": "municipality",
    "countrySecondarySubdivision": "country_secondary_subdivision",
    "countryTertiarySubdivision": "country_tertiary_subdivision",
    "countrySubdivision": "country_subdivision",
    "countrySubdivisionName": "country_subdivision_name",
    "postalCode": "postal_code",
    "extendedPostalCode": "extended_postal_code",
    "countryCode": "country_code",
    "country": "country",
    "countryCodeISO3": "country_code_iso3",
    "freeformAddress": "freeform_address",
}


def parse_search_response(payload: Dict[str, Any]) -> SearchResponse:
    summary = parse_summary(payload.get("summary") or {})
    results: List[CandidateMatch] = []
    for raw in payload.get("results") or []:
        if not isinstance(raw, dict):
            logger.debug("Skipping non-object search result: %r", raw)
            continue
        results.append(parse_candidate(raw))
    return SearchResponse(summary=summary, results=results)


def parse_summary(raw: Dict[str, Any]) -> SearchSummary:
    return SearchSummary(
        query=str(raw.get("query") or ""),
        query_type=str(raw.get("queryType") or ""),
        query_time=_safe_int(raw.get("queryTime")),
        num_results=_safe_int(raw.get("numResults")),
        offset=_safe_int(raw.get("offset")),
        total_results=_safe_int(raw.get("totalResults")),
        fuzzy_level=_safe_int(raw.get("fuzzyLevel")),
    )


def parse_candidate(raw: Dict[str, Any]) -> CandidateMatch:
    entry_points = [
        EntryPoint(type=str(item.get("type") or ""), position=_parse_position(item.get("position")))
        for item in raw.get("entryPoints") or []
        if isinstance(item, dict)
    ]
    return CandidateMatch(
        type=str(raw.get("type") or ""),
        id=str(raw.get("id") or ""),
        score=_safe_float(raw.get("score")),
        position=_parse_position(raw.get("position")),
        address=parse_address(raw.get("address")),
        viewport=_parse_viewport(raw.get("viewport")),
        entry_points=entry_points,
    )


def parse_address(raw: Optional[Dict[str, Any]]) -> Optional[Address]:
    if not isinstance(raw, dict):
        return None
    values = {name: _strip_or_none(raw.get(key)) for key, name in _ADDRESS_FIELDS.items()}
    return Address(**values)


def _parse_position(raw: Any) -> Position:
    if not isinstance(raw, dict):
        return Position(lat=0.0, lon=0.0)
    return Position(lat=_safe_float(raw.get("lat")), lon=_safe_float(raw.get("lon")))


def _parse_viewport(raw: Any) -> Optional[Viewport]:
    if not isinstance(raw, dict):
        return None
    return Viewport(
        top_left_point=_parse_position(raw.get("topLeftPoint")),
        btm_right_point=_parse_position(raw.get("btmRightPoint")),
    )


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _safe_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
