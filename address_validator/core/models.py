"""Core data models shared by the validation service and the history store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

_SEPARATOR = ", "


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True, slots=True)
class AddressInput:
    """Structured address as typed in by a user."""

    address_line1: str
    postal_code: str
    city: str
    country: str
    address_line2: Optional[str] = None
    address_line3: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("address_line1", "postal_code", "city", "country"):
            value = getattr(self, name)
            if not isinstance(value, str) or _is_blank(value):
                raise ValueError(f"{name} is required and cannot be empty")
        for name in ("address_line2", "address_line3"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be text")

    def to_single_line_string(self) -> str:
        """Join the non-blank parts into the query sent to the geocoding provider."""
        parts = [
            self.address_line1,
            self.address_line2,
            self.address_line3,
            self.postal_code,
            self.city,
            self.country,
        ]
        return _SEPARATOR.join(part for part in parts if not _is_blank(part))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AddressInput":
        return cls(
            address_line1=data["address_line1"],
            postal_code=data["postal_code"],
            city=data["city"],
            country=data["country"],
            address_line2=data.get("address_line2"),
            address_line3=data.get("address_line3"),
        )


@dataclass(frozen=True, slots=True)
class Position:
    lat: float
    lon: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass(frozen=True, slots=True)
class Address:
    """Structured address of a geocoding match.

    Completeness varies by region, so every component is optional.
    """

    street_number: Optional[str] = None
    street_name: Optional[str] = None
    municipality_subdivision: Optional[str] = None
    municipality: Optional[str] = None
    country_secondary_subdivision: Optional[str] = None
    country_tertiary_subdivision: Optional[str] = None
    country_subdivision: Optional[str] = None
    country_subdivision_name: Optional[str] = None
    postal_code: Optional[str] = None
    extended_postal_code: Optional[str] = None
    country_code: Optional[str] = None
    country: Optional[str] = None
    country_code_iso3: Optional[str] = None
    freeform_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Address":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True, slots=True)
class Viewport:
    top_left_point: Position
    btm_right_point: Position


@dataclass(frozen=True, slots=True)
class EntryPoint:
    type: str
    position: Position


@dataclass(slots=True)
class CandidateMatch:
    """One geocoding result returned by the provider."""

    score: float
    position: Position
    type: str = ""
    id: str = ""
    address: Optional[Address] = None
    viewport: Optional[Viewport] = None
    entry_points: List[EntryPoint] = field(default_factory=list)


@dataclass(slots=True)
class SearchSummary:
    query: str = ""
    query_type: str = ""
    query_time: int = 0
    num_results: int = 0
    offset: int = 0
    total_results: int = 0
    fuzzy_level: int = 0


@dataclass(slots=True)
class SearchResponse:
    summary: SearchSummary = field(default_factory=SearchSummary)
    results: List[CandidateMatch] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of one validation; soft failures are encoded here, not raised."""

    is_valid: bool
    confidence_percentage: float
    validation_message: str
    formatted_address: Optional[str] = None
    original_input: Optional[AddressInput] = None
    matched_address: Optional[Address] = None
    position: Optional[Position] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "confidence_percentage": self.confidence_percentage,
            "validation_message": self.validation_message,
            "formatted_address": self.formatted_address,
            "original_input": self.original_input.to_dict() if self.original_input else None,
            "matched_address": self.matched_address.to_dict() if self.matched_address else None,
            "position": self.position.to_dict() if self.position else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationResult":
        original_input = data.get("original_input")
        matched_address = data.get("matched_address")
        position = data.get("position")
        return cls(
            is_valid=bool(data["is_valid"]),
            confidence_percentage=float(data["confidence_percentage"]),
            validation_message=data["validation_message"],
            formatted_address=data.get("formatted_address"),
            original_input=AddressInput.from_dict(original_input) if original_input else None,
            matched_address=Address.from_dict(matched_address) if matched_address else None,
            position=Position.from_dict(position) if position else None,
        )


def format_percentage(value: float) -> str:
    """Render a percentage without a trailing `.0` (80.0 -> '80', 85.5 -> '85.5')."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """One persisted validation event. Only the history store creates these."""

    id: str
    timestamp: datetime
    original_query: str
    validation_result: ValidationResult
    original_address_input: Optional[AddressInput] = None

    @property
    def summary(self) -> str:
        result = self.validation_result
        status = "VALID" if result.is_valid else "INVALID"
        label = result.formatted_address or self.original_query
        return f"[{status}] {label} ({format_percentage(result.confidence_percentage)}%)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "original_query": self.original_query,
            "original_address_input": (
                self.original_address_input.to_dict() if self.original_address_input else None
            ),
            "validation_result": self.validation_result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryRecord":
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        address_input = data.get("original_address_input")
        return cls(
            id=str(data["id"]),
            timestamp=timestamp,
            original_query=data["original_query"],
            validation_result=ValidationResult.from_dict(data["validation_result"]),
            original_address_input=AddressInput.from_dict(address_input) if address_input else None,
        )
