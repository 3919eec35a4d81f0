import sys
from pathlib import Path

import pytest

# Ensure `address_validator` is importable when running pytest from the repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from address_validator.core.models import (  # noqa: E402
    Address,
    AddressInput,
    CandidateMatch,
    Position,
    SearchResponse,
    SearchSummary,
)


class FakeProvider:
    """Stands in for the Azure Maps client; records every query it receives."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else SearchResponse()
        self.error = error
        self.queries = []

    def search_address(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.response


def make_candidate(score, freeform="1 Main St, Seattle, WA 98101", lat=47.6, lon=-122.3):
    return CandidateMatch(
        score=score,
        position=Position(lat=lat, lon=lon),
        type="Point Address",
        id=f"id-{score}",
        address=Address(freeform_address=freeform, municipality="Seattle", country_code="US"),
    )


def make_response(*scores):
    results = [make_candidate(score, freeform=f"Match {index}") for index, score in enumerate(scores)]
    return SearchResponse(summary=SearchSummary(query="q", num_results=len(results)), results=results)


@pytest.fixture
def address_input():
    return AddressInput(
        address_line1="123 Main St",
        postal_code="12345",
        city="Seattle",
        country="USA",
    )
