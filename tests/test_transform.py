from address_validator.etl import transform


def test_parse_search_response_maps_fields():
    payload = {
        "summary": {"query": "1 microsoft way", "queryType": "NON_NEAR", "numResults": 1, "fuzzyLevel": 1},
        "results": [
            {
                "type": "Point Address",
                "id": "US/PAD/p0/1",
                "score": 0.98,
                "address": {
                    "streetNumber": "1",
                    "streetName": "Microsoft Way",
                    "municipality": "Redmond",
                    "postalCode": "98052",
                    "countryCode": "US",
                    "country": "United States",
                    "countryCodeISO3": "USA",
                    "freeformAddress": "1 Microsoft Way, Redmond, WA 98052",
                },
                "position": {"lat": 47.64, "lon": -122.13},
                "viewport": {
                    "topLeftPoint": {"lat": 47.65, "lon": -122.14},
                    "btmRightPoint": {"lat": 47.63, "lon": -122.12},
                },
                "entryPoints": [{"type": "main", "position": {"lat": 47.64, "lon": -122.131}}],
            },
            "garbage",
        ],
    }

    response = transform.parse_search_response(payload)

    assert response.summary.query == "1 microsoft way"
    assert response.summary.fuzzy_level == 1
    assert len(response.results) == 1
    candidate = response.results[0]
    assert candidate.score == 0.98
    assert candidate.position.lat == 47.64
    assert candidate.address.freeform_address == "1 Microsoft Way, Redmond, WA 98052"
    assert candidate.address.country_code_iso3 == "USA"
    assert candidate.viewport.btm_right_point.lon == -122.12
    assert candidate.entry_points[0].type == "main"


def test_parse_search_response_handles_empty_payload():
    response = transform.parse_search_response({})
    assert response.results == []
    assert response.summary.num_results == 0


def test_parse_candidate_tolerates_missing_parts():
    candidate = transform.parse_candidate({"score": "bad"})
    assert candidate.score == 0.0
    assert candidate.address is None
    assert candidate.viewport is None
    assert candidate.position.lat == 0.0
