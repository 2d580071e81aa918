"""Search key derivation."""

from __future__ import annotations

from skycache_api.cache.cache_keys import search_fingerprint, search_key
from skycache_core.schemas import SearchRequest

from .conftest import RETURN_DAY, TRAVEL_DAY


def _request(**overrides) -> SearchRequest:
    params = {
        "origin": "SFO",
        "destination": "JFK",
        "departure_date": TRAVEL_DAY.isoformat(),
        "cabin_class": "economy",
        "passengers": {"adults": 1},
    }
    params.update(overrides)
    return SearchRequest.model_validate(params)


def test_key_is_versioned_sha256():
    key = search_key(_request())
    prefix, version, digest = key.split(":")
    assert (prefix, version) == ("search", "v1")
    assert len(digest) == 64
    int(digest, 16)


def test_key_ignores_mapping_order_and_code_case():
    a = SearchRequest.model_validate(
        {
            "origin": "sfo",
            "destination": "jfk",
            "departure_date": TRAVEL_DAY.isoformat(),
            "passengers": {"children": 0, "adults": 1},
        }
    )
    b = SearchRequest.model_validate(
        {
            "passengers": {"adults": 1, "children": 0},
            "departure_date": TRAVEL_DAY.isoformat(),
            "destination": "JFK",
            "origin": "SFO",
        }
    )
    assert search_key(a) == search_key(b)


def test_cabin_label_spellings_share_a_key():
    assert search_key(_request(cabin_class="Premium Economy")) == search_key(
        _request(cabin_class="premium_economy")
    )


def test_distinct_parameters_give_distinct_keys():
    base = search_key(_request())
    variants = [
        _request(origin="OAK"),
        _request(destination="EWR"),
        _request(departure_date="2026-11-21"),
        _request(return_date=RETURN_DAY.isoformat()),
        _request(cabin_class="business"),
        _request(passengers={"adults": 2}),
        _request(passengers={"adults": 1, "infants": 1}),
    ]
    keys = {search_key(r) for r in variants}
    assert base not in keys
    assert len(keys) == len(variants)


def test_fingerprint_is_canonical_json():
    fingerprint = search_fingerprint(_request())
    assert fingerprint.startswith('{"cabin_class":"ECONOMY","departure_date":')
    assert " " not in fingerprint
    assert '"return_date":null' in fingerprint
