import pytest
from fastapi import Request

from portal.core.errors import ValidationError
from portal.schemas.listing_query import ListingQuery
from portal.schemas.project import ProjectCreate
from portal.schemas.property import PropertyCreate, PropertyUpdate
from portal.services.validation import listing_query, validate_or_raise, validate_payload
from tests.fixtures_seed import PROJECT_BODY, PROPERTY_BODY


def test_valid_property_payload():
    res = validate_payload(PropertyCreate, PROPERTY_BODY)
    assert res.ok
    assert res.errors == []
    assert res.data.title == PROPERTY_BODY["title"]


def test_status_in_payload_is_dropped():
    res = validate_payload(PropertyCreate, {**PROPERTY_BODY, "status": "APPROVED"})
    assert res.ok
    assert "status" not in res.data.model_dump()


def test_missing_and_malformed_fields_are_reported():
    body = {**PROPERTY_BODY, "price": -5}
    body.pop("title")
    res = validate_payload(PropertyCreate, body)
    assert not res.ok
    fields = {e["field"] for e in res.errors}
    assert {"title", "price"} <= fields


def test_non_object_payload():
    res = validate_payload(PropertyCreate, ["not", "a", "dict"])
    assert not res.ok
    assert res.errors[0]["type"] == "dict_type"


def test_validate_or_raise_carries_details():
    with pytest.raises(ValidationError) as exc:
        validate_or_raise(PropertyCreate, {})
    assert exc.value.status_code == 400
    assert exc.value.details


def test_project_floor_numbers_must_be_unique():
    body = {**PROJECT_BODY, "floors": [{"number": 1}, {"number": 1}]}
    assert not validate_payload(ProjectCreate, body).ok


def test_project_blank_urls_become_none():
    res = validate_payload(ProjectCreate, {**PROJECT_BODY, "brochure_url": "", "google_maps_url": " "})
    assert res.ok
    assert res.data.brochure_url is None
    assert res.data.google_maps_url is None


def test_listing_query_accepts_camel_case_and_pages():
    q = ListingQuery.model_validate({"minPrice": "1000", "limit": "10", "page": "3"})
    assert q.min_price == 1000
    assert q.resolved_offset == 20


def test_listing_query_explicit_offset_wins():
    q = ListingQuery.model_validate({"limit": "10", "page": "3", "offset": "5"})
    assert q.resolved_offset == 5


@pytest.mark.parametrize(
    "params",
    [
        {"minPrice": "abc"},
        {"minPrice": "500", "maxPrice": "100"},
        {"limit": "0"},
        {"limit": "101"},
        {"offset": "-1"},
        {"status": "ARCHIVED"},
        {"sortOrder": "sideways"},
    ],
)
def test_listing_query_rejects_malformed_values(params):
    with pytest.raises(ValidationError):
        validate_or_raise(ListingQuery, params)


def test_property_blank_optional_fields_become_none():
    body = {**PROPERTY_BODY, "latitude": "", "longitude": " ", "municipality": "", "google_maps_url": ""}
    res = validate_payload(PropertyCreate, body)
    assert res.ok, res.errors
    assert res.data.latitude is None
    assert res.data.longitude is None
    assert res.data.municipality is None
    assert res.data.google_maps_url is None


def test_property_update_blank_coordinates_clear_them():
    res = validate_payload(PropertyUpdate, {"latitude": "", "price": 1000})
    assert res.ok, res.errors
    assert res.data.latitude is None
    assert "latitude" in res.data.model_fields_set


def _request(query_string: bytes) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "query_string": query_string, "headers": []})


async def test_listing_query_collects_both_feature_spellings():
    q = await listing_query(_request(b"features[]=pool&features=garden&features%5B%5D=gym"))
    assert sorted(q.features) == ["garden", "gym", "pool"]


async def test_listing_query_drops_blank_values():
    q = await listing_query(_request(b"status=&search=&features[]="))
    assert q.status is None
    assert q.search is None
    assert q.features == []
