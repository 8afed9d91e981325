from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql

from portal.core.errors import AuthorizationError, ValidationError
from portal.models.enums import ListingStatus, UserRole
from portal.models.listing import Property
from portal.schemas.listing_query import ListingQuery
from portal.services.auth import ANONYMOUS, Actor
from portal.services.visibility import (
    PROJECT_RESOURCE,
    PROPERTY_RESOURCE,
    can_view_listing,
    exposes_full_record,
    resolve_sort,
    scope_predicate,
)

AGENT_1 = Actor(user_id="usr_a1", role=UserRole.AGENT, agency_id="agc_x")
AGENT_2 = Actor(user_id="usr_a2", role=UserRole.AGENT, agency_id="agc_x")
ADMIN_X = Actor(user_id="usr_ax", role=UserRole.AGENCY_ADMIN, agency_id="agc_x")
SUPER = Actor(user_id="usr_s", role=UserRole.SUPER_ADMIN)


def _row(id, agent_id, agency_id, status, **extra):
    base = dict(
        id=id,
        agent_id=agent_id,
        agency_id=agency_id,
        status=status.value,
        title="House",
        description="",
        price=100_000.0,
        bedrooms=2,
        location_city="La Paz",
        features=[],
    )
    base.update(extra)
    return SimpleNamespace(**base)


ROWS = [
    _row("p1", "usr_a1", "agc_x", ListingStatus.PENDING),
    _row("p2", "usr_a1", "agc_x", ListingStatus.APPROVED),
    _row("p3", "usr_a1", "agc_x", ListingStatus.REJECTED),
    _row("p4", "usr_a2", "agc_x", ListingStatus.APPROVED),
    _row("p5", "usr_a2", "agc_x", ListingStatus.PENDING),
    _row("p6", "usr_b1", "agc_y", ListingStatus.APPROVED),
    _row("p7", "usr_b1", "agc_y", ListingStatus.REJECTED),
]


def _visible(actor, **filters):
    predicate = scope_predicate(actor, ListingQuery(**filters), PROPERTY_RESOURCE)
    return {r.id for r in ROWS if predicate.matches(r)}


def test_anonymous_sees_only_approved():
    assert _visible(ANONYMOUS) == {"p2", "p4", "p6"}


@pytest.mark.parametrize("status", list(ListingStatus))
def test_anonymous_status_filter_is_ignored(status):
    assert _visible(ANONYMOUS, status=status) == {"p2", "p4", "p6"}


def test_agent_sees_own_in_every_status():
    assert _visible(AGENT_1) == {"p1", "p2", "p3"}
    assert _visible(AGENT_1, agent_id="usr_a1") == {"p1", "p2", "p3"}


def test_agent_own_status_filter():
    assert _visible(AGENT_1, status=ListingStatus.REJECTED) == {"p3"}


def test_agent_looking_at_another_agent_gets_approved_only():
    assert _visible(AGENT_1, agent_id="usr_a2") == {"p4"}
    assert _visible(AGENT_1, agent_id="usr_b1", status=ListingStatus.REJECTED) == {"p6"}


def test_agency_admin_sees_whole_agency():
    assert _visible(ADMIN_X) == {"p1", "p2", "p3", "p4", "p5"}


def test_agency_admin_cannot_widen_to_other_agency():
    assert _visible(ADMIN_X, agency_id="agc_y") == {"p1", "p2", "p3", "p4", "p5"}


def test_agency_admin_without_agency_is_forbidden():
    with pytest.raises(AuthorizationError):
        _visible(Actor(user_id="usr_orphan", role=UserRole.AGENCY_ADMIN))


def test_super_admin_sees_everything_and_filters():
    assert _visible(SUPER) == {r.id for r in ROWS}
    assert _visible(SUPER, agency_id="agc_y") == {"p6", "p7"}
    assert _visible(SUPER, status=ListingStatus.PENDING) == {"p1", "p5"}


def test_content_filters_are_anded():
    rows = [
        _row("a", "u", "agc_x", ListingStatus.APPROVED, price=90_000.0, bedrooms=3, location_city="La Paz"),
        _row("b", "u", "agc_x", ListingStatus.APPROVED, price=250_000.0, bedrooms=3, location_city="La Paz"),
        _row("c", "u", "agc_x", ListingStatus.APPROVED, price=95_000.0, bedrooms=1, location_city="El Alto"),
        _row("d", "u", "agc_x", ListingStatus.PENDING, price=95_000.0, bedrooms=3, location_city="la paz"),
    ]
    query = ListingQuery(maxPrice=100_000, minBedrooms=2, locationCity="paz")
    predicate = scope_predicate(ANONYMOUS, query, PROPERTY_RESOURCE)
    assert [r.id for r in rows if predicate.matches(r)] == ["a"]


def test_features_match_any():
    rows = [
        _row("a", "u", "agc_x", ListingStatus.APPROVED, features=["pool"]),
        _row("b", "u", "agc_x", ListingStatus.APPROVED, features=["garden", "garage"]),
        _row("c", "u", "agc_x", ListingStatus.APPROVED, features=[]),
    ]
    predicate = scope_predicate(ANONYMOUS, ListingQuery(features=["garage", "pool"]), PROPERTY_RESOURCE)
    assert [r.id for r in rows if predicate.matches(r)] == ["a", "b"]


def test_search_is_case_insensitive_over_text_fields():
    rows = [
        _row("a", "u", "agc_x", ListingStatus.APPROVED, title="Sunny Loft"),
        _row("b", "u", "agc_x", ListingStatus.APPROVED, description="near the LOFT district"),
        _row("c", "u", "agc_x", ListingStatus.APPROVED),
    ]
    predicate = scope_predicate(ANONYMOUS, ListingQuery(search="loft"), PROPERTY_RESOURCE)
    assert [r.id for r in rows if predicate.matches(r)] == ["a", "b"]


def test_undeclared_filter_is_rejected():
    with pytest.raises(ValidationError):
        scope_predicate(ANONYMOUS, ListingQuery(minPrice=10), PROJECT_RESOURCE)


def test_sort_fields():
    assert resolve_sort(ListingQuery(sortBy="price", sortOrder="asc"), PROPERTY_RESOURCE) == ("price", False)
    assert resolve_sort(ListingQuery(), PROPERTY_RESOURCE) == ("created_at", True)
    with pytest.raises(ValidationError):
        resolve_sort(ListingQuery(sortBy="price"), PROJECT_RESOURCE)


def test_predicate_compiles_to_sql():
    predicate = scope_predicate(ADMIN_X, ListingQuery(search="50%", features=["pool"]), PROPERTY_RESOURCE)
    sql = " AND ".join(
        str(c.compile(dialect=postgresql.dialect())) for c in predicate.to_clauses(Property)
    )
    assert "properties.agency_id" in sql
    assert "ILIKE" in sql
    assert "&&" in sql


def test_single_read_and_field_exposure():
    pending = ROWS[0]
    approved_other = ROWS[5]

    assert not can_view_listing(ANONYMOUS, pending)
    assert can_view_listing(ANONYMOUS, approved_other)
    assert can_view_listing(AGENT_1, pending)
    assert not can_view_listing(AGENT_2, pending)
    assert can_view_listing(ADMIN_X, pending)

    assert exposes_full_record(AGENT_1, pending)
    assert not exposes_full_record(ADMIN_X, approved_other)
    assert exposes_full_record(SUPER, approved_other)
