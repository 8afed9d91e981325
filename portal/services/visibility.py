"""
Role-scoped visibility for listings.

``scope_predicate`` turns a requester plus raw feed filters into a ``Predicate``:
a flat AND of conditions that can be evaluated in memory (``matches``) or
compiled to SQLAlchemy clauses (``to_clauses``). Every list, read and metrics
path goes through it, so the role rules live in exactly one place.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import or_

from portal.core.errors import AuthorizationError, ValidationError
from portal.models.enums import ListingStatus
from portal.models.listing import Project, Property
from portal.schemas.listing_query import ListingQuery
from portal.services.auth import Actor

EQ = "eq"
ICONTAINS = "icontains"
GTE = "gte"
LTE = "lte"
OVERLAP = "overlap"
SEARCH = "search"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass(frozen=True)
class Condition:
    fields: tuple[str, ...]
    op: str
    value: Any

    def matches(self, row: Any) -> bool:
        if self.op == SEARCH:
            needle = str(self.value).lower()
            return any(needle in str(getattr(row, f, None) or "").lower() for f in self.fields)

        actual = _plain(getattr(row, self.fields[0], None))
        if self.op == EQ:
            return actual == self.value
        if self.op == ICONTAINS:
            return actual is not None and str(self.value).lower() in str(actual).lower()
        if self.op == GTE:
            return actual is not None and actual >= self.value
        if self.op == LTE:
            return actual is not None and actual <= self.value
        if self.op == OVERLAP:
            return bool(set(actual or ()) & set(self.value))
        raise ValueError(f"Unknown operator: {self.op}")

    def to_clause(self, model: type):
        if self.op == SEARCH:
            pattern = _like_pattern(str(self.value))
            return or_(*(getattr(model, f).ilike(pattern, escape="\\") for f in self.fields))

        col = getattr(model, self.fields[0])
        if self.op == EQ:
            return col == self.value
        if self.op == ICONTAINS:
            return col.ilike(_like_pattern(str(self.value)), escape="\\")
        if self.op == GTE:
            return col >= self.value
        if self.op == LTE:
            return col <= self.value
        if self.op == OVERLAP:
            return col.overlap(list(self.value))
        raise ValueError(f"Unknown operator: {self.op}")


@dataclass(frozen=True)
class Predicate:
    conditions: tuple[Condition, ...] = ()

    def where(self, field_name: str, op: str, value: Any) -> Predicate:
        return Predicate(self.conditions + (Condition((field_name,), op, _plain(value)),))

    def search(self, fields: tuple[str, ...], text: str) -> Predicate:
        return Predicate(self.conditions + (Condition(fields, SEARCH, text),))

    def and_(self, other: Predicate) -> Predicate:
        return Predicate(self.conditions + other.conditions)

    def matches(self, row: Any) -> bool:
        return all(c.matches(row) for c in self.conditions)

    def to_clauses(self, model: type) -> list:
        return [c.to_clause(model) for c in self.conditions]

    def value_of(self, field_name: str, op: str = EQ) -> Any | None:
        for c in self.conditions:
            if c.fields == (field_name,) and c.op == op:
                return c.value
        return None


@dataclass(frozen=True)
class ListingResource:
    """Declares what a listing variant can be filtered, searched and sorted by."""

    name: str
    model: type
    title_field: str
    search_fields: tuple[str, ...]
    # ListingQuery attribute -> (column, operator)
    filters: Mapping[str, tuple[str, str]] = field(default_factory=dict)
    # sortBy value -> column
    sortable: Mapping[str, str] = field(default_factory=dict)


PROPERTY_RESOURCE = ListingResource(
    name="property",
    model=Property,
    title_field="title",
    search_fields=(
        "title",
        "description",
        "location_state",
        "location_city",
        "location_neigh",
        "municipality",
        "address",
    ),
    filters={
        "type": ("type", EQ),
        "transaction_type": ("transaction_type", EQ),
        "location_state": ("location_state", ICONTAINS),
        "location_city": ("location_city", ICONTAINS),
        "location_neigh": ("location_neigh", ICONTAINS),
        "municipality": ("municipality", ICONTAINS),
        "min_price": ("price", GTE),
        "max_price": ("price", LTE),
        "min_bedrooms": ("bedrooms", GTE),
        "max_bedrooms": ("bedrooms", LTE),
        "min_bathrooms": ("bathrooms", GTE),
        "max_bathrooms": ("bathrooms", LTE),
        "min_square_meters": ("square_meters", GTE),
        "max_square_meters": ("square_meters", LTE),
        "features": ("features", OVERLAP),
    },
    sortable={
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "price": "price",
        "title": "title",
        "bedrooms": "bedrooms",
        "bathrooms": "bathrooms",
        "squareMeters": "square_meters",
    },
)

PROJECT_RESOURCE = ListingResource(
    name="project",
    model=Project,
    title_field="name",
    search_fields=("name", "description", "location"),
    filters={
        "location": ("location", ICONTAINS),
    },
    sortable={
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "name": "name",
    },
)

# every content filter any resource declares; used to reject filters a resource lacks
_CONTENT_FILTERS = frozenset(PROPERTY_RESOURCE.filters) | frozenset(PROJECT_RESOURCE.filters)


def role_predicate(actor: Actor, query: ListingQuery) -> Predicate:
    """Apply the role rule: which owners and statuses the requester may see."""
    p = Predicate()

    if actor.is_anonymous:
        # caller-supplied status is ignored for the public
        p = p.where("status", EQ, ListingStatus.APPROVED)
        if query.agent_id:
            p = p.where("agent_id", EQ, query.agent_id)
        if query.agency_id:
            p = p.where("agency_id", EQ, query.agency_id)
        return p

    if actor.is_agent:
        if query.agent_id is None or query.agent_id == actor.user_id:
            p = p.where("agent_id", EQ, actor.user_id)
            if query.status:
                p = p.where("status", EQ, query.status)
        else:
            # another agent's listings: same view the public gets
            p = p.where("status", EQ, ListingStatus.APPROVED)
            p = p.where("agent_id", EQ, query.agent_id)
        if query.agency_id:
            p = p.where("agency_id", EQ, query.agency_id)
        return p

    if actor.is_agency_admin:
        if not actor.agency_id:
            raise AuthorizationError("Agency admin is not assigned to an agency")
        # own agency only, whatever agency filter was sent
        p = p.where("agency_id", EQ, actor.agency_id)
        if query.status:
            p = p.where("status", EQ, query.status)
        if query.agent_id:
            p = p.where("agent_id", EQ, query.agent_id)
        return p

    if actor.is_super_admin:
        if query.status:
            p = p.where("status", EQ, query.status)
        if query.agent_id:
            p = p.where("agent_id", EQ, query.agent_id)
        if query.agency_id:
            p = p.where("agency_id", EQ, query.agency_id)
        return p

    raise AuthorizationError("Unknown role")


def filter_predicate(query: ListingQuery, resource: ListingResource) -> Predicate:
    p = Predicate()
    unsupported = []
    for name in sorted(_CONTENT_FILTERS):
        value = getattr(query, name)
        if value is None or value == []:
            continue
        declared = resource.filters.get(name)
        if declared is None:
            unsupported.append(name)
            continue
        column, op = declared
        p = p.where(column, op, value)

    if unsupported:
        raise ValidationError(
            f"Unsupported filter(s) for {resource.name} listings",
            details=[{"field": n, "type": "unsupported_filter", "message": "not filterable"} for n in unsupported],
        )

    if query.search and query.search.strip():
        p = p.search(resource.search_fields, query.search.strip())
    return p


def scope_predicate(actor: Actor, query: ListingQuery, resource: ListingResource) -> Predicate:
    """Role rule first, then every content filter ANDed on."""
    return role_predicate(actor, query).and_(filter_predicate(query, resource))


def resolve_sort(query: ListingQuery, resource: ListingResource) -> tuple[str, bool]:
    """Returns (column, descending)."""
    column = resource.sortable.get(query.sort_by)
    if column is None and query.sort_by in resource.sortable.values():
        column = query.sort_by
    if column is None:
        raise ValidationError(
            "Invalid sortBy parameter",
            details=[{"field": "sortBy", "type": "enum", "message": f"allowed: {sorted(resource.sortable)}"}],
        )
    return column, query.sort_order == "desc"


def can_manage_listing(actor: Actor, listing: Any) -> bool:
    if actor.is_super_admin:
        return True
    if actor.is_agency_admin:
        return actor.agency_id is not None and listing.agency_id == actor.agency_id
    if actor.is_agent:
        return listing.agent_id == actor.user_id
    return False


def can_view_listing(actor: Actor, listing: Any) -> bool:
    return _plain(listing.status) == ListingStatus.APPROVED.value or can_manage_listing(actor, listing)


def exposes_full_record(actor: Actor, listing: Any) -> bool:
    # rejection reasons, reviewer ids and audit columns are for managers only
    return can_manage_listing(actor, listing)
