from types import SimpleNamespace

import pytest

from portal.core.errors import AuthorizationError, InvalidStateError, ValidationError
from portal.models.enums import ListingStatus, UserRole
from portal.schemas.listing_query import ListingQuery
from portal.services import lifecycle, listings
from portal.services.auth import ANONYMOUS, Actor
from portal.services.visibility import PROPERTY_RESOURCE, scope_predicate

AGENT = Actor(user_id="usr_agent", role=UserRole.AGENT, agency_id="agc_x")
OTHER_AGENT = Actor(user_id="usr_other", role=UserRole.AGENT, agency_id="agc_x")
ADMIN_X = Actor(user_id="usr_admin_x", role=UserRole.AGENCY_ADMIN, agency_id="agc_x")
ADMIN_Y = Actor(user_id="usr_admin_y", role=UserRole.AGENCY_ADMIN, agency_id="agc_y")
SUPER = Actor(user_id="usr_super", role=UserRole.SUPER_ADMIN)


def _listing(status: ListingStatus = ListingStatus.PENDING, reason: str | None = None):
    return SimpleNamespace(
        id="prp_1",
        agent_id=AGENT.user_id,
        agency_id="agc_x",
        status=status.value,
        rejection_reason=reason,
        status_changed_at=None,
        reviewed_by=None,
        updated_by=None,
    )


def test_new_listing_always_pending():
    fields = lifecycle.initial_fields(AGENT)
    assert fields["status"] == ListingStatus.PENDING.value
    assert fields["rejection_reason"] is None
    assert fields["agent_id"] == AGENT.user_id
    assert fields["agency_id"] == "agc_x"


@pytest.mark.parametrize("actor", [ADMIN_X, SUPER, ANONYMOUS])
def test_only_agents_create(actor):
    with pytest.raises(AuthorizationError):
        lifecycle.initial_fields(actor)


def test_agent_without_agency_cannot_create():
    with pytest.raises(AuthorizationError):
        lifecycle.initial_fields(Actor(user_id="usr_lonely", role=UserRole.AGENT))


def test_reject_then_resubmit_then_approve():
    listing = _listing()

    previous = lifecycle.reject(listing, ADMIN_X, "  incomplete photos  ")
    assert previous == ListingStatus.PENDING
    assert listing.status == ListingStatus.REJECTED.value
    assert listing.rejection_reason == "incomplete photos"
    assert listing.reviewed_by == ADMIN_X.user_id

    lifecycle.resubmit(listing, AGENT)
    assert listing.status == ListingStatus.PENDING.value
    assert listing.rejection_reason is None

    lifecycle.approve(listing, SUPER)
    assert listing.status == ListingStatus.APPROVED.value
    assert listing.rejection_reason is None
    assert listing.status_changed_at is not None


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_reject_requires_reason(reason):
    listing = _listing()
    with pytest.raises(ValidationError):
        lifecycle.reject(listing, ADMIN_X, reason)
    assert listing.status == ListingStatus.PENDING.value


def test_admin_of_other_agency_cannot_review():
    listing = _listing()
    with pytest.raises(AuthorizationError):
        lifecycle.approve(listing, ADMIN_Y)
    with pytest.raises(AuthorizationError):
        lifecycle.reject(listing, ADMIN_Y, "nope")
    assert listing.status == ListingStatus.PENDING.value


def test_agents_cannot_review():
    with pytest.raises(AuthorizationError):
        lifecycle.approve(_listing(), AGENT)


@pytest.mark.parametrize("status", [ListingStatus.PENDING, ListingStatus.APPROVED])
def test_resubmit_only_from_rejected(status):
    listing = _listing(status)
    with pytest.raises(InvalidStateError):
        lifecycle.resubmit(listing, AGENT)
    assert listing.status == status.value


def test_resubmit_only_by_owner():
    listing = _listing(ListingStatus.REJECTED, "blurry")
    with pytest.raises(AuthorizationError):
        lifecycle.resubmit(listing, OTHER_AGENT)
    with pytest.raises(AuthorizationError):
        lifecycle.resubmit(listing, ADMIN_X)
    assert listing.rejection_reason == "blurry"


def test_approved_is_final():
    listing = _listing(ListingStatus.APPROVED)
    with pytest.raises(InvalidStateError):
        lifecycle.approve(listing, SUPER)
    with pytest.raises(InvalidStateError):
        lifecycle.reject(listing, SUPER, "changed my mind")


def test_rejected_can_be_approved_directly():
    listing = _listing(ListingStatus.REJECTED, "blurry")
    assert lifecycle.approve(listing, ADMIN_X) == ListingStatus.REJECTED
    assert listing.rejection_reason is None


def test_owner_edit_of_rejected_listing_resubmits():
    listing = _listing(ListingStatus.REJECTED, "blurry")
    assert lifecycle.after_content_edit(listing, AGENT) == ListingStatus.REJECTED
    assert listing.status == ListingStatus.PENDING.value
    assert listing.rejection_reason is None


def test_admin_edit_keeps_status():
    listing = _listing(ListingStatus.REJECTED, "blurry")
    assert lifecycle.after_content_edit(listing, ADMIN_X) is None
    assert listing.status == ListingStatus.REJECTED.value


def test_public_sees_listing_only_after_approval():
    listing = SimpleNamespace(id="prp_2", reviewed_by=None, **lifecycle.initial_fields(AGENT))
    public = scope_predicate(ANONYMOUS, ListingQuery(), PROPERTY_RESOURCE)
    own_agency = scope_predicate(ADMIN_X, ListingQuery(), PROPERTY_RESOURCE)

    assert listing.status == ListingStatus.PENDING.value
    assert not public.matches(listing)
    assert own_agency.matches(listing)

    lifecycle.reject(listing, ADMIN_X, "incomplete photos")
    assert not public.matches(listing)

    lifecycle.resubmit(listing, AGENT)
    assert listing.rejection_reason is None
    assert not public.matches(listing)

    lifecycle.approve(listing, ADMIN_X)
    assert public.matches(listing)
    assert own_agency.matches(listing)


def test_cross_agency_approve_leaves_listing_hidden():
    listing = SimpleNamespace(id="prp_3", reviewed_by=None, **lifecycle.initial_fields(AGENT))

    with pytest.raises(AuthorizationError):
        lifecycle.approve(listing, ADMIN_Y)

    assert listing.status == ListingStatus.PENDING.value
    assert listing.reviewed_by is None
    assert not scope_predicate(ANONYMOUS, ListingQuery(), PROPERTY_RESOURCE).matches(listing)
    assert not scope_predicate(ADMIN_Y, ListingQuery(), PROPERTY_RESOURCE).matches(listing)


async def test_reject_body_is_checked_after_the_reviewer(monkeypatch):
    listing = _listing()

    async def _load(db, resource, listing_id):
        return listing

    monkeypatch.setattr(listings, "load_listing", _load)
    malformed = {"reason": "x" * 3000}

    with pytest.raises(AuthorizationError):
        await listings.transition(None, AGENT, PROPERTY_RESOURCE, "prp_1", lifecycle.REJECT, payload=malformed)
    with pytest.raises(AuthorizationError):
        await listings.transition(None, ADMIN_Y, PROPERTY_RESOURCE, "prp_1", lifecycle.REJECT, payload=malformed)
    with pytest.raises(ValidationError) as exc:
        await listings.transition(None, ADMIN_X, PROPERTY_RESOURCE, "prp_1", lifecycle.REJECT, payload=malformed)
    assert exc.value.details[0]["field"] == "reason"
    assert listing.status == ListingStatus.PENDING.value
