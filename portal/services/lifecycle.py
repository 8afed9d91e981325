"""
Approval lifecycle for listings (properties and projects).

    create ──> PENDING ──approve──> APPROVED (final)
                  │  ^
           reject │  │ resubmit (owning agent)
                  v  │
               REJECTED ──approve──> APPROVED

The functions here are pure: they check who may act, check the current
state, and mutate the listing object in place. Loading, persisting and
auditing happen in ``services.listings``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from portal.core.errors import AuthorizationError, InvalidStateError, ValidationError
from portal.models.enums import ListingStatus
from portal.services.auth import Actor

APPROVE = "approve"
REJECT = "reject"
RESUBMIT = "resubmit"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _status(listing: Any) -> ListingStatus:
    return ListingStatus(listing.status)


def _set_status(listing: Any, status: ListingStatus, *, reason: str | None, when: datetime) -> None:
    listing.status = status.value
    # reason lives only on REJECTED listings
    listing.rejection_reason = reason if status == ListingStatus.REJECTED else None
    listing.status_changed_at = when


def assert_can_create(actor: Actor) -> str:
    """Returns the agency the new listing belongs to."""
    if not actor.is_agent:
        raise AuthorizationError("Only agents can create listings")
    if not actor.agency_id:
        raise AuthorizationError("Agent is not assigned to an agency")
    return actor.agency_id


def initial_fields(actor: Actor) -> dict[str, Any]:
    agency_id = assert_can_create(actor)
    return {
        "agent_id": actor.user_id,
        "agency_id": agency_id,
        "status": ListingStatus.PENDING.value,
        "rejection_reason": None,
        "status_changed_at": _now(),
        "created_by": actor.user_id,
        "updated_by": actor.user_id,
    }


def assert_can_review(actor: Actor, listing: Any) -> None:
    if actor.is_super_admin:
        return
    if actor.is_agency_admin:
        if actor.agency_id and listing.agency_id == actor.agency_id:
            return
        raise AuthorizationError("You can only review listings from your own agency")
    raise AuthorizationError("Only agency admins and super admins can review listings")


def approve(listing: Any, actor: Actor, *, now: datetime | None = None) -> ListingStatus:
    """PENDING | REJECTED -> APPROVED. Returns the previous status."""
    assert_can_review(actor, listing)
    previous = _status(listing)
    if previous == ListingStatus.APPROVED:
        raise InvalidStateError("Listing is already approved")

    _set_status(listing, ListingStatus.APPROVED, reason=None, when=now or _now())
    listing.reviewed_by = actor.user_id
    listing.updated_by = actor.user_id
    return previous


def reject(listing: Any, actor: Actor, reason: str | None, *, now: datetime | None = None) -> ListingStatus:
    """PENDING -> REJECTED with a mandatory reason. Returns the previous status."""
    assert_can_review(actor, listing)
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError(
            "Rejection reason is required",
            details=[{"field": "reason", "type": "missing", "message": "must not be empty"}],
        )

    previous = _status(listing)
    if previous == ListingStatus.APPROVED:
        raise InvalidStateError("Approved listings cannot be rejected")
    if previous == ListingStatus.REJECTED:
        raise InvalidStateError("Listing is already rejected")

    _set_status(listing, ListingStatus.REJECTED, reason=reason, when=now or _now())
    listing.reviewed_by = actor.user_id
    listing.updated_by = actor.user_id
    return previous


def resubmit(listing: Any, actor: Actor, *, now: datetime | None = None) -> ListingStatus:
    """REJECTED -> PENDING, owning agent only. Returns the previous status."""
    if not actor.is_agent:
        raise AuthorizationError("Only agents can resubmit listings")
    if listing.agent_id != actor.user_id:
        raise AuthorizationError("Only the owning agent can resubmit this listing")

    previous = _status(listing)
    if previous != ListingStatus.REJECTED:
        raise InvalidStateError(f"Only rejected listings can be resubmitted (current: {previous.value})")

    _set_status(listing, ListingStatus.PENDING, reason=None, when=now or _now())
    listing.updated_by = actor.user_id
    return previous


def after_content_edit(listing: Any, actor: Actor) -> ListingStatus | None:
    """
    An owning agent fixing a rejected listing sends it back for review.
    Returns the previous status when a transition happened.
    """
    if actor.is_agent and listing.agent_id == actor.user_id and _status(listing) == ListingStatus.REJECTED:
        return resubmit(listing, actor)
    return None
