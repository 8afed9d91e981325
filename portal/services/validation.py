from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError

from portal.core.config import settings
from portal.core.errors import ValidationError
from portal.schemas.agency import AgencyQuery
from portal.schemas.listing_query import ListingQuery

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ValidationResult(Generic[M]):
    ok: bool
    data: M | None
    errors: list[dict[str, Any]]


def _field_errors(exc: PydanticValidationError) -> list[dict[str, Any]]:
    # keep the parts a client can act on; drop pydantic's url/ctx noise
    return [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())),
            "type": err.get("type"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]


def validate_payload(schema: Type[M], payload: Any) -> ValidationResult[M]:
    """
    Single validation entry point for request payloads.
    Returns a tagged result instead of raising so callers decide how to fail.
    """
    if not isinstance(payload, dict):
        return ValidationResult(
            ok=False,
            data=None,
            errors=[{"field": "", "type": "dict_type", "message": "Expected a JSON object"}],
        )

    try:
        obj = schema.model_validate(payload)
    except PydanticValidationError as e:
        return ValidationResult(ok=False, data=None, errors=_field_errors(e))

    return ValidationResult(ok=True, data=obj, errors=[])


def validate_or_raise(schema: Type[M], payload: Any) -> M:
    res = validate_payload(schema, payload)
    if not res.ok:
        raise ValidationError("Validation failed", details=res.errors)
    assert res.data is not None
    return res.data


def query_params(request: Request, *, repeated: tuple[str, ...] = ()) -> dict[str, Any]:
    """
    Flatten the query string into a dict for schema validation.
    Blank values are dropped so ``?status=`` means "no filter".
    """
    params: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if not value.strip():
            continue
        if key in repeated:
            params.setdefault(key, []).append(value)
        else:
            params[key] = value
    return params


async def listing_query(request: Request) -> ListingQuery:
    params = query_params(request, repeated=("features", "features[]"))
    # form encoders send arrays as features[]=a&features[]=b
    bracketed = params.pop("features[]", None)
    if bracketed:
        params.setdefault("features", []).extend(bracketed)
    params.setdefault("limit", settings.default_page_size)
    query = validate_or_raise(ListingQuery, params)
    if query.limit > settings.max_page_size:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "limit", "type": "less_than_equal", "message": f"must be <= {settings.max_page_size}"}],
        )
    return query


async def agency_query(request: Request) -> AgencyQuery:
    params = query_params(request)
    params.setdefault("limit", settings.default_page_size)
    return validate_or_raise(AgencyQuery, params)
