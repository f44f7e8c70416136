# app/core/bots/facility_bot/validators.py
"""
Location validation and path resolution for the Facility Bot.

Kept out of ``FacilityBotHandler`` so they can be tested independently.
Both take an optional :class:`ReferenceData`; when omitted, the index for
the configured reference files is used.
"""
from __future__ import annotations

from typing import Optional

from app.core.bots.facility_bot.reference_data import (
    ReferenceData,
    get_reference_data,
    normalize_location,
)
from app.core.bots.facility_bot.texts import get_text
from app.core.engine.domain import DispatchResult, LocationRole

__all__ = ["validate_location", "resolve_path"]

_REJECTION_KEYS = {
    LocationRole.TO: "err_to_location",
    LocationRole.FROM: "err_from_location",
}


def validate_location(
    role: LocationRole,
    text: Optional[str],
    reference: Optional[ReferenceData] = None,
) -> DispatchResult:
    """Check *text* against the valid-location list for *role*.

    Matching is case-insensitive and exact on the raw text: ``"LOBBY"`` is
    accepted as ``"LOBBY"``, ``" Lobby "`` is rejected.

    Raises:
        ReferenceDataUnavailable: reference files missing or malformed.
    """
    data = reference if reference is not None else get_reference_data()
    value = text or ""

    if value and value.casefold() in data.locations_for(role):
        return DispatchResult(success=True, value=value)

    return DispatchResult(
        success=False,
        message=get_text(_REJECTION_KEYS[role], input=value),
    )


def resolve_path(
    from_location: str,
    to_location: str,
    reference: Optional[ReferenceData] = None,
) -> DispatchResult:
    """Look up the precomputed path for a validated (from, to) pair.

    The index covers every entry of the path table; the first entry for a
    given case-insensitive pair wins.
    """
    data = reference if reference is not None else get_reference_data()
    entry = data.paths.get((normalize_location(from_location), normalize_location(to_location)))
    if entry is None:
        return DispatchResult(success=False)
    return DispatchResult(success=True, value=entry.path)
