#Purpose: Reference resolution adapter (the "who did they mean" layer).
#Turns whatever identifier an external actor kept into a canonical entity
#before the core sees it.
#Typical responsibilities:
#pullers: internal id, then phone (with/without "+", or any format that
#normalises to the same E.164 number), then exact display name
#riders: internal id
#locations: internal id, then block id
#already-resolved entity handles are refreshed from the repository
#Output: canonical entity or None (require_* raise NotFound).

from __future__ import annotations

import os
from typing import List, Optional, Union

import phonenumbers
from dotenv import load_dotenv

from pullers.models import Puller
from rides.models import Location, Rider
from rides.repository import RideRepository
from .exceptions import NotFound

load_dotenv()
PHONE_REGION = os.getenv("AERAS_PHONE_REGION", "BD")

PullerRef = Union[str, Puller]
RiderRef = Union[str, Rider]
LocationRef = Union[str, Location]


def normalise_phone(raw: str, region: Optional[str] = None) -> Optional[str]:
    """
    E.164 form of `raw`, or None if it is not a plausible phone number.
    """
    if not raw:
        return None
    try:
        parsed = phonenumbers.parse(raw, region or PHONE_REGION)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_possible_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def phone_candidates(identifier: str) -> List[str]:
    """The identifier as given, plus the same with a leading '+'."""
    if identifier.startswith("+"):
        return [identifier]
    return [identifier, f"+{identifier}"]


class ReferenceResolver:
    def __init__(self, repository: RideRepository, phone_region: Optional[str] = None):
        self.repository = repository
        self.phone_region = phone_region or PHONE_REGION

    # --- pullers ---

    def resolve_puller(self, ref: Optional[PullerRef]) -> Optional[Puller]:
        if ref is None:
            return None
        if isinstance(ref, Puller):
            return self.repository.get_puller(ref.id)

        identifier = str(ref).strip()
        if not identifier:
            return None

        by_id = self.repository.get_puller(identifier)
        if by_id:
            return by_id

        by_phone = self._puller_by_phone(identifier)
        if by_phone:
            return by_phone

        by_name = self.repository.find_pullers(lambda puller: puller.name == identifier)
        return by_name[0] if by_name else None

    def _puller_by_phone(self, identifier: str) -> Optional[Puller]:
        candidates = set(phone_candidates(identifier))
        exact = self.repository.find_pullers(lambda puller: puller.phone in candidates)
        if exact:
            return exact[0]

        wanted = normalise_phone(identifier, self.phone_region)
        if wanted is None:
            return None
        normalised = self.repository.find_pullers(
            lambda puller: normalise_phone(puller.phone, self.phone_region) == wanted
        )
        return normalised[0] if normalised else None

    def require_puller(self, ref: Optional[PullerRef]) -> Puller:
        puller = self.resolve_puller(ref)
        if puller is None:
            raise NotFound(f"Puller not found: {ref!r}")
        return puller

    # --- riders ---

    def resolve_rider(self, ref: Optional[RiderRef]) -> Optional[Rider]:
        if ref is None:
            return None
        if isinstance(ref, Rider):
            return self.repository.get_rider(ref.id)
        return self.repository.get_rider(str(ref).strip())

    def require_rider(self, ref: Optional[RiderRef]) -> Rider:
        rider = self.resolve_rider(ref)
        if rider is None:
            raise NotFound(f"Rider not found: {ref!r}")
        return rider

    # --- locations ---

    def resolve_location(self, ref: Optional[LocationRef]) -> Optional[Location]:
        if ref is None:
            return None
        if isinstance(ref, Location):
            return self.repository.get_location(ref.id)

        identifier = str(ref).strip()
        by_id = self.repository.get_location(identifier)
        if by_id:
            return by_id

        for location in self.repository.list_locations():
            if location.block_id == identifier:
                return location
        return None

    def require_location(self, ref: Optional[LocationRef]) -> Location:
        location = self.resolve_location(ref)
        if location is None:
            raise NotFound(f"Location not found: {ref!r}")
        return location
