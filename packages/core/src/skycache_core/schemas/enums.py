"""Pydantic-compatible enums shared by the cache, worker and API layers."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import BeforeValidator


class CabinClass(StrEnum):
    """Cabin class for a fare or seat pool."""

    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"

    @classmethod
    def parse(cls, label: str | CabinClass) -> CabinClass:
        """Map an upstream cabin label onto a member.

        Accepts the enum value itself and the spellings used by the
        record API (``economy``, ``premium_economy``, ``Premium Economy``).
        Unknown labels raise ``ValueError`` rather than defaulting.
        """
        if isinstance(label, CabinClass):
            return label
        normalized = " ".join(label.replace("_", " ").replace("-", " ").split())
        member = _CABIN_ALIASES.get(normalized.lower())
        if member is None:
            msg = f"Unknown cabin class: {label!r}"
            raise ValueError(msg)
        return member

    @property
    def label(self) -> str:
        return _CABIN_LABELS[self]


_CABIN_ALIASES: dict[str, CabinClass] = {
    "economy": CabinClass.ECONOMY,
    "coach": CabinClass.ECONOMY,
    "premium economy": CabinClass.PREMIUM_ECONOMY,
    "business": CabinClass.BUSINESS,
    "first": CabinClass.FIRST,
}

_CABIN_LABELS: dict[CabinClass, str] = {
    CabinClass.ECONOMY: "Economy",
    CabinClass.PREMIUM_ECONOMY: "Premium Economy",
    CabinClass.BUSINESS: "Business",
    CabinClass.FIRST: "First",
}

if set(_CABIN_LABELS) != set(CabinClass) or set(_CABIN_ALIASES.values()) != set(
    CabinClass
):
    msg = "Cabin class lookup tables must cover every CabinClass member"
    raise RuntimeError(msg)


class FlightStatus(StrEnum):
    """Operational status reported by the record API."""

    SCHEDULED = "scheduled"
    ON_TIME = "on_time"
    DELAYED = "delayed"
    BOARDING = "boarding"
    DEPARTED = "departed"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"

    @classmethod
    def _missing_(cls, value: object) -> FlightStatus | None:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class SortField(StrEnum):
    """Fields the query worker can order results by."""

    PRICE = "price"
    DURATION = "duration"
    DEPARTURE_TIME = "departure_time"
    ARRIVAL_TIME = "arrival_time"


class SortOrder(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def _coerce_cabin(value: object) -> object:
    if isinstance(value, str):
        return CabinClass.parse(value)
    return value


# Cabin class accepting any upstream spelling on input.
CabinClassLabel = Annotated[CabinClass, BeforeValidator(_coerce_cabin)]
