"""Cache key builders for consistent namespacing."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skycache_core.schemas import SearchRequest

_SEARCH_KEY_VERSION = "v1"


def search_fingerprint(request: SearchRequest) -> str:
    """Canonical JSON encoding of the fields that identify a search."""
    payload = {
        "origin": request.origin.upper(),
        "destination": request.destination.upper(),
        "departure_date": request.departure_date.isoformat(),
        "return_date": request.return_date.isoformat() if request.return_date else None,
        "cabin_class": request.cabin_class.value,
        "passengers": {
            "adults": request.passengers.adults,
            "children": request.passengers.children,
            "infants": request.passengers.infants,
        },
    }
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def search_key(request: SearchRequest) -> str:
    """Build cache key for flight search results."""
    digest = hashlib.sha256(search_fingerprint(request).encode("utf-8")).hexdigest()
    return f"search:{_SEARCH_KEY_VERSION}:{digest}"
