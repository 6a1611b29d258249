"""
Cheapest-Supplier Selection
===========================

1. **Eligibility**  -- suppliers approved for the client's zone.  During
   the night window the pool is intersected with that date's active
   night-guard roster for the zone.  No roster means no candidates: night
   mode never falls back to the daytime pool.
2. **Costing**      -- every candidate with depot coordinates is quoted
   from depot to client.  Candidates without a depot are skipped.
3. **Ranking**      -- candidates are visited in supplier-id order and
   ranked by ``(client_cost, supplier_id)``, so equal costs resolve to
   the lowest id regardless of the order the store returned them in.

Complexity
----------
Let N = eligible suppliers.

* Eligibility:   O(N)         -- set intersection
* Costing:       O(N)         -- one quote per candidate, serial
* Ranking:       O(N log N)

Distances are straight-line; the cheapest candidate is the nearest one
only as long as the tariff is monotone in distance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .entities import Coordinates, Supplier
from .pricing import DeliveryCostEstimator, DeliveryQuote


@dataclass(frozen=True)
class CandidateQuote:
    supplier_id: str
    quote: DeliveryQuote


def eligible_supplier_ids(
    zone_supplier_ids: Iterable[str],
    night: bool,
    night_guard_ids: Iterable[str] = (),
) -> list[str]:
    """Intersect the zone pool with the night roster when *night* is set."""
    pool = set(zone_supplier_ids)
    if not pool:
        return []
    if night:
        pool &= set(night_guard_ids)
    return sorted(pool)


def rank_candidates(
    suppliers: Iterable[Supplier],
    client: Coordinates,
    estimator: DeliveryCostEstimator,
) -> list[CandidateQuote]:
    """Quote every supplier with a depot and order them cheapest first."""
    ranked: list[CandidateQuote] = []
    for supplier in sorted(suppliers, key=lambda s: s.id):
        if supplier.depot is None:
            continue
        ranked.append(
            CandidateQuote(supplier.id, estimator.quote(supplier.depot, client))
        )
    # Stable sort keeps id order among equal costs
    ranked.sort(key=lambda c: c.quote.client_cost)
    return ranked


def pick_cheapest(
    suppliers: Iterable[Supplier],
    client: Coordinates,
    estimator: DeliveryCostEstimator,
) -> Optional[CandidateQuote]:
    ranked = rank_candidates(suppliers, client, estimator)
    return ranked[0] if ranked else None
