"""
Tiered (volume) pricing.

walk_tiers() consumes a billable quantity across an ordered, contiguous
schedule, charging ceil(units / pack_size) packs per tier. find_tier() is
the flat variant that picks the single tier containing a volume.
"""
import math
from typing import List, Optional, Tuple

from infra_sizing.domain.tier_models import PricedTier


def walk_tiers_detailed(
    total: int,
    included: int,
    tiers: List[PricedTier],
    absolute_positions: bool = False
) -> List[Tuple[PricedTier, int, float]]:
    """
    Walk a schedule and report what each tier consumed.

    By default tier ranges count billable units only, so the first unit
    beyond the included ones sits at position 1. With absolute_positions
    the ranges count every unit and the walk starts at included + 1.

    Args:
        total: Total quantity
        included: Quantity already covered for free
        tiers: Contiguous schedule ordered by min_units
        absolute_positions: Whether tier ranges include the free units

    Returns:
        (tier, units, cost) for every tier that consumed units
    """
    remaining = max(0, total - included)
    position = included + 1 if absolute_positions else 1
    consumed: List[Tuple[PricedTier, int, float]] = []

    for tier in sorted(tiers, key=lambda t: t.min_units):
        if remaining <= 0:
            break

        last = position + remaining - 1
        overlap_start = max(position, tier.min_units)
        overlap_end = last if tier.max_units is None else min(last, tier.max_units)
        if overlap_end < overlap_start:
            continue

        units = overlap_end - overlap_start + 1
        packs = math.ceil(units / tier.pack_size)
        consumed.append((tier, units, packs * tier.price_per_pack))
        remaining -= units
        position = overlap_end + 1

    return consumed


def walk_tiers(
    total: int,
    included: int,
    tiers: List[PricedTier],
    absolute_positions: bool = False
) -> float:
    """
    Total price of the billable units (total - included) across a schedule.

    Returns 0.0 when total <= included. Free tiers consume units without
    adding cost.
    """
    return sum(
        cost for _, _, cost in walk_tiers_detailed(total, included, tiers, absolute_positions)
    )


def find_tier(volume: int, tiers: List[PricedTier]) -> Optional[PricedTier]:
    """Tier whose range contains the volume, or None."""
    for tier in tiers:
        if tier.contains(volume):
            return tier
    return None


def describe_walk(
    included: int,
    consumed: List[Tuple[PricedTier, int, float]],
    unit: str
) -> str:
    """Human-readable walk, e.g. "3 included + 50 @ $552/env"."""
    parts = [f"{included} included"] if included > 0 else []
    for tier, units, _ in consumed:
        per_unit = tier.price_per_pack / tier.pack_size
        if per_unit == 0:
            parts.append(f"{units} free")
        else:
            parts.append(f"{units} @ ${per_unit:,.0f}/{unit}")
    return " + ".join(parts)
