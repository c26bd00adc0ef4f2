"""
Domain model for tiered (volume) pricing schedules.
"""
from typing import Dict, Any, List, Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class PricedTier:
    """
    One contiguous range [min_units, max_units] of a pricing schedule.

    max_units=None marks the terminal, unbounded tier. Units inside the
    range are billed in packs of pack_size at price_per_pack.
    """
    min_units: int
    max_units: Optional[int]
    price_per_pack: float
    pack_size: int = 1

    def contains(self, quantity: int) -> bool:
        if quantity < self.min_units:
            return False
        return self.max_units is None or quantity <= self.max_units

    @property
    def label(self) -> str:
        if self.max_units is None:
            return f"{self.min_units}+"
        return f"{self.min_units}-{self.max_units}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "min_units": self.min_units,
            "max_units": self.max_units,
            "price_per_pack": round(self.price_per_pack, 2),
            "pack_size": self.pack_size,
        }


def assert_contiguous(tiers: List[PricedTier]) -> None:
    """
    Assert a schedule is ordered, gap-free and non-overlapping.

    Only the last tier may be unbounded.

    Raises:
        AssertionError: If the schedule is malformed
    """
    for index, tier in enumerate(tiers):
        assert tier.pack_size > 0, f"tier {tier.label}: pack size must be positive"
        assert tier.max_units is None or tier.max_units >= tier.min_units, (
            f"tier {tier.label}: max below min"
        )
        if index == 0:
            continue
        previous = tiers[index - 1]
        assert previous.max_units is not None, f"tier {previous.label}: unbounded tier is not last"
        assert tier.min_units == previous.max_units + 1, (
            f"tiers {previous.label} and {tier.label} are not contiguous"
        )
