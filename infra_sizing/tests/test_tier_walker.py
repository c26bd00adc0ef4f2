"""
Tests for tiered pricing walks.
"""

import pytest

from infra_sizing.domain.mendix_models import default_k8s_environment_tiers
from infra_sizing.domain.outsystems_models import (
    default_app_shield_tiers,
    default_o11_external_user_tiers,
    default_o11_internal_user_tiers,
)
from infra_sizing.domain.tier_models import PricedTier, assert_contiguous
from infra_sizing.services.tier_walker import (
    describe_walk,
    find_tier,
    walk_tiers,
    walk_tiers_detailed,
)


@pytest.fixture
def environment_tiers():
    """Three priced tiers with breakpoints at 50/100/150, free beyond."""
    return [
        PricedTier(1, 50, 29.0),
        PricedTier(51, 100, 19.0),
        PricedTier(101, 150, 9.0),
        PricedTier(151, None, 0.0),
    ]


def test_zero_when_total_not_above_included(environment_tiers):
    """Nothing is billed when the total is covered by included units."""
    assert walk_tiers(0, 0, environment_tiers) == 0
    assert walk_tiers(3, 3, environment_tiers) == 0
    assert walk_tiers(2, 3, environment_tiers) == 0


@pytest.mark.parametrize("total,expected", [
    (50, 50 * 29),
    (51, 50 * 29 + 19),
    (150, 50 * 29 + 50 * 19 + 50 * 9),
    (151, 50 * 29 + 50 * 19 + 50 * 9),
])
def test_tier_boundaries(environment_tiers, total, expected):
    """Units at each breakpoint land on the right tier."""
    assert walk_tiers(total, 0, environment_tiers) == pytest.approx(expected)


def test_free_tier_consumes_units(environment_tiers):
    """Units in a zero-priced tier are consumed without cost."""
    consumed = walk_tiers_detailed(200, 0, environment_tiers)
    free_tier, units, cost = consumed[-1]
    assert free_tier.price_per_pack == 0
    assert units == 50
    assert cost == 0


def test_monotonic_in_quantity(environment_tiers):
    """Cost never decreases as quantity grows."""
    costs = [walk_tiers(total, 3, environment_tiers) for total in range(0, 260)]
    assert all(later >= earlier for earlier, later in zip(costs, costs[1:]))


def test_monotonic_with_pack_sizes():
    """Pack rounding keeps the walk monotonic."""
    tiers = default_o11_internal_user_tiers()
    costs = [walk_tiers(total, 100, tiers) for total in range(0, 6000, 37)]
    assert all(later >= earlier for earlier, later in zip(costs, costs[1:]))


def test_packs_round_up_per_tier():
    """Partial packs are billed as whole packs."""
    tiers = default_o11_internal_user_tiers()
    # 101 users, 100 included: one billable user in the first tier
    assert walk_tiers(101, 100, tiers) == pytest.approx(4840)
    # 1,150 billable users: 1000 in tier one, 150 (2 packs) in tier two
    assert walk_tiers(1250, 100, tiers) == pytest.approx(10 * 4840 + 2 * 3630)


def test_absolute_positions_start_after_included():
    """Absolute ranges count the included units toward the first tier."""
    tiers = default_o11_internal_user_tiers()
    consumed = walk_tiers_detailed(1250, 100, tiers, absolute_positions=True)
    assert [units for _, units, _ in consumed] == [900, 250]
    assert walk_tiers(1250, 100, tiers, absolute_positions=True) == pytest.approx(
        9 * 4840 + 3 * 3630
    )


def test_absolute_positions_match_relative_without_included(environment_tiers):
    """With nothing included both position modes agree."""
    for total in (1, 50, 51, 151, 300):
        assert walk_tiers(total, 0, environment_tiers, absolute_positions=True) == pytest.approx(
            walk_tiers(total, 0, environment_tiers)
        )


def test_walk_stops_when_tiers_exhausted():
    """Units beyond a bounded final tier are not billed."""
    tiers = [PricedTier(1, 10, 5.0)]
    assert walk_tiers(25, 0, tiers) == pytest.approx(50)


def test_find_tier_flat_lookup():
    """Flat lookup picks the single tier containing the volume."""
    tiers = default_app_shield_tiers()
    assert find_tier(0, tiers).price_per_pack == 18150
    assert find_tier(10000, tiers).price_per_pack == 18150
    assert find_tier(10001, tiers).price_per_pack == 32670
    assert find_tier(2_000_000, tiers).price_per_pack == 181500


def test_find_tier_miss_returns_none():
    """Volumes outside every tier are not matched."""
    assert find_tier(5, [PricedTier(10, 20, 1.0)]) is None


def test_describe_walk():
    """Walk description lists included, priced and free units."""
    consumed = walk_tiers_detailed(170, 3, default_k8s_environment_tiers())
    assert describe_walk(3, consumed, "env") == (
        "3 included + 50 @ $552/env + 50 @ $408/env + 50 @ $240/env + 17 free"
    )


@pytest.mark.parametrize("tiers", [
    default_k8s_environment_tiers(),
    default_o11_internal_user_tiers(),
    default_o11_external_user_tiers(),
    default_app_shield_tiers(),
])
def test_shipped_schedules_are_contiguous(tiers):
    """Every built-in schedule is ordered and gap-free."""
    assert_contiguous(tiers)


def test_assert_contiguous_rejects_gap():
    """A gap between tiers is a programming error."""
    with pytest.raises(AssertionError):
        assert_contiguous([PricedTier(1, 10, 1.0), PricedTier(12, None, 1.0)])


def test_assert_contiguous_rejects_unbounded_middle_tier():
    """Only the last tier may be unbounded."""
    with pytest.raises(AssertionError):
        assert_contiguous([PricedTier(1, None, 1.0), PricedTier(2, None, 1.0)])
