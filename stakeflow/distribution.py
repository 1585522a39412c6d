"""Reward distribution bookkeeping using scaled points per share."""

from __future__ import annotations

from dataclasses import dataclass

# Points worth of a single token, as a bit shift, for fixed-point precision.
SHARES_SHIFT = 32

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

_U128 = 1 << 128


@dataclass
class Distribution:
    """State of one reward asset's distribution."""

    # how many shares a single point is worth
    shares_per_point: int = 1
    # shares not fully handed out by earlier distributions
    shares_leftover: int = 0
    # total rewards distributed
    distributed_total: int = 0
    # total rewards not yet withdrawn
    withdrawable_total: int = 0
    max_bonus_bps: int = 0
    bonus_per_day_bps: int = 0


@dataclass
class WithdrawAdjustment:
    """Per-user correction of reward points and what the user already withdrew."""

    shares_correction: int = 0
    withdrawn_rewards: int = 0


def update_rewards(
    adjustment: WithdrawAdjustment,
    distribution: Distribution,
    old_rewards_power: int,
    new_rewards_power: int,
) -> WithdrawAdjustment:
    """Correct ``adjustment`` for a change of rewards power; returns it."""
    if old_rewards_power != new_rewards_power:
        diff = new_rewards_power - old_rewards_power
        adjustment.shares_correction -= distribution.shares_per_point * diff
    return adjustment


def withdrawable_rewards(
    total_stake: int, distribution: Distribution, adjustment: WithdrawAdjustment
) -> int:
    """Rewards a holder of ``total_stake`` may still withdraw."""
    points = distribution.shares_per_point * total_stake + adjustment.shares_correction
    amount = (points % _U128) >> SHARES_SHIFT
    if amount < adjustment.withdrawn_rewards:
        raise OverflowError("withdrawn rewards exceed earned rewards")
    return amount - adjustment.withdrawn_rewards