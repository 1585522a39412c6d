"""Persistent state and response records of the staking contract."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from stakeflow.env import Address
from stakeflow.errors import ContractError, StakingError


@dataclass
class Config:
    """Staking configuration."""

    lp_token: Address
    min_bond: int
    min_reward: int
    # address allowed to create distribution flows
    manager: Address
    # factory that set up the pool and this staking contract
    owner: Address


@dataclass(frozen=True)
class Stake:
    """One bonded amount and when it was bonded."""

    stake: int
    stake_timestamp: int


@dataclass
class BondingInfo:
    """All stakes of one user, oldest first, and their total."""

    stakes: list[Stake] = field(default_factory=list)
    reward_debt: int = 0
    last_reward_time: int = 0
    total_stake: int = 0


@dataclass(frozen=True)
class ConfigResponse:
    """Answer to a configuration query."""

    config: Config


@dataclass(frozen=True)
class StakedResponse:
    """Answer to a query of a user's stakes."""

    stakes: list[Stake]


@dataclass(frozen=True)
class WithdrawableReward:
    """Reward amount a user may withdraw from one distribution."""

    reward_address: Address
    reward_amount: int


@dataclass(frozen=True)
class WithdrawableRewardsResponse:
    """Withdrawable rewards of a user across all distributions."""

    rewards: list[WithdrawableReward]


class StakingState:
    """Everything the staking contract keeps between invocations."""

    def __init__(self) -> None:
        self.initialized = False
        self._config: Config | None = None
        self._admin: Address | None = None
        self.total_staked = 0
        self.distributions: list[Address] = []
        self.stakes: dict[Address, BondingInfo] = {}
        self.distribution_data: dict[Address, Any] = {}
        self.withdraw_adjustments: dict[tuple[Address, Address], Any] = {}

    @property
    def config(self) -> Config:
        """The saved configuration."""
        if self._config is None:
            raise LookupError("Stake: Config not set")
        return self._config

    @config.setter
    def config(self, value: Config) -> None:
        self._config = value

    @property
    def admin(self) -> Address:
        """The saved administrator."""
        if self._admin is None:
            raise LookupError("Stake: Admin not set")
        return self._admin

    @admin.setter
    def admin(self, value: Address) -> None:
        self._admin = value

    def bonding_info(self, address: Address) -> BondingInfo:
        """A working copy of ``address``'s bonding info; empty if it never bonded.

        Changes take effect only once stored back into :attr:`stakes`.
        """
        info = self.stakes.get(address)
        if info is None:
            return BondingInfo()
        return copy.deepcopy(info)

    def add_distribution(self, asset: Address) -> None:
        """Register a reward asset; each asset may be added only once."""
        if asset in self.distributions:
            raise StakingError(
                ContractError.DISTRIBUTION_EXISTS,
                "Stake: Add distribution: Distribution already added",
            )
        self.distributions.append(asset)