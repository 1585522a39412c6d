"""Staking of LP share tokens with reward distribution flows."""

from __future__ import annotations

from stakeflow.distribution import (
    Distribution,
    WithdrawAdjustment,
    update_rewards,
    withdrawable_rewards,
)
from stakeflow.env import Address, Env, entrypoint
from stakeflow.errors import ContractError, StakingError
from stakeflow.storage import (
    Config,
    ConfigResponse,
    Stake,
    StakedResponse,
    StakingState,
    WithdrawableReward,
    WithdrawableRewardsResponse,
)
from stakeflow.token import Token


def _checked_sub(minuend: int, subtrahend: int) -> int:
    if subtrahend > minuend:
        raise OverflowError("attempt to subtract with overflow")
    return minuend - subtrahend


def remove_stake(stakes: list[Stake], stake: int, stake_timestamp: int) -> None:
    """Remove the first stake matching ``stake`` and ``stake_timestamp`` from ``stakes``."""
    index = next(
        (
            position
            for position, entry in enumerate(stakes)
            if entry.stake == stake and entry.stake_timestamp == stake_timestamp
        ),
        None,
    )
    if index is None:
        raise StakingError(ContractError.STAKE_NOT_FOUND, "Stake: Remove stake: Stake not found")
    del stakes[index]


class Staking:
    """LP share token staking contract registered in an :class:`Env`."""

    def __init__(self, env: Env) -> None:
        self.env = env
        self.state = StakingState()
        self.address = env.register(self)

    def _token(self, address: Address) -> Token:
        return self.env.contract(address)

    def _distribution(self, asset: Address) -> Distribution:
        try:
            return self.state.distribution_data[asset]
        except KeyError:
            raise LookupError(f"Stake: no distribution for {asset}") from None

    def _adjustment(self, user: Address, asset: Address) -> WithdrawAdjustment:
        return self.state.withdraw_adjustments.setdefault((user, asset), WithdrawAdjustment())

    def _pending_reward(self, user: Address, asset: Address) -> int:
        adjustment = self.state.withdraw_adjustments.get((user, asset), WithdrawAdjustment())
        total_stake = self.state.bonding_info(user).total_stake
        return withdrawable_rewards(total_stake, self._distribution(asset), adjustment)

    @entrypoint
    def initialize(
        self,
        admin: Address,
        lp_token: Address,
        min_bond: int,
        min_reward: int,
        manager: Address,
        owner: Address,
    ) -> None:
        """Configure the contract; allowed once."""
        if self.state.initialized:
            raise StakingError(
                ContractError.ALREADY_INITIALIZED,
                "Stake: Initialize: initializing contract twice is not allowed",
            )
        if min_bond <= 0:
            raise StakingError(
                ContractError.INVALID_MIN_BOND,
                "Stake: initialize: Minimum amount of lp share tokens to bond "
                "can not be smaller or equal to 0",
            )
        if min_reward <= 0:
            raise StakingError(
                ContractError.INVALID_MIN_REWARD,
                "Stake: initialize: min_reward must be bigger then 0!",
            )
        self.state.initialized = True
        self.env.publish(("initialize", "LP Share token staking contract"), lp_token)
        self.state.config = Config(lp_token, min_bond, min_reward, manager, owner)
        self.state.admin = admin
        self.state.total_staked = 0

    @entrypoint
    def bond(self, sender: Address, tokens: int) -> None:
        """Stake ``tokens`` LP shares of ``sender``."""
        self.env.require_auth(sender, "bond", (sender, tokens))
        config = self.state.config
        if tokens < config.min_bond:
            raise StakingError(
                ContractError.INVALID_BOND,
                "Stake: Bond: Trying to stake less than minimum required",
            )

        self._token(config.lp_token).transfer(sender, self.address, tokens)

        info = self.state.bonding_info(sender)
        info.total_stake += tokens

        total_staked = self.state.total_staked
        for asset in self.state.distributions:
            update_rewards(
                self._adjustment(sender, asset),
                self._distribution(asset),
                total_staked,
                total_staked + tokens,
            )

        info.stakes.append(Stake(tokens, self.env.timestamp))
        self.state.stakes[sender] = info
        self.state.total_staked += tokens

        self.env.publish(("bond", "user"), sender)
        self.env.publish(("bond", "token"), config.lp_token)
        self.env.publish(("bond", "amount"), tokens)

    @entrypoint
    def unbond(self, sender: Address, stake_amount: int, stake_timestamp: int) -> None:
        """Withdraw pending rewards, then return one stake to ``sender``."""
        self.env.require_auth(sender, "unbond", (sender, stake_amount, stake_timestamp))
        config = self.state.config

        if self.query_withdrawable_rewards(sender).rewards:
            self.withdraw_rewards(sender)

        info = self.state.bonding_info(sender)
        remove_stake(info.stakes, stake_amount, stake_timestamp)
        info.total_stake = _checked_sub(info.total_stake, stake_amount)

        self._token(config.lp_token).transfer(self.address, sender, stake_amount)

        self.state.stakes[sender] = info
        self.state.total_staked -= stake_amount

        self.env.publish(("unbond", "user"), sender)
        self.env.publish(("bond", "token"), config.lp_token)
        self.env.publish(("bond", "amount"), stake_amount)

    @entrypoint
    def create_distribution_flow(self, sender: Address, asset: Address) -> None:
        """Open a reward distribution for ``asset``; only the manager or owner may."""
        self.env.require_auth(sender, "create_distribution_flow", (sender, asset))
        config = self.state.config
        if sender not in (config.manager, config.owner):
            raise StakingError(
                ContractError.UNAUTHORIZED,
                "Stake: create distribution: Non-authorized creation!",
            )
        self.state.add_distribution(asset)
        self.state.distribution_data[asset] = Distribution()
        self.env.publish(("create_distribution_flow", "asset"), asset)

    @entrypoint
    def withdraw_rewards(self, sender: Address) -> None:
        """Pay out every reward ``sender`` has earned so far."""
        self.env.publish(("withdraw_rewards", "user"), sender)

        for asset in self.state.distributions:
            distribution = self._distribution(asset)
            reward_amount = self._pending_reward(sender, asset)
            if reward_amount == 0:
                continue

            remaining = _checked_sub(distribution.withdrawable_total, reward_amount)
            self._token(asset).transfer(self.address, sender, reward_amount)

            self._adjustment(sender, asset).withdrawn_rewards += reward_amount
            distribution.withdrawable_total = remaining

            self.env.publish(("withdraw_rewards", "reward_token"), asset)
            self.env.publish(("withdraw_rewards", "reward_amount"), reward_amount)

    @entrypoint
    def query_config(self) -> ConfigResponse:
        """The contract configuration."""
        return ConfigResponse(self.state.config)

    @entrypoint
    def query_admin(self) -> Address:
        """The contract administrator."""
        return self.state.admin

    @entrypoint
    def query_staked(self, address: Address) -> StakedResponse:
        """The stakes held by ``address``."""
        return StakedResponse(list(self.state.bonding_info(address).stakes))

    @entrypoint
    def query_total_staked(self) -> int:
        """Total LP shares staked by all users."""
        return self.state.total_staked

    @entrypoint
    def query_withdrawable_rewards(self, address: Address) -> WithdrawableRewardsResponse:
        """Rewards ``address`` may withdraw from each distribution."""
        return WithdrawableRewardsResponse(
            [
                WithdrawableReward(asset, self._pending_reward(address, asset))
                for asset in self.state.distributions
            ]
        )

    @entrypoint
    def query_distributed_rewards(self, asset: Address) -> int:
        """Total rewards of ``asset`` distributed so far."""
        return self._distribution(asset).distributed_total

    @entrypoint
    def query_undistributed_rewards(self, asset: Address) -> int:
        """Reward tokens held by the contract and not yet owed to stakers."""
        distribution = self._distribution(asset)
        balance = self._token(asset).balance(self.address)
        return _checked_sub(balance, distribution.withdrawable_total)