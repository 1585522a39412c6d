"""Error codes reported by the staking contract."""

from __future__ import annotations

from enum import IntEnum


class ContractError(IntEnum):
    """Numeric error codes of the staking contract."""

    ALREADY_INITIALIZED = 1
    INVALID_MIN_BOND = 2
    INVALID_MIN_REWARD = 3
    INVALID_BOND = 4
    UNAUTHORIZED = 5
    MIN_REWARD_NOT_ENOUGH = 6
    REWARDS_INVALID = 7
    STAKE_NOT_FOUND = 8
    INVALID_TIME = 9
    DISTRIBUTION_EXISTS = 10


class StakingError(Exception):
    """Raised when a staking operation fails; carries a :class:`ContractError` code."""

    def __init__(self, code: ContractError, message: str = "") -> None:
        self.code = ContractError(code)
        self.message = message or self.code.name
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"StakingError({self.code.name}, {self.message!r})"