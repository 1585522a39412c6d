"""Fungible token with balances, allowances, minting and burning."""

from __future__ import annotations

from dataclasses import dataclass

from stakeflow.env import Address, Env, entrypoint


class TokenError(Exception):
    """Raised when a token operation is not allowed."""


@dataclass(frozen=True)
class AllowanceValue:
    """An allowance amount and the ledger sequence it expires after."""

    amount: int
    expiration_ledger: int


@dataclass(frozen=True)
class TokenMetadata:
    """Decimals, name and symbol of a token."""

    decimal: int
    name: str
    symbol: str


_U8_MAX = 255


def _check_nonnegative_amount(amount: int) -> None:
    if amount < 0:
        raise TokenError(f"negative amount is not allowed: {amount}")


class Token:
    """A token contract registered in an :class:`Env`."""

    def __init__(self, env: Env) -> None:
        self.env = env
        self._admin: Address | None = None
        self._metadata: TokenMetadata | None = None
        self._balances: dict[Address, int] = {}
        self._allowances: dict[tuple[Address, Address], AllowanceValue] = {}
        self.address = env.register(self)

    # internal state helpers

    def _read_admin(self) -> Address:
        if self._admin is None:
            raise TokenError("token is not initialized")
        return self._admin

    def _read_metadata(self) -> TokenMetadata:
        if self._metadata is None:
            raise TokenError("token is not initialized")
        return self._metadata

    def _read_allowance(self, from_: Address, spender: Address) -> AllowanceValue:
        allowance = self._allowances.get((from_, spender))
        if allowance is None:
            return AllowanceValue(0, 0)
        if allowance.expiration_ledger < self.env.sequence:
            return AllowanceValue(0, allowance.expiration_ledger)
        return allowance

    def _write_allowance(
        self, from_: Address, spender: Address, amount: int, expiration_ledger: int
    ) -> None:
        if amount > 0 and expiration_ledger < self.env.sequence:
            raise TokenError("expiration_ledger is less than ledger seq when amount > 0")
        self._allowances[(from_, spender)] = AllowanceValue(amount, expiration_ledger)

    def _checked_allowance(self, from_: Address, spender: Address, amount: int) -> AllowanceValue:
        allowance = self._read_allowance(from_, spender)
        if allowance.amount < amount:
            raise TokenError("insufficient allowance")
        return allowance

    def _check_balance(self, addr: Address, amount: int) -> None:
        if self._balances.get(addr, 0) < amount:
            raise TokenError("insufficient balance")

    def _move(self, from_: Address | None, to: Address | None, amount: int) -> None:
        if from_ is not None:
            self._balances[from_] = self._balances.get(from_, 0) - amount
        if to is not None:
            self._balances[to] = self._balances.get(to, 0) + amount

    # administrative interface

    @entrypoint
    def initialize(self, admin: Address, decimal: int, name: str, symbol: str) -> None:
        """Set the administrator and metadata; allowed once."""
        if self._admin is not None:
            raise TokenError("already initialized")
        if decimal > _U8_MAX:
            raise TokenError("Decimal must fit in a u8")
        self._admin = admin
        self._metadata = TokenMetadata(decimal, name, symbol)

    @entrypoint
    def mint(self, to: Address, amount: int) -> None:
        """Create ``amount`` new tokens for ``to``; requires the admin's auth."""
        _check_nonnegative_amount(amount)
        admin = self._read_admin()
        self.env.require_auth(admin, "mint", (to, amount))
        self._move(None, to, amount)
        self.env.publish(("mint", admin, to), amount)

    @entrypoint
    def set_admin(self, new_admin: Address) -> None:
        """Hand the admin role to ``new_admin``; requires the current admin's auth."""
        admin = self._read_admin()
        self.env.require_auth(admin, "set_admin", (new_admin,))
        self._admin = new_admin
        self.env.publish(("set_admin", admin), new_admin)

    # token interface

    @entrypoint
    def allowance(self, from_: Address, spender: Address) -> int:
        """Amount ``spender`` may still move on behalf of ``from_``."""
        return self._read_allowance(from_, spender).amount

    @entrypoint
    def approve(
        self, from_: Address, spender: Address, amount: int, expiration_ledger: int
    ) -> None:
        """Let ``spender`` move up to ``amount`` of ``from_``'s tokens."""
        self.env.require_auth(from_, "approve", (from_, spender, amount, expiration_ledger))
        _check_nonnegative_amount(amount)
        self._write_allowance(from_, spender, amount, expiration_ledger)
        self.env.publish(("approve", from_, spender), (amount, expiration_ledger))

    @entrypoint
    def balance(self, id_: Address) -> int:
        """Balance held by ``id_``."""
        return self._balances.get(id_, 0)

    @entrypoint
    def transfer(self, from_: Address, to: Address, amount: int) -> None:
        """Move ``amount`` from ``from_`` to ``to``."""
        self.env.require_auth(from_, "transfer", (from_, to, amount))
        _check_nonnegative_amount(amount)
        self._check_balance(from_, amount)
        self._move(from_, to, amount)
        self.env.publish(("transfer", from_, to), amount)

    @entrypoint
    def transfer_from(self, spender: Address, from_: Address, to: Address, amount: int) -> None:
        """Move ``amount`` from ``from_`` to ``to`` using ``spender``'s allowance."""
        self.env.require_auth(spender, "transfer_from", (spender, from_, to, amount))
        _check_nonnegative_amount(amount)
        allowance = self._checked_allowance(from_, spender, amount)
        self._check_balance(from_, amount)
        self._write_allowance(
            from_, spender, allowance.amount - amount, allowance.expiration_ledger
        )
        self._move(from_, to, amount)
        self.env.publish(("transfer", from_, to), amount)

    @entrypoint
    def burn(self, from_: Address, amount: int) -> None:
        """Destroy ``amount`` of ``from_``'s tokens."""
        self.env.require_auth(from_, "burn", (from_, amount))
        _check_nonnegative_amount(amount)
        self._check_balance(from_, amount)
        self._move(from_, None, amount)
        self.env.publish(("burn", from_), amount)

    @entrypoint
    def burn_from(self, spender: Address, from_: Address, amount: int) -> None:
        """Destroy ``amount`` of ``from_``'s tokens using ``spender``'s allowance."""
        self.env.require_auth(spender, "burn_from", (spender, from_, amount))
        _check_nonnegative_amount(amount)
        allowance = self._checked_allowance(from_, spender, amount)
        self._check_balance(from_, amount)
        self._write_allowance(
            from_, spender, allowance.amount - amount, allowance.expiration_ledger
        )
        self._move(from_, None, amount)
        self.env.publish(("burn", from_), amount)

    @entrypoint
    def decimals(self) -> int:
        """Number of decimals."""
        return self._read_metadata().decimal

    @entrypoint
    def name(self) -> str:
        """Token name."""
        return self._read_metadata().name

    @entrypoint
    def symbol(self) -> str:
        """Token symbol."""
        return self._read_metadata().symbol