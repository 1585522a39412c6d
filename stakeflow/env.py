"""Execution environment shared by contracts: ledger clock, addresses, auth and events."""

from __future__ import annotations

import functools
import itertools
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

_F = TypeVar("_F", bound=Callable[..., Any])


@dataclass(frozen=True, order=True)
class Address:
    """An account or contract identifier."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Event:
    """A published contract event."""

    topics: tuple
    data: Any


class AuthError(PermissionError):
    """Raised when an address has not authorized an invocation."""


class Env:
    """Ledger state, contract registry, authorization log and event log."""

    def __init__(self, timestamp: int = 0, sequence: int = 0) -> None:
        self.timestamp = timestamp
        self.sequence = sequence
        self.events: list[Event] = []
        self._contracts: dict[Address, Any] = {}
        self._ids = itertools.count(1)
        self._mock_auths = False
        self._auths: list[tuple[Address, str, tuple]] = []
        self._depth = 0

    def generate_address(self) -> Address:
        """Create a fresh, unique account address."""
        return Address(f"account-{next(self._ids)}")

    def register(self, contract: Any) -> Address:
        """Register a contract object and return its new address."""
        address = Address(f"contract-{next(self._ids)}")
        self._contracts[address] = contract
        return address

    def contract(self, address: Address) -> Any:
        """Return the contract registered at ``address``."""
        try:
            return self._contracts[address]
        except KeyError:
            raise LookupError(f"no contract registered at {address}") from None

    def mock_all_auths(self) -> None:
        """Treat every authorization request as granted."""
        self._mock_auths = True

    def require_auth(self, address: Address, function: str, args: tuple) -> None:
        """Check that ``address`` authorized ``function`` with ``args`` and record it."""
        if not self._mock_auths:
            raise AuthError(f"{address} has not authorized {function}")
        if self._depth == 0:
            self._auths = []
        self._auths.append((address, function, tuple(args)))

    def auths(self) -> list[tuple[Address, str, tuple]]:
        """Authorizations recorded during the most recent top-level invocation."""
        return list(self._auths)

    def publish(self, topics: tuple, data: Any) -> None:
        """Append an event to the event log."""
        self.events.append(Event(tuple(topics), data))

    @contextmanager
    def _invocation(self) -> Iterator[None]:
        if self._depth == 0:
            self._auths = []
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1


def entrypoint(method: _F) -> _F:
    """Mark a contract method as an invocation; its object must carry ``env``."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self.env._invocation():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]