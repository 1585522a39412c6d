import pytest

from stakeflow.env import Address, AuthError, Env, Event, entrypoint


class _Counter:
    def __init__(self, env, owner):
        self.env = env
        self.owner = owner
        self.address = env.register(self)
        self.hits = 0

    @entrypoint
    def hit(self):
        self.env.require_auth(self.owner, "hit", ())
        self.hits += 1
        return self.hits

    @entrypoint
    def hit_twice(self, other):
        self.env.require_auth(self.owner, "hit_twice", (other.address,))
        other.hit()
        return self.hits


def test_defaults_and_ledger_values():
    env = Env()
    assert (env.timestamp, env.sequence) == (0, 0)
    env2 = Env(timestamp=2_000, sequence=7)
    assert (env2.timestamp, env2.sequence) == (2_000, 7)


def test_generated_addresses_are_unique():
    env = Env()
    addresses = [env.generate_address() for _ in range(20)]
    assert len(set(addresses)) == 20


def test_address_str_round_trip():
    address = Address("alpha")
    assert str(address) == "alpha"
    assert Address(str(address)) == address


def test_register_and_lookup():
    env = Env()
    obj = object()
    address = env.register(obj)
    assert env.contract(address) is obj
    assert address not in {env.generate_address() for _ in range(5)}


def test_lookup_unknown_contract():
    env = Env()
    with pytest.raises(LookupError):
        env.contract(env.generate_address())


def test_require_auth_without_mock_fails():
    env = Env()
    with pytest.raises(AuthError):
        env.require_auth(env.generate_address(), "f", ())


def test_require_auth_records_when_mocked():
    env = Env()
    env.mock_all_auths()
    user = env.generate_address()
    env.require_auth(user, "f", [1, 2])
    assert env.auths() == [(user, "f", (1, 2))]


def test_top_level_direct_auth_replaces_previous():
    env = Env()
    env.mock_all_auths()
    a, b = env.generate_address(), env.generate_address()
    env.require_auth(a, "f", ())
    env.require_auth(b, "g", ())
    assert env.auths() == [(b, "g", ())]


def test_entrypoint_frames_nested_auths():
    env = Env()
    env.mock_all_auths()
    owner_a, owner_b = env.generate_address(), env.generate_address()
    first = _Counter(env, owner_a)
    second = _Counter(env, owner_b)
    first.hit_twice(second)
    assert env.auths() == [
        (owner_a, "hit_twice", (second.address,)),
        (owner_b, "hit", ()),
    ]
    assert second.hits == 1
    second.hit()
    assert env.auths() == [(owner_b, "hit", ())]


def test_entrypoint_returns_value():
    env = Env()
    env.mock_all_auths()
    counter = _Counter(env, env.generate_address())
    assert [counter.hit() for _ in range(3)] == [1, 2, 3]


def test_publish_records_events_in_order():
    env = Env()
    user = env.generate_address()
    env.publish(["bond", "user"], user)
    env.publish(("bond", "amount"), 5)
    assert env.events == [Event(("bond", "user"), user), Event(("bond", "amount"), 5)]