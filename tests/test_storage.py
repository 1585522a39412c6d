import pytest

from stakeflow.env import Env
from stakeflow.errors import ContractError, StakingError
from stakeflow.storage import BondingInfo, Config, Stake, StakingState


@pytest.fixture
def env():
    return Env()


def test_bonding_info_defaults_to_empty(env):
    state = StakingState()
    info = state.bonding_info(env.generate_address())
    assert info == BondingInfo(stakes=[], reward_debt=0, last_reward_time=0, total_stake=0)


def test_bonding_info_round_trip(env):
    state = StakingState()
    user = env.generate_address()
    info = state.bonding_info(user)
    info.stakes.append(Stake(stake=100, stake_timestamp=1))
    info.total_stake += 100
    state.stakes[user] = info
    loaded = state.bonding_info(user)
    assert loaded.stakes == [Stake(100, 1)]
    assert loaded.total_stake == 100


def test_bonding_info_is_a_working_copy(env):
    state = StakingState()
    user = env.generate_address()
    state.stakes[user] = BondingInfo(stakes=[Stake(200, 2)], total_stake=200)
    copy = state.bonding_info(user)
    copy.stakes.clear()
    copy.total_stake = 0
    assert state.bonding_info(user).stakes == [Stake(200, 2)]
    assert state.bonding_info(user).total_stake == 200


def test_add_distribution_keeps_order(env):
    state = StakingState()
    first, second = env.generate_address(), env.generate_address()
    state.add_distribution(first)
    state.add_distribution(second)
    assert state.distributions == [first, second]


def test_add_distribution_twice_fails(env):
    state = StakingState()
    asset = env.generate_address()
    state.add_distribution(asset)
    with pytest.raises(StakingError, match="Distribution already added") as info:
        state.add_distribution(asset)
    assert info.value.code is ContractError.DISTRIBUTION_EXISTS
    assert state.distributions == [asset]


def test_config_not_set():
    with pytest.raises(LookupError, match="Stake: Config not set"):
        StakingState().config


def test_config_round_trip(env):
    state = StakingState()
    config = Config(
        lp_token=env.generate_address(),
        min_bond=10,
        min_reward=5,
        manager=env.generate_address(),
        owner=env.generate_address(),
    )
    state.config = config
    assert state.config == config


def test_admin_round_trip(env):
    state = StakingState()
    with pytest.raises(LookupError):
        state.admin
    admin = env.generate_address()
    state.admin = admin
    assert state.admin == admin


def test_fresh_state_is_not_initialized():
    state = StakingState()
    assert state.initialized is False
    assert state.total_staked == 0
    assert state.distributions == []