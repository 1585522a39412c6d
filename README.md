# stakeflow

stakeflow is an in-memory model of two ledger contracts that work together:

* a **fungible token** (`stakeflow.token.Token`). It has balances, allowances
  that expire at a ledger sequence, minting, burning and an administrator.
* a **staking pool** (`stakeflow.staking.Staking`). Holders bond LP-share
  tokens in it and build up a claim on rewards from one or more reward
  distributions.

Both contracts run against a shared `stakeflow.env.Env`. The `Env` does the
following:

* holds the ledger `timestamp` and `sequence`;
* issues addresses (`generate_address`);
* keeps a registry of contracts (`register`, `contract`);
* records authorizations (`require_auth`, `auths`);
* collects published events in `env.events` as `Event(topics, data)` records.

## Installation

```
pip install stakeflow
```

The package uses only the standard library.

## Tokens

```python
from stakeflow.env import Env
from stakeflow.token import Token

env = Env(timestamp=0, sequence=0)
env.mock_all_auths()

admin = env.generate_address()
alice = env.generate_address()
bob = env.generate_address()

token = Token(env)
token.initialize(admin, 7, "name", "symbol")

token.mint(alice, 1000)
token.approve(alice, bob, 500, 200)  # bob may spend 500 up to ledger sequence 200
token.transfer_from(bob, alice, bob, 300)

assert token.balance(alice) == 700
assert token.allowance(alice, bob) == 200
```

Other operations are `transfer`, `burn`, `burn_from`, `set_admin`,
`decimals`, `name` and `symbol`.

The token raises `TokenError` when:

* a balance or an allowance is overspent;
* an amount is negative;
* the token is initialized a second time;
* `decimal` is larger than 255;
* an allowance with a positive amount is given an expiration ledger below the
  current sequence.

An allowance whose expiration ledger is below `env.sequence` reads as 0.

`env.auths()` returns the authorizations recorded during the most recent
top-level call, as `(address, function_name, args)` tuples. If
`mock_all_auths()` has not been called, any operation that needs an
authorization raises `AuthError`.

## Staking

```python
from stakeflow.staking import Staking

lp = Token(env)
lp.initialize(admin, 7, "lp", "LP")
reward = Token(env)
reward.initialize(admin, 7, "reward", "RWD")

manager = env.generate_address()
owner = env.generate_address()

staking = Staking(env)
staking.initialize(admin, lp.address, 1, 10, manager, owner)
staking.create_distribution_flow(manager, reward.address)

lp.mint(alice, 1000)
staking.bond(alice, 1000)

assert staking.query_total_staked() == 1000
assert staking.query_staked(alice).stakes[0].stake == 1000
```

The staking operations work as follows:

* `bond(sender, tokens)` moves LP tokens from the sender into the pool. It
  records a `Stake(stake, stake_timestamp)` at the current ledger timestamp.
  It also corrects the sender's reward points in every distribution, so that
  rewards credited before the bond do not count towards the new stake.
* `unbond(sender, stake_amount, stake_timestamp)` first pays out any pending
  rewards. It then returns the one stake that matches both the amount and the
  timestamp.
* `create_distribution_flow(sender, asset)` opens a distribution for a reward
  token. Only the configured manager or owner may call it, and each asset may
  be added only once.
* `withdraw_rewards(sender)` transfers everything the sender has earned in
  each distribution.

The queries are:

* `query_config()`, `query_admin()` and `query_total_staked()`;
* `query_staked(address)`;
* `query_withdrawable_rewards(address)`, which returns one
  `WithdrawableReward` per distribution;
* `query_distributed_rewards(asset)` and `query_undistributed_rewards(asset)`.
  The second is the pool's balance of the asset minus the amount still owed to
  stakers.

Failures raise `stakeflow.errors.StakingError`. Its `code` is a
`ContractError` member, for example `INVALID_BOND`, `UNAUTHORIZED`,
`STAKE_NOT_FOUND` or `DISTRIBUTION_EXISTS`. The module-level function
`stakeflow.staking.remove_stake(stakes, stake, stake_timestamp)` also raises
`STAKE_NOT_FOUND` when no entry matches.

## Reward arithmetic

Rewards are tracked as fixed-point points, shifted left by `SHARES_SHIFT`
(32) bits.

Each distribution is a `Distribution` record. It holds:

* `shares_per_point`;
* `shares_leftover`;
* `distributed_total`;
* `withdrawable_total`.

Each staker has a `WithdrawAdjustment` for each distribution. It holds
`shares_correction` and `withdrawn_rewards`.

Two helpers in `stakeflow.distribution` expose the bookkeeping directly:

* `update_rewards(adjustment, distribution, old_power, new_power)` applies the
  correction for a change in staked power.
* `withdrawable_rewards(total_stake, distribution, adjustment)` returns
  `(shares_per_point * total_stake + correction) >> 32`, minus what has
  already been withdrawn.

## What the package does not do

The pool has no way to fund a reward schedule, release rewards over time, or
report annualized rewards. None of the contract operations ever changes
`shares_per_point`, `distributed_total` or `withdrawable_total`, apart from
`withdraw_rewards` lowering `withdrawable_total`. Withdrawable rewards
therefore stay at zero unless you update the `Distribution` records yourself.

Those records are stored in `staking.state.distribution_data`, keyed by asset
address. If you do update them, the pool also needs to hold enough of the
reward token to pay out.

All state lives in memory. Nothing is persisted, and there is no command-line
interface.