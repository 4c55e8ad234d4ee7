"""
Staking Pool Model for the reward ledger.

This module simulates the staking contract: users deposit a single token into
numbered pools, each promising a fixed APR paid in the same token out of an
operator-funded reserve. Every deposit, withdrawal and harvest first settles
the caller's position against the pool's accrual index, then applies the
requested change.

Reward earned before a position's lock boundary is locked up rather than paid;
the first settlement after the boundary pays it together with new reward.
Withdrawing before the boundary costs an early-withdrawal fee that goes to the
marketing address.
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from numbers import Integral

from pool_accumulator import PoolInfo, projected_acc_index, refresh_pool
from staking_config import (
    DEFAULT_SETTINGS,
    FEE_BASE,
    REWARD_SCALE,
    SECONDS_PER_DAY,
    is_zero_address,
)
from staking_errors import (
    InsufficientDepositAmount,
    InvalidAmount,
    InvalidEarlyWithdrawFee,
    InvalidPoolApr,
    InvalidPoolId,
    InvalidSettings,
    InvalidTransfer,
    InvalidTransferFrom,
    InvalidWithdrawLockPeriod,
    LedgerInvariantError,
    Unauthorized,
)
from user_ledger import UserInfo, accrued, close_position, pending_reward, sync_reward_debt

logger = logging.getLogger(__name__)


class LockState(Enum):
    """Whether a position has cleared its lock boundary at a given instant."""
    LOCKED = 0    # Reward is deferred and withdrawal pays the early fee
    UNLOCKED = 1  # Reward is paid out and withdrawal is fee-free


@dataclass
class Settlement:
    """Outcome of settling one position."""
    state: LockState
    pending: int = 0    # Reward accrued since the previous settlement
    paid: int = 0       # Reward sent to the user by this settlement
    locked_up: int = 0  # Reward still deferred after this settlement


class StakingPool:
    """
    Simulates the staking contract holding deposits and the reward reserve.
    """

    def __init__(self, token, clock, owner, marketing_address=None, settings=DEFAULT_SETTINGS):
        # External collaborators
        self.token = token
        self.clock = clock
        self.settings = settings
        self.address = settings.ledger_address

        # Access control
        self.owner = owner

        # Pool table, indexed by pool id
        self.pools = []

        # Positions keyed by (pool id, user)
        self.users = {}

        # Reward token held for future payouts
        self.reward_reserve = 0

        # Reward paid out to depositors over the ledger's lifetime
        self.rewards_distributed = 0

        # Fee configuration
        self.early_withdraw_fee = settings.early_withdraw_fee
        self.marketing_address = marketing_address if marketing_address is not None else owner

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def total_pools(self):
        return len(self.pools)

    @property
    def reward_tokens(self):
        """Returns the reward reserve."""
        return self.reward_reserve

    @property
    def total_staked(self):
        """Returns the principal held across all pools."""
        return sum(pool.total_deposit for pool in self.pools)

    def get_pool(self, pid):
        """Returns a copy of the pool record."""
        self._check_pool_id(pid)
        return copy.copy(self.pools[pid])

    def get_user_info(self, pid, user):
        """Returns a copy of a user's position, empty if they never deposited."""
        self._check_pool_id(pid)
        return copy.copy(self.users.get((pid, user), UserInfo()))

    def pending_reward(self, pid, user):
        """
        Calculates the reward a user would settle right now, excluding locked-up reward.

        Args:
            pid: Pool id
            user: Address of the depositor

        Returns:
            Pending reward in token units
        """
        self._check_pool_id(pid)
        position = self.users.get((pid, user))
        if position is None:
            return 0
        acc_index = projected_acc_index(self.pools[pid], self.clock.now())
        return pending_reward(acc_index, position)

    def claimable_reward(self, pid, user):
        """Pending reward plus anything already locked up."""
        position = self.users.get((pid, user), UserInfo())
        return self.pending_reward(pid, user) + position.reward_locked_up

    def can_harvest(self, pid, user):
        """True when the user's position is past its lock boundary."""
        self._check_pool_id(pid)
        position = self.users.get((pid, user), UserInfo())
        return self._lock_state(self.pools[pid], position, self.clock.now()) is LockState.UNLOCKED

    def time_to_empty(self):
        """
        Approximates how many seconds the reserve lasts at current deposits.

        Locked-up and unsettled reward is ignored, so the real figure is lower.

        Returns:
            Seconds until the reserve is exhausted, or 0 if nothing accrues
        """
        weighted_deposits = sum(pool.apr * pool.total_deposit for pool in self.pools)
        if self.reward_reserve == 0 or weighted_deposits == 0:
            return 0
        return self.reward_reserve * REWARD_SCALE // weighted_deposits

    def check_invariants(self):
        """
        Verifies ledger-wide accounting.

        Raises:
            LedgerInvariantError: If any invariant is broken
        """
        now = self.clock.now()
        if self.reward_reserve < 0:
            raise LedgerInvariantError(f"Reward reserve is negative: {self.reward_reserve}")

        deposits_by_pool = [0] * len(self.pools)
        for (pid, user), position in self.users.items():
            pool = self.pools[pid]
            deposits_by_pool[pid] += position.amount
            if position.reward_debt > accrued(pool.acc_index, position.amount):
                raise LedgerInvariantError(f"Reward debt of {user} in pool {pid} exceeds accrued reward")

        for pid, pool in enumerate(self.pools):
            if pool.total_deposit != deposits_by_pool[pid]:
                raise LedgerInvariantError(
                    f"Pool {pid} total deposit {pool.total_deposit} != sum of positions {deposits_by_pool[pid]}"
                )
            if pool.last_update > now:
                raise LedgerInvariantError(f"Pool {pid} updated in the future")
        return True

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    def deposit(self, sender, pid, amount):
        """
        Stakes tokens into a pool.

        Pending reward is settled first. The lock boundary restarts from now for
        the whole position, including any earlier stake.

        Args:
            sender: Address of the depositor
            pid: Pool id
            amount: Amount of tokens to stake

        Returns:
            True if successful
        """
        self._check_pool_id(pid)
        if not self.pools[pid].is_active:
            raise InvalidPoolId(f"Pool {pid} is disabled")
        if not isinstance(amount, Integral) or amount <= 0:
            raise InsufficientDepositAmount("Deposit amount must be greater than zero")

        now = self.clock.now()
        with self._atomic():
            pool = self.pools[pid]
            position = self._position(pid, sender)

            self._settle(pool, position, sender, now)

            position.amount += amount
            pool.total_deposit += amount
            position.last_deposit = now
            position.last_interaction = now

            if not self.token.transfer_from(self.address, sender, self.address, amount):
                raise InvalidTransferFrom(f"Could not pull {amount} from {sender}")

            sync_reward_debt(position, pool.acc_index)
            self._store_position(pid, sender, position)

        logger.info("Deposit: %s staked %s in pool %s", sender, amount, pid)
        return True

    def withdraw(self, sender, pid):
        """
        Withdraws a user's entire stake from a pool.

        Before the lock boundary the early-withdrawal fee is deducted and sent to
        the marketing address, and any locked-up reward is forfeited.

        Args:
            sender: Address of the depositor
            pid: Pool id

        Returns:
            The principal sent back to the depositor
        """
        self._check_pool_id(pid)

        now = self.clock.now()
        with self._atomic():
            pool = self.pools[pid]
            position = self._position(pid, sender)

            settlement = self._settle(pool, position, sender, now)

            if settlement.locked_up > 0:
                logger.warning("Withdraw: %s forfeits %s locked-up reward in pool %s",
                               sender, settlement.locked_up, pid)

            amount = close_position(position)
            pool.total_deposit -= amount

            penalty = 0
            if settlement.state is LockState.LOCKED:
                penalty = amount * self.early_withdraw_fee // FEE_BASE

            sent = self._safe_transfer(sender, amount - penalty)
            if penalty > 0:
                self._safe_transfer(self.marketing_address, penalty)

            self._store_position(pid, sender, position)

        logger.info("Withdraw: %s withdrew %s from pool %s (penalty %s)", sender, amount, pid, penalty)
        return sent

    def harvest(self, sender, pid):
        """
        Settles a position without changing its stake.

        Args:
            sender: Address of the depositor
            pid: Pool id

        Returns:
            The reward paid, 0 while the position is locked
        """
        self._check_pool_id(pid)

        now = self.clock.now()
        with self._atomic():
            pool = self.pools[pid]
            position = self._position(pid, sender)
            settlement = self._settle(pool, position, sender, now)
            sync_reward_debt(position, pool.acc_index)
            self._store_position(pid, sender, position)

        logger.info("Harvest: %s in pool %s paid %s, locked %s",
                    sender, pid, settlement.paid, settlement.locked_up)
        return settlement.paid

    # ------------------------------------------------------------------
    # Reserve administration
    # ------------------------------------------------------------------

    def add_reward_tokens(self, sender, amount):
        """
        Funds the reward reserve.

        Args:
            sender: Address supplying the tokens
            amount: Amount of tokens to add

        Returns:
            The new reserve
        """
        if not isinstance(amount, Integral) or amount <= 0:
            raise InvalidAmount("Reward amount must be greater than zero")

        with self._atomic():
            self.reward_reserve += amount
            if not self.token.transfer_from(self.address, sender, self.address, amount):
                raise InvalidTransferFrom(f"Could not pull {amount} reward tokens from {sender}")

        logger.info("Reserve funded with %s by %s, reserve now %s", amount, sender, self.reward_reserve)
        return self.reward_reserve

    def recover_treasure(self, sender, to):
        """
        Sends the entire reward reserve to `to` and zeroes it.

        Returns:
            The amount recovered
        """
        self._only_owner(sender)
        if is_zero_address(to) or self.reward_reserve == 0:
            raise InvalidSettings("Nothing to recover or invalid destination")

        with self._atomic():
            amount = self.reward_reserve
            self.reward_reserve = 0
            self._safe_transfer(to, amount)

        logger.info("Reserve of %s recovered to %s", amount, to)
        return amount

    # ------------------------------------------------------------------
    # Pool and fee administration
    # ------------------------------------------------------------------

    def add_pool(self, sender, apr, lock_days):
        """
        Creates a new pool.

        Args:
            sender: Caller, must be the owner
            apr: Annual rate in basis points
            lock_days: Days a deposit must age before withdrawal is fee-free

        Returns:
            The new pool id
        """
        self._only_owner(sender)
        if apr <= 0:
            raise InvalidPoolApr("Pool APR must be greater than zero")
        self._check_lock_days(lock_days)

        pid = len(self.pools)
        self.pools.append(PoolInfo(
            apr=apr,
            lock_period=lock_days * SECONDS_PER_DAY,
            acc_index=0,
            last_update=self.clock.now(),
        ))

        logger.info("Pool %s added: apr %s bps, lock %s days", pid, apr, lock_days)
        return pid

    def edit_pool(self, sender, pid, apr, lock_days):
        """
        Changes a pool's APR and lock period.

        Accrual up to now is booked at the old APR before the change. An APR of
        zero stops new deposits; existing positions can still harvest and
        withdraw.
        """
        self._only_owner(sender)
        self._check_pool_id(pid)
        if apr < 0:
            raise InvalidPoolApr("Pool APR cannot be negative")
        self._check_lock_days(lock_days)

        pool = self.pools[pid]
        refresh_pool(pool, self.clock.now())
        pool.apr = apr
        pool.lock_period = lock_days * SECONDS_PER_DAY

        logger.info("Pool %s edited: apr %s bps, lock %s days", pid, apr, lock_days)

    def set_early_withdraw_fee(self, sender, fee):
        """Sets the early-withdrawal fee in basis points."""
        self._only_owner(sender)
        if fee < 0 or fee > self.settings.max_early_withdraw_fee:
            raise InvalidEarlyWithdrawFee(
                f"Fee must be between 0 and {self.settings.max_early_withdraw_fee} bps"
            )
        self.early_withdraw_fee = fee
        logger.info("Early withdraw fee set to %s bps", fee)

    def set_marketing_address(self, sender, address):
        """Sets where early-withdrawal fees are sent."""
        self._only_owner(sender)
        if is_zero_address(address):
            raise InvalidSettings("Marketing address cannot be the zero address")
        self.marketing_address = address
        logger.info("Marketing address set to %s", address)

    # ------------------------------------------------------------------
    # Settlement internals
    # ------------------------------------------------------------------

    @staticmethod
    def _lock_state(pool, position, now):
        if position.last_deposit + pool.lock_period < now:
            return LockState.UNLOCKED
        return LockState.LOCKED

    def _settle(self, pool, position, holder, now):
        """
        Refreshes the pool and pays or locks the position's pending reward.

        The caller must re-sync the reward debt after changing the stake.

        When the reserve cannot cover an unlocked position's reward, the
        unpaid part is carried in reward_locked_up as debt owed by the reserve.
        It is not held back by the time lock and is paid on the next
        settlement once the reserve is refilled.

        Returns:
            A Settlement describing what happened
        """
        acc_index = refresh_pool(pool, now)
        pending = pending_reward(acc_index, position)
        state = self._lock_state(pool, position, now)

        paid = 0
        if state is LockState.UNLOCKED:
            owed = pending + position.reward_locked_up
            if owed > 0:
                paid = self._pay_reward(holder, owed)
                position.reward_locked_up = owed - paid
        elif pending > 0:
            position.reward_locked_up += pending

        position.last_interaction = now

        logger.debug("Settled %s: state %s, pending %s, paid %s, locked %s",
                     holder, state.name, pending, paid, position.reward_locked_up)
        return Settlement(state=state, pending=pending, paid=paid, locked_up=position.reward_locked_up)

    def _pay_reward(self, to, owed):
        """Pays reward out of the reserve, capped at what the reserve holds."""
        paid = min(owed, self.reward_reserve)
        if paid < owed:
            logger.warning("Reward reserve short: %s owed to %s, %s available", owed, to, paid)
        if paid == 0:
            return 0

        sent = self._safe_transfer(to, paid)
        self.reward_reserve -= sent
        self.rewards_distributed += sent
        return sent

    def _safe_transfer(self, to, amount):
        """
        Sends tokens out of the ledger, never more than it holds.

        Returns:
            The amount actually sent
        """
        balance = self.token.balance_of(self.address)
        if amount > balance:
            logger.warning("Transfer of %s to %s capped at ledger balance %s", amount, to, balance)
            amount = balance
        if amount == 0:
            return 0

        if not self.token.transfer(self.address, to, amount):
            raise InvalidTransfer(f"Could not send {amount} to {to}")
        return amount

    def _position(self, pid, user):
        """Returns the stored position, or a fresh empty one that is not yet stored."""
        position = self.users.get((pid, user))
        return position if position is not None else UserInfo()

    def _store_position(self, pid, user, position):
        """Keeps non-empty positions only."""
        if position.amount > 0 or position.reward_locked_up > 0:
            self.users[(pid, user)] = position
        else:
            self.users.pop((pid, user), None)

    @contextmanager
    def _atomic(self):
        """Restores ledger and token state if the enclosed block raises."""
        saved = (
            copy.deepcopy(self.pools),
            copy.deepcopy(self.users),
            self.reward_reserve,
            self.rewards_distributed,
            self.token.snapshot(),
        )
        try:
            yield
        except Exception:
            (self.pools, self.users, self.reward_reserve,
             self.rewards_distributed, token_state) = saved
            self.token.restore(token_state)
            raise

    def _check_pool_id(self, pid):
        if not isinstance(pid, Integral) or pid < 0 or pid >= len(self.pools):
            raise InvalidPoolId(f"Unknown pool id {pid}")

    def _check_lock_days(self, lock_days):
        if lock_days < 0 or lock_days > self.settings.max_lock_days:
            raise InvalidWithdrawLockPeriod(
                f"Lock period must be between 0 and {self.settings.max_lock_days} days"
            )

    def _only_owner(self, sender):
        if sender != self.owner:
            raise Unauthorized(f"{sender} is not the owner")
