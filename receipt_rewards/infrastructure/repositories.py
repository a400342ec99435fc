"""In-memory account store with per-user write serialisation"""

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator

from receipt_rewards.domain.account import RewardAccount


class AccountRepository:
    """
    Session-scoped home of RewardAccounts.

    Every mutation for a user runs inside session(user_id), which holds that
    user's lock, so each account has a single writer at a time.
    """

    def __init__(self, factory: Callable[[str], RewardAccount]):
        self._factory = factory
        self._accounts: Dict[str, RewardAccount] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            if user_id not in self._locks:
                self._locks[user_id] = threading.Lock()
            return self._locks[user_id]

    @contextmanager
    def session(self, user_id: str) -> Iterator[RewardAccount]:
        """Yield the user's account (created on first use) under its lock"""
        with self._lock_for(user_id):
            account = self._accounts.get(user_id)
            if account is None:
                account = self._factory(user_id)
                self._accounts[user_id] = account
            yield account

