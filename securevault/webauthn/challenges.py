"""
Challenge Registry — Short-lived, one-time WebAuthn challenges.

One live challenge per owner: issuing again replaces the previous one
(last write wins, no per-owner locking). A challenge disappears when it
is consumed or when its TTL runs out, whichever comes first.

Expiry is enforced twice: a loop timer evicts the record after the TTL,
and ``consume`` checks the deadline itself in case no timer fired.

Security Note:
    Never log challenge values. Records live in process memory only and
    do not survive a restart.
"""
import time
import base64
import asyncio
import logging
import secrets
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, Union

from datamodel import BaseModel

from ..conf import CHALLENGE_SIZE, CHALLENGE_TTL
from ..exceptions import ChallengeExpired, ChallengeNotFound

logger = logging.getLogger("securevault.webauthn")


class ChallengePurpose(str, Enum):
    REGISTRATION = "registration"
    ASSERTION = "assertion"


class ChallengeRecord(BaseModel):
    """A challenge waiting to be consumed."""
    owner_id: str
    challenge: str
    purpose: str
    issued_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def generate_challenge(size: int = CHALLENGE_SIZE) -> str:
    """Return ``size`` random bytes, base64-encoded."""
    return base64.b64encode(secrets.token_bytes(size)).decode("ascii")


class ChallengeStore(ABC):
    """Interface of a challenge registry.

    The in-memory implementation below is process-local; a shared cache
    can implement the same three operations.
    """

    @abstractmethod
    async def issue(
        self, owner_id: str, purpose: Union[ChallengePurpose, str]
    ) -> str:
        """Create a challenge for ``owner_id``, replacing any live one."""

    @abstractmethod
    async def consume(
        self, owner_id: str, purpose: Union[ChallengePurpose, str]
    ) -> str:
        """Remove and return the owner's challenge.

        Raises:
            ChallengeNotFound: No challenge, or issued for another purpose.
            ChallengeExpired: The challenge outlived its TTL.
        """

    @abstractmethod
    async def expire(self, owner_id: str) -> None:
        """Drop the owner's challenge. No-op if there is none."""


class InMemoryChallengeRegistry(ChallengeStore):
    """Process-wide challenge registry keyed by owner id."""

    def __init__(
        self,
        ttl: int = CHALLENGE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self._ttl = ttl
        self._clock = clock
        self._records: dict[str, ChallengeRecord] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def ttl(self) -> int:
        return self._ttl

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, owner_id: object) -> bool:
        return owner_id in self._records

    def peek(self, owner_id: str) -> Optional[ChallengeRecord]:
        """Return the owner's live record without consuming it."""
        return self._records.get(owner_id)

    def _drop(self, owner_id: str) -> Optional[ChallengeRecord]:
        timer = self._timers.pop(owner_id, None)
        if timer is not None:
            timer.cancel()
        return self._records.pop(owner_id, None)

    def _evict(self, owner_id: str, challenge: str) -> None:
        """Timer callback: drop the record only if it is still the one scheduled."""
        record = self._records.get(owner_id)
        if record is None or record.challenge != challenge:
            return
        self._timers.pop(owner_id, None)
        self._records.pop(owner_id, None)
        logger.debug(
            "Challenge expired: owner=%s purpose=%s", owner_id, record.purpose
        )

    async def issue(
        self, owner_id: str, purpose: Union[ChallengePurpose, str]
    ) -> str:
        purpose = ChallengePurpose(purpose)
        now = self._clock()
        record = ChallengeRecord(
            owner_id=owner_id,
            challenge=generate_challenge(),
            purpose=purpose.value,
            issued_at=now,
            expires_at=now + self._ttl,
        )
        if self._drop(owner_id) is not None:
            logger.debug("Replacing live challenge: owner=%s", owner_id)
        self._records[owner_id] = record
        loop = asyncio.get_running_loop()
        self._timers[owner_id] = loop.call_later(
            self._ttl, self._evict, owner_id, record.challenge
        )
        logger.info(
            "Challenge issued: owner=%s purpose=%s ttl=%ds",
            owner_id, purpose.value, self._ttl,
        )
        return record.challenge

    async def consume(
        self, owner_id: str, purpose: Union[ChallengePurpose, str]
    ) -> str:
        purpose = ChallengePurpose(purpose)
        record = self._records.get(owner_id)
        if record is None or record.purpose != purpose.value:
            logger.warning(
                "Challenge not found: owner=%s purpose=%s",
                owner_id, purpose.value,
            )
            raise ChallengeNotFound()
        self._drop(owner_id)
        if record.is_expired(self._clock()):
            logger.warning(
                "Challenge expired: owner=%s purpose=%s",
                owner_id, purpose.value,
            )
            raise ChallengeExpired()
        logger.debug(
            "Challenge consumed: owner=%s purpose=%s", owner_id, purpose.value
        )
        return record.challenge

    async def expire(self, owner_id: str) -> None:
        self._drop(owner_id)

    def clear(self) -> None:
        """Drop every record and cancel pending timers."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._records.clear()
