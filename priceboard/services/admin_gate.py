# priceboard/services/admin_gate.py

"""Shared-secret check guarding the admin editor."""

import hmac
import logging

from priceboard.config.settings import Settings

logger = logging.getLogger("priceboard.admin")


class AdminGate:
    """Counts failed attempts for one login modal.

    After ``max_attempts`` consecutive mismatches the gate locks and
    rejects everything until a new gate (a new modal) is created.
    """

    def __init__(
        self,
        secret: str | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._secret = secret if secret is not None else Settings.ADMIN_PASSWORD
        self.max_attempts: int = (
            max_attempts if max_attempts is not None
            else Settings.MAX_LOGIN_ATTEMPTS
        )
        self.attempts = 0

    @property
    def locked(self) -> bool:
        return self.attempts >= self.max_attempts

    @property
    def remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)

    def check(self, candidate: str) -> bool:
        """Return True on a match; count a failure otherwise."""
        if self.locked:
            return False
        if hmac.compare_digest(
            candidate.encode("utf-8"), self._secret.encode("utf-8"),
        ):
            self.attempts = 0
            logger.info("Admin login accepted")
            return True
        self.attempts += 1
        logger.warning(
            "Admin login rejected (%d/%d)",
            self.attempts,
            self.max_attempts,
        )
        return False
