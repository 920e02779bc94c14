"""Identity lookups used to enforce username and email uniqueness."""

from typing import Optional

import structlog

from api.src.models.account import AccountDB
from api.src.repositories.account_repo import AccountRepository

logger = structlog.get_logger(__name__)


class IdentityUniquenessChecker:
    """Read-only lookups of existing accounts by identity key."""

    def __init__(self, account_repo: AccountRepository):
        self.account_repo = account_repo

    async def find_by_username(self, username: str) -> Optional[AccountDB]:
        """Return the account holding ``username``, if any."""
        account = await self.account_repo.get_account_by_username(username)
        logger.debug("username_lookup", username=username, taken=account is not None)
        return account

    async def find_by_email(self, email: str) -> Optional[AccountDB]:
        """Return the account holding ``email``, if any."""
        account = await self.account_repo.get_account_by_email(email)
        logger.debug("email_lookup", taken=account is not None)
        return account
