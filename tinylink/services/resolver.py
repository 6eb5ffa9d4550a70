"""
Redirect Service

Turns a short code into its target URL and records the visit.

The visit is counted in the same statement that reads the URL, so
concurrent visits to one code never lose an increment. Every successful
call counts, including client retries; click counting is deliberately not
idempotent.
"""

from tinylink.core.exceptions import CodeNotFoundError
from tinylink.db.interface import LinkStore


class RedirectResolver:
    """Service for handling URL redirections."""

    def __init__(self, store: LinkStore):
        self.store = store

    async def resolve(self, code: str) -> str:
        """
        Count a visit to ``code`` and return where it points.

        Any string is accepted; malformed codes simply don't match.

        Raises:
            CodeNotFoundError: If no Link has this code (nothing is changed)
            StoreUnavailableError: If the store fails
        """
        target_url = await self.store.increment_and_fetch(code)
        if target_url is None:
            raise CodeNotFoundError(code)
        return target_url
