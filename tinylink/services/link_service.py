"""
Link Service

Read and delete passthroughs used by the dashboard API. No invariants of
their own beyond what the store guarantees.
"""

from tinylink.core.exceptions import CodeNotFoundError
from tinylink.db.interface import LinkStore
from tinylink.db.models import Link


class LinkService:
    """Lookup, listing and deletion of Links."""

    def __init__(self, store: LinkStore):
        self.store = store

    async def get_link(self, code: str) -> Link:
        """
        Raises:
            CodeNotFoundError: If no Link has this code
        """
        link = await self.store.get_by_code(code)
        if link is None:
            raise CodeNotFoundError(code)
        return link

    async def list_links(self) -> list[Link]:
        """All Links, newest first."""
        return await self.store.list_all()

    async def delete_link(self, code: str) -> None:
        # Deleting an unknown code is a no-op
        await self.store.delete_by_code(code)
