"""
Code Allocation Service

Creates new Links. Either honours a caller-requested code or generates a
random one, and guarantees the stored code is unique.

Design Decisions:
- Requested codes get one existence check first so the common conflict
  fails fast; the store's conditional insert is still the authority and a
  lost race is reported the same way (CodeConflictError)
- Generated codes skip the existence check and go straight to the
  conditional insert, regenerating on collision up to max_attempts times
- The code generator is injectable (tests, or a CSPRNG later)
"""

from typing import Callable, Optional

from tinylink.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeError,
    InvalidTargetError,
)
from tinylink.core.validators import (
    SHORT_CODE_MIN_LENGTH,
    generate_short_code,
    is_valid_short_code,
    is_valid_url,
)
from tinylink.db.interface import LinkStore
from tinylink.db.models import Link

DEFAULT_MAX_ATTEMPTS = 10


class CodeAllocator:
    """
    Allocates short codes for new Links.

    Separated from the API layer so it can be driven by any caller that
    holds a LinkStore.
    """

    def __init__(
        self,
        store: LinkStore,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        code_length: int = SHORT_CODE_MIN_LENGTH,
        code_generator: Optional[Callable[[int], str]] = None
    ):
        """
        Args:
            store: Store the Link is written to
            max_attempts: Generated candidates to try before giving up
            code_length: Length of generated codes
            code_generator: Callable taking a length and returning a code
        """
        self.store = store
        self.max_attempts = max_attempts
        self.code_length = code_length
        self.code_generator = code_generator or generate_short_code

    async def allocate(self, target_url: Optional[str], requested_code: Optional[str] = None) -> Link:
        """
        Create a Link for ``target_url``.

        Args:
            target_url: Absolute http(s) URL to redirect to
            requested_code: Optional caller-chosen code (6-8 alphanumerics)

        Returns:
            The Link as persisted, with zeroed counters

        Raises:
            InvalidTargetError: If target_url is not an absolute http(s) URL
            InvalidCodeError: If requested_code is malformed
            CodeConflictError: If requested_code is already taken
            AllocationExhaustedError: If no generated code was free
            StoreUnavailableError: If the store fails
        """
        if not is_valid_url(target_url):
            raise InvalidTargetError(
                target_url,
                reason="Invalid URL format. URL must be absolute and use http:// or https://"
            )

        if requested_code:
            return await self._allocate_requested(requested_code, target_url)
        return await self._allocate_generated(target_url)

    async def _allocate_requested(self, code: str, target_url: str) -> Link:
        if not is_valid_short_code(code):
            raise InvalidCodeError(code)

        if await self.store.get_by_code(code) is not None:
            raise CodeConflictError(code)

        link = await self.store.insert_if_absent(code, target_url)
        if link is None:
            # Another allocator inserted it between the check and the insert
            raise CodeConflictError(code)
        return link

    async def _allocate_generated(self, target_url: str) -> Link:
        for _ in range(self.max_attempts):
            candidate = self.code_generator(self.code_length)
            link = await self.store.insert_if_absent(candidate, target_url)
            if link is not None:
                return link
        raise AllocationExhaustedError(self.max_attempts)
