from typing import Optional

import pytest

from tinylink.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeError,
    InvalidTargetError,
)
from tinylink.core.validators import is_valid_short_code
from tinylink.db.interface import LinkStore
from tinylink.db.models import Link
from tinylink.services.allocator import CodeAllocator
from tinylink.services.resolver import RedirectResolver


class LosingRaceStore(LinkStore):
    """Existence check says free, but another writer wins the insert."""

    def __init__(self):
        self.insert_calls = 0

    async def insert_if_absent(self, code: str, target_url: str) -> Optional[Link]:
        self.insert_calls += 1
        return None

    async def increment_and_fetch(self, code: str) -> Optional[str]:
        return None

    async def get_by_code(self, code: str) -> Optional[Link]:
        return None

    async def list_all(self) -> list[Link]:
        return []

    async def delete_by_code(self, code: str) -> None:
        return None


class SequenceGenerator:
    """Code generator returning a fixed sequence, recording each call."""

    def __init__(self, *codes: str):
        self.codes = list(codes)
        self.calls = 0

    def __call__(self, length: int) -> str:
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


@pytest.mark.asyncio
async def test_generated_code_has_valid_format_and_zeroed_counters(store):
    link = await CodeAllocator(store).allocate("https://example.com/x")

    assert is_valid_short_code(link.code)
    assert len(link.code) == 6
    assert link.target_url == "https://example.com/x"
    assert link.total_clicks == 0
    assert link.last_clicked_at is None
    assert link.created_at is not None
    assert link.id is not None


@pytest.mark.asyncio
async def test_generated_code_was_absent_before_the_call(store):
    generator = SequenceGenerator("Fresh1")
    assert await store.get_by_code("Fresh1") is None

    link = await CodeAllocator(store, code_generator=generator).allocate("https://example.com")

    assert link.code == "Fresh1"
    assert (await store.get_by_code("Fresh1")).target_url == "https://example.com"


@pytest.mark.asyncio
async def test_generated_code_length_is_configurable(store):
    link = await CodeAllocator(store, code_length=8).allocate("https://example.com")
    assert len(link.code) == 8


@pytest.mark.asyncio
async def test_requested_code_is_used_verbatim(store):
    link = await CodeAllocator(store).allocate("https://a.com", "ABC123")
    assert link.code == "ABC123"


@pytest.mark.asyncio
async def test_requested_code_twice_conflicts(store):
    allocator = CodeAllocator(store)
    await allocator.allocate("https://a.com", "ABC123")

    with pytest.raises(CodeConflictError):
        await allocator.allocate("https://b.com", "ABC123")


@pytest.mark.asyncio
async def test_conflict_keeps_first_target(store):
    allocator = CodeAllocator(store)
    await allocator.allocate("https://a.com", "ABC123")
    with pytest.raises(CodeConflictError):
        await allocator.allocate("https://b.com", "ABC123")

    assert await RedirectResolver(store).resolve("ABC123") == "https://a.com"


@pytest.mark.asyncio
async def test_codes_are_case_sensitive(store):
    allocator = CodeAllocator(store)
    await allocator.allocate("https://a.com", "ABC123")
    link = await allocator.allocate("https://b.com", "abc123")

    assert link.code == "abc123"


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["ABC12", "ABC123456", "ABC-12", "AB C12"])
async def test_malformed_requested_code_is_rejected(store, code):
    with pytest.raises(InvalidCodeError):
        await CodeAllocator(store).allocate("https://example.com", code)
    assert await store.list_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["not-a-url", "ftp://example.com", "example.com", ""])
async def test_invalid_target_is_rejected(store, url):
    with pytest.raises(InvalidTargetError):
        await CodeAllocator(store).allocate(url)
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_invalid_target_checked_before_code(store):
    with pytest.raises(InvalidTargetError):
        await CodeAllocator(store).allocate("nope", "bad-code")


@pytest.mark.asyncio
async def test_empty_requested_code_means_generate(store):
    link = await CodeAllocator(store).allocate("https://example.com", "")
    assert is_valid_short_code(link.code)


@pytest.mark.asyncio
async def test_collision_is_retried_with_a_new_code(store):
    await store.insert_if_absent("Taken1", "https://first.com")
    generator = SequenceGenerator("Taken1", "Taken1", "Fresh2")

    link = await CodeAllocator(store, code_generator=generator).allocate("https://second.com")

    assert link.code == "Fresh2"
    assert generator.calls == 3


@pytest.mark.asyncio
async def test_exhaustion_after_ten_attempts_writes_nothing(store):
    await store.insert_if_absent("Taken1", "https://first.com")
    generator = SequenceGenerator("Taken1")

    with pytest.raises(AllocationExhaustedError) as exc_info:
        await CodeAllocator(store, code_generator=generator).allocate("https://second.com")

    assert exc_info.value.attempts == 10
    assert generator.calls == 10
    links = await store.list_all()
    assert [link.code for link in links] == ["Taken1"]


@pytest.mark.asyncio
async def test_attempt_bound_is_configurable():
    racing_store = LosingRaceStore()

    with pytest.raises(AllocationExhaustedError):
        await CodeAllocator(racing_store, max_attempts=3).allocate("https://example.com")

    assert racing_store.insert_calls == 3


@pytest.mark.asyncio
async def test_lost_race_on_requested_code_is_a_conflict():
    racing_store = LosingRaceStore()

    with pytest.raises(CodeConflictError):
        await CodeAllocator(racing_store).allocate("https://example.com", "Race01")

    assert racing_store.insert_calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["https://exa mple.com", "http://exa<mple>.com/", "http://a b/"])
async def test_malformed_host_is_rejected(store, url):
    with pytest.raises(InvalidTargetError):
        await CodeAllocator(store).allocate(url)
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_missing_target_is_rejected(store):
    with pytest.raises(InvalidTargetError):
        await CodeAllocator(store).allocate(None)
