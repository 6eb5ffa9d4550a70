import asyncio

import pytest
from sqlalchemy.pool import NullPool

from tinylink.core.exceptions import StoreUnavailableError
from tinylink.core.setting import Settings
from tinylink.db.postgres_adapter import PostgreSQLAdapter
from tinylink.db.session import get_database_adapter
from tinylink.db.sqlite_adapter import SQLiteAdapter
from tinylink.db.store import SQLModelLinkStore


class TestAdapterSelection:

    def test_sqlite_url(self):
        assert isinstance(get_database_adapter("sqlite+aiosqlite:///./x.db"), SQLiteAdapter)

    def test_postgres_url(self):
        adapter = get_database_adapter("postgresql+asyncpg://u:p@localhost/db")
        assert isinstance(adapter, PostgreSQLAdapter)
        assert adapter.get_dialect_name() == "postgresql"

    def test_unknown_url(self):
        with pytest.raises(ValueError):
            get_database_adapter("mysql+aiomysql://localhost/db")


@pytest.mark.asyncio
async def test_insert_returns_persisted_link(store):
    link = await store.insert_if_absent("ABC123", "https://a.com")

    assert link.code == "ABC123"
    assert link.target_url == "https://a.com"
    assert link.total_clicks == 0
    assert link.last_clicked_at is None
    assert link.created_at is not None


@pytest.mark.asyncio
async def test_insert_of_taken_code_returns_none(store):
    await store.insert_if_absent("ABC123", "https://a.com")

    assert await store.insert_if_absent("ABC123", "https://b.com") is None
    assert (await store.get_by_code("ABC123")).target_url == "https://a.com"


@pytest.mark.asyncio
async def test_racing_inserts_have_one_winner(store):
    results = await asyncio.gather(
        *(store.insert_if_absent("Race01", f"https://site{i}.com") for i in range(5))
    )

    winners = [link for link in results if link is not None]
    assert len(winners) == 1
    assert (await store.get_by_code("Race01")).target_url == winners[0].target_url


@pytest.mark.asyncio
async def test_increment_and_fetch(store):
    await store.insert_if_absent("ABC123", "https://a.com")

    assert await store.increment_and_fetch("ABC123") == "https://a.com"
    assert await store.increment_and_fetch("nope00") is None

    link = await store.get_by_code("ABC123")
    assert link.total_clicks == 1
    assert link.last_clicked_at is not None


@pytest.mark.asyncio
async def test_list_all_is_newest_first(store):
    for code in ["First1", "Second", "Third3"]:
        await store.insert_if_absent(code, "https://example.com")

    links = await store.list_all()

    assert [link.code for link in links] == ["Third3", "Second", "First1"]


@pytest.mark.asyncio
async def test_list_all_empty(store):
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    await store.insert_if_absent("ABC123", "https://a.com")

    await store.delete_by_code("ABC123")
    await store.delete_by_code("ABC123")
    await store.delete_by_code("never1")

    assert await store.get_by_code("ABC123") is None


@pytest.mark.asyncio
async def test_deleted_code_can_be_reused(store):
    await store.insert_if_absent("ABC123", "https://a.com")
    await store.delete_by_code("ABC123")

    link = await store.insert_if_absent("ABC123", "https://b.com")
    assert link.target_url == "https://b.com"


@pytest.mark.asyncio
async def test_unreachable_database_raises_store_unavailable(tmp_path):
    unreachable = SQLModelLinkStore.from_settings(
        Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}")
    )
    try:
        with pytest.raises(StoreUnavailableError) as exc_info:
            await unreachable.increment_and_fetch("ABC123")
        assert exc_info.value.original_error is not None

        with pytest.raises(StoreUnavailableError):
            await unreachable.insert_if_absent("ABC123", "https://a.com")
    finally:
        await unreachable.close()


@pytest.mark.asyncio
async def test_missing_table_raises_store_unavailable(test_settings):
    no_schema = SQLModelLinkStore.from_settings(test_settings)
    try:
        with pytest.raises(StoreUnavailableError):
            await no_schema.list_all()
    finally:
        await no_schema.close()


@pytest.mark.asyncio
async def test_driver_timeout_raises_store_unavailable(store):
    def timing_out_session_maker():
        raise asyncio.TimeoutError()

    store.session_maker = timing_out_session_maker

    with pytest.raises(StoreUnavailableError) as exc_info:
        await store.increment_and_fetch("ABC123")
    assert isinstance(exc_info.value.original_error, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_sqlite_engine_uses_adapter_pool_class(test_settings):
    sqlite_store = SQLModelLinkStore.from_settings(test_settings)
    try:
        assert isinstance(sqlite_store.engine.pool, NullPool)
    finally:
        await sqlite_store.close()


@pytest.mark.asyncio
async def test_postgres_engine_uses_queue_pool():
    pytest.importorskip("asyncpg")
    engine = PostgreSQLAdapter().create_engine("postgresql+asyncpg://u:p@localhost/db")
    try:
        assert not isinstance(engine.pool, NullPool)
        assert engine.pool.size() == 10
    finally:
        await engine.dispose()
