"""Unit tests for SuiPriceRepository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from suiport.core.clock import to_epoch_ms
from suiport.core.exceptions import StorageError
from suiport.data.supabase.repositories.sui_price_repo import SuiPriceRepository

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_add_inserts_sample(mock_supabase_client):
    table = mock_supabase_client.client.table.return_value
    table.insert.return_value.execute = AsyncMock(return_value=MagicMock(data=[]))

    await SuiPriceRepository(mock_supabase_client).add(1.31, created_at=NOW)

    mock_supabase_client.client.table.assert_called_with("sui_price_history")
    table.insert.assert_called_with({"price_usd": 1.31, "created_at": to_epoch_ms(NOW)})


@pytest.mark.asyncio
async def test_get_since_returns_oldest_first(mock_supabase_client):
    table = mock_supabase_client.client.table.return_value
    table.select.return_value.gte.return_value.order.return_value.execute = AsyncMock(
        return_value=MagicMock(
            data=[
                {"id": 1, "price_usd": 1.2, "created_at": to_epoch_ms(NOW) - 300_000},
                {"id": 2, "price_usd": "1.3", "created_at": to_epoch_ms(NOW)},
            ]
        )
    )
    since = datetime(2024, 6, 10, 11, 0, tzinfo=UTC)

    entries = await SuiPriceRepository(mock_supabase_client).get_since(since)

    assert [e.price_usd for e in entries] == [1.2, 1.3]
    assert entries[-1].created_at == NOW
    table.select.return_value.gte.assert_called_with("created_at", to_epoch_ms(since))


@pytest.mark.asyncio
async def test_add_failure_raises_storage_error(mock_supabase_client):
    table = mock_supabase_client.client.table.return_value
    table.insert.return_value.execute = AsyncMock(side_effect=Exception("down"))

    with pytest.raises(StorageError) as exc_info:
        await SuiPriceRepository(mock_supabase_client).add(1.0, created_at=NOW)
    assert exc_info.value.table == "sui_price_history"
