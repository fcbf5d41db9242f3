"""Tests for listener wiring."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.parsers import worker
from src.parsers.raydium.models import RaydiumNewPool


@pytest.mark.asyncio
async def test_feed_events_reach_extractor(monkeypatch) -> None:
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=None)
    rpc = MagicMock()
    rpc.close = AsyncMock()
    listener = MagicMock()
    listener.stop = AsyncMock()

    async def _connect() -> None:
        await listener.on_new_pool(RaydiumNewPool(signature="sigW"))

    listener.connect = _connect
    monkeypatch.setattr(worker, "SolanaRpcClient", MagicMock(return_value=rpc))
    monkeypatch.setattr(worker, "PoolEventExtractor", MagicMock(return_value=extractor))
    monkeypatch.setattr(worker, "RaydiumPoolListener", MagicMock(return_value=listener))

    await worker.run_listener(MagicMock())

    extractor.extract.assert_awaited_once_with("sigW")
    listener.stop.assert_awaited_once()
    rpc.close.assert_awaited_once()
