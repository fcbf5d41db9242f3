"""Listener worker: logsSubscribe feed -> PoolEventExtractor -> MongoDB."""

from loguru import logger

from config.settings import settings
from src.db.mongo import PoolStore
from src.parsers.raydium.extractor import PoolEventExtractor
from src.parsers.raydium.models import RaydiumNewPool
from src.parsers.raydium.rpc_client import SolanaRpcClient
from src.parsers.raydium.ws_client import RaydiumPoolListener


async def run_listener(store: PoolStore) -> None:
    """Run the pool creation feed until cancelled.

    ``store`` must already be connected; its lifecycle belongs to the caller.
    """
    rpc = SolanaRpcClient(
        settings.solana_rpc_url,
        max_rps=settings.rpc_max_rps,
        timeout=settings.rpc_timeout_sec,
    )
    extractor = PoolEventExtractor(rpc, store, program_id=settings.raydium_amm_program_id)
    listener = RaydiumPoolListener(
        settings.solana_ws_url, program_id=settings.raydium_amm_program_id
    )

    async def _on_new_pool(event: RaydiumNewPool) -> None:
        await extractor.extract(event.signature)

    listener.on_new_pool = _on_new_pool

    logger.info(f"[WORKER] Watching Raydium AMM {settings.raydium_amm_program_id[:12]}")
    try:
        await listener.connect()
    finally:
        await listener.stop()
        await rpc.close()
