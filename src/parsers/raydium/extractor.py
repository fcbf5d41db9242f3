"""Extract Raydium pool metadata from pool creation transactions.

One signature in, at most one PoolRecord out. Every per-transaction failure
is absorbed here so a feed of many transactions keeps running.
"""

import asyncio

from loguru import logger

from src.db.mongo import PoolStore
from src.parsers.raydium.constants import RAYDIUM_AMM_PROGRAM_ID
from src.parsers.raydium.decoder import (
    build_pool_record,
    find_amm_instruction,
    map_pool_accounts,
    resolve_account_keys,
    resolve_instructions,
)
from src.parsers.raydium.exceptions import AddressDecodeError, InstructionLayoutError
from src.parsers.raydium.models import PoolRecord
from src.parsers.raydium.rpc_client import SolanaRpcClient


class PoolEventExtractor:
    """Decode an initialize2 transaction, price its vaults and persist the pool."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        store: PoolStore,
        program_id: str = RAYDIUM_AMM_PROGRAM_ID,
    ) -> None:
        self._rpc = rpc
        self._store = store
        self._program_id = program_id

    async def extract(self, signature: str) -> PoolRecord | None:
        """Return the pool record for ``signature``, or None.

        Never raises: not-found, decode skips and unexpected errors are
        logged and reported as None.
        """
        try:
            return await self._extract(signature)
        except AddressDecodeError as e:
            logger.info(f"[RAYDIUM] Skipping {signature[:16]}: undecodable address ({e})")
        except InstructionLayoutError as e:
            logger.warning(f"[RAYDIUM] Skipping {signature[:16]}: unexpected layout ({e})")
        except Exception:
            logger.exception(f"[RAYDIUM] Failed to process {signature[:16]}")
        return None

    async def _extract(self, signature: str) -> PoolRecord | None:
        tx = await self._rpc.get_transaction(signature)
        if not tx:
            logger.warning(f"[RAYDIUM] Transaction not found: {signature[:16]}")
            return None

        account_keys = resolve_account_keys(tx)
        instructions = resolve_instructions(tx["transaction"]["message"])
        if not instructions:
            logger.warning(f"[RAYDIUM] No instructions in {signature[:16]}")
            return None

        logger.debug(
            f"[RAYDIUM] {signature[:16]}: {len(account_keys)} accounts, "
            f"{len(instructions)} instructions"
        )

        matched = find_amm_instruction(account_keys, instructions, self._program_id)
        if matched is None:
            logger.debug(f"[RAYDIUM] No AMM instruction in {signature[:16]}")
            return None

        accounts = map_pool_accounts(account_keys, matched.account_indices)

        # Balances reflect chain state at query time, not at the tx's slot
        base_amount, quote_amount = await asyncio.gather(
            self._rpc.get_token_ui_amount(accounts.coin_vault),
            self._rpc.get_token_ui_amount(accounts.pc_vault),
        )
        if base_amount is None or quote_amount is None:
            logger.warning(
                f"[RAYDIUM] Vault balance unavailable for pool {accounts.amm_id[:12]} "
                f"(base={base_amount}, quote={quote_amount})"
            )
            return None

        record = build_pool_record(signature, accounts, base_amount, quote_amount)
        logger.info(
            f"[RAYDIUM] New pool {record.amm_id[:12]}: {record.coin_mint[:12]}/"
            f"{record.pc_mint[:12]} base={record.base_amount} quote={record.quote_amount} "
            f"K={record.k:.4g} V={record.v:.4g}"
        )

        await self._persist(record)
        return record

    async def _persist(self, record: PoolRecord) -> None:
        try:
            inserted_id = await self._store.insert_pool(record)
        except Exception as e:
            logger.error(f"[RAYDIUM] Persist failed for {record.amm_id[:12]}: {e}")
            return
        if inserted_id is None:
            logger.error(f"[RAYDIUM] Pool {record.amm_id[:12]} was not saved")
