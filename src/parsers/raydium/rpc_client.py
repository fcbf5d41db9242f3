"""Solana JSON-RPC client for pool extraction (getTransaction, getAccountInfo)."""

from typing import Any

import httpx
from loguru import logger

from src.parsers.rate_limiter import RateLimiter


class SolanaRpcClient:
    """Async client for the Solana JSON-RPC methods the extractor needs.

    Failed calls are logged and surfaced as ``None``; nothing is retried here.
    """

    def __init__(
        self,
        rpc_url: str,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 10.0,
        timeout: float = 15.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = httpx.AsyncClient(timeout=timeout)
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._request_id = 0

    async def close(self) -> None:
        await self._client.aclose()

    async def get_transaction(self, signature: str) -> dict | None:
        """Fetch a confirmed transaction (legacy or v0) in ``json`` encoding."""
        return await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "json",
                    "commitment": "confirmed",
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )

    async def get_token_ui_amount(self, token_account: str) -> float | None:
        """Current ui amount held by an SPL token account.

        Reads ``value.data.parsed.info.tokenAmount.uiAmount``; falls back to
        ``uiAmountString`` when the node returns a null ``uiAmount``.
        """
        result = await self._call(
            "getAccountInfo",
            [token_account, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        if not result or not result.get("value"):
            logger.debug(f"[RPC] Token account {token_account[:12]} not found")
            return None

        data = result["value"].get("data")
        if not isinstance(data, dict):
            logger.debug(f"[RPC] Account {token_account[:12]} is not a parsed token account")
            return None

        try:
            token_amount = data["parsed"]["info"]["tokenAmount"]
        except (KeyError, TypeError):
            logger.debug(f"[RPC] No tokenAmount in account {token_account[:12]}")
            return None

        ui_amount = token_amount.get("uiAmount")
        if ui_amount is None:
            ui_amount = token_amount.get("uiAmountString")
        if ui_amount is None:
            return None
        return float(ui_amount)

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        await self._rate_limiter.acquire()
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[RPC] {method} failed: {type(e).__name__}: {e}")
            return None

        if "error" in data:
            logger.warning(f"[RPC] {method} error: {data['error']}")
            return None
        return data.get("result")
