"""WebSocket feed of Raydium AMM pool creations via Solana logsSubscribe.

logsSubscribe gives us signature + log lines only. A transaction whose logs
contain the initialize2 marker is handed to ``on_new_pool``; the extractor
then fetches the full transaction by signature.

Every session error (rejected handshake, dropped socket, timeout) ends the
session and schedules a reconnect; only ``stop()`` ends ``connect()``.
"""

import asyncio
import json
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from enum import Enum

from loguru import logger
from websockets.asyncio.client import ClientConnection
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import WebSocketException

from src.parsers.raydium.constants import INSTRUCTION_INIT_POOL, RAYDIUM_AMM_PROGRAM_ID
from src.parsers.raydium.models import RaydiumNewPool

SEEN_SIGNATURES_MAX = 10_000

# InvalidHandshake (e.g. HTTP 429 on upgrade) and ConnectionClosed are WebSocketException
SESSION_ERRORS = (WebSocketException, OSError, TimeoutError)

PoolCallback = Callable[[RaydiumNewPool], Awaitable[object]]


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ACTIVE = "active"


class RaydiumPoolListener:
    """logsSubscribe client for the Raydium AMM program.

    One socket at a time. The reconnect delay doubles after each failed
    session up to ``max_reconnect_delay`` and resets once a handshake
    succeeds. Each detected pool runs its callback as a tracked task so a
    slow extraction never blocks the feed.
    """

    def __init__(
        self,
        ws_url: str,
        program_id: str = RAYDIUM_AMM_PROGRAM_ID,
        callback_timeout: float = 30.0,
        reconnect_delay: float = 5.0,
        max_reconnect_delay: float = 60.0,
    ) -> None:
        self._ws_url = ws_url
        self._program_id = program_id
        self._callback_timeout = callback_timeout
        self._initial_delay = reconnect_delay
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_delay = max_reconnect_delay

        self._ws: ClientConnection | None = None
        self._state = ConnectionState.DISCONNECTED
        self._running = False
        self._attempts = 0
        self._message_count = 0
        self._subscription_id: int | None = None
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._pending_tasks: set[asyncio.Task] = set()

        self.on_new_pool: PoolCallback | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def message_count(self) -> int:
        return self._message_count

    @property
    def reconnect_delay(self) -> float:
        return self._reconnect_delay

    async def connect(self) -> None:
        """Run sessions until ``stop()`` is called."""
        self._running = True
        while self._running:
            self._attempts += 1
            self._state = ConnectionState.CONNECTING
            try:
                await self._run_session()
            except SESSION_ERRORS as e:
                logger.warning(f"[WS] Session ended: {type(e).__name__}: {e}")
            finally:
                self._ws = None
                self._subscription_id = None
                self._state = ConnectionState.DISCONNECTED

            if self._running:
                await self._backoff()

    async def _run_session(self) -> None:
        async with ws_connect(
            self._ws_url,
            ping_interval=30,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._ws = ws
            self._state = ConnectionState.CONNECTED
            self._reconnect_delay = self._initial_delay

            self._subscription_id = await self._subscribe(ws)
            self._state = ConnectionState.ACTIVE
            logger.info(
                f"[WS] logsSubscribe active for {self._program_id[:12]} "
                f"(attempt {self._attempts}, id={self._subscription_id})"
            )

            async for frame in ws:
                self._message_count += 1
                self._handle_frame(frame)

    async def _subscribe(self, ws: ClientConnection) -> int | None:
        await ws.send(json.dumps({
            "jsonrpc": "2.0",
            "id": 1,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self._program_id]},
                {"commitment": "confirmed"},
            ],
        }))
        try:
            ack = json.loads(await asyncio.wait_for(ws.recv(), timeout=10.0))
        except (asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"[WS] No logsSubscribe confirmation: {e}")
            return None
        return ack.get("result") if isinstance(ack, dict) else None

    async def _backoff(self) -> None:
        delay = self._reconnect_delay
        logger.info(f"[WS] Reconnecting in {delay:.1f}s")
        await asyncio.sleep(delay)
        self._reconnect_delay = min(delay * 2, self._max_reconnect_delay)

    def _handle_frame(self, frame: str | bytes) -> None:
        try:
            data = json.loads(frame)
        except ValueError:
            logger.debug("[WS] Dropping non-JSON frame")
            return
        self._handle_notification(data)

    def _handle_notification(self, data: object) -> None:
        # {"method": "logsNotification", "params": {"result": {"context": {...}, "value": {...}}}}
        if not isinstance(data, dict):
            return
        params = data.get("params")
        if not isinstance(params, dict):
            return
        result = params.get("result")
        if not isinstance(result, dict):
            return
        value = result.get("value")
        if not isinstance(value, dict):
            return

        signature = value.get("signature")
        logs = value.get("logs") or []
        if not signature or value.get("err") or not is_pool_creation(logs):
            return

        if signature in self._seen:
            return
        self._seen[signature] = None
        if len(self._seen) > SEEN_SIGNATURES_MAX:
            self._seen.popitem(last=False)

        slot = (result.get("context") or {}).get("slot")
        self._dispatch(RaydiumNewPool(signature=signature, slot=slot))

    def _dispatch(self, event: RaydiumNewPool) -> None:
        if not self.on_new_pool:
            return
        logger.debug(f"[WS] Pool creation in {event.signature[:16]} (slot {event.slot})")
        task = asyncio.create_task(self._run_callback(self.on_new_pool, event))
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    async def _run_callback(self, callback: PoolCallback, event: RaydiumNewPool) -> None:
        try:
            await asyncio.wait_for(callback(event), timeout=self._callback_timeout)
        except asyncio.TimeoutError:
            logger.error(f"[WS] Pool handler timed out for {event.signature[:16]}")
        except Exception as e:
            logger.error(f"[WS] Pool handler failed for {event.signature[:16]}: {e}")

    async def stop(self) -> None:
        """Close the socket and cancel in-flight pool handlers, waiting for them to unwind."""
        self._running = False
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

        tasks = list(self._pending_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._state = ConnectionState.DISCONNECTED


def is_pool_creation(logs: list[str]) -> bool:
    """True if the log lines announce a Raydium initialize2."""
    return any(INSTRUCTION_INIT_POOL in line for line in logs)
