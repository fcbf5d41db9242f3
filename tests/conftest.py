"""Shared test fixtures: synthetic Raydium transactions and fake collaborators."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.raydium.constants import RAYDIUM_AMM_PROGRAM_ID, WSOL_MINT

# initialize2 instruction tag (1) + nonce + open_time + amounts, zero-filled
INIT2_DATA = base58.b58encode(bytes([1]) + bytes(25)).decode()


def make_address(seed: int) -> str:
    return str(Pubkey.from_bytes(bytes([seed]) * 32))


@pytest.fixture
def pool_keys() -> list[str]:
    """18 distinct instruction accounts; offset 9 (pc mint) is wrapped SOL."""
    keys = [make_address(40 + i) for i in range(18)]
    keys[9] = WSOL_MINT
    return keys


@pytest.fixture
def build_tx() -> Callable[..., dict]:
    """Build a getTransaction result invoking the AMM program with given accounts.

    ``versioned=True`` produces the v0 shape: staticAccountKeys +
    compiledInstructions and part of the keys in meta.loadedAddresses.
    ``extra_instructions`` are (program, accounts, data) tuples placed
    before the AMM call.
    """

    def _build(
        ix_accounts: list[str],
        *,
        versioned: bool = False,
        data: str = INIT2_DATA,
        program_id: str = RAYDIUM_AMM_PROGRAM_ID,
        extra_instructions: list[tuple[str, list[str], str]] | None = None,
        trailing_instructions: list[tuple[str, list[str], str]] | None = None,
    ) -> dict:
        calls = list(extra_instructions or [])
        calls.append((program_id, ix_accounts, data))
        calls.extend(trailing_instructions or [])

        # Programs first so they stay static keys in the v0 split
        keys: list[str] = []
        for program, _, _ in calls:
            if program not in keys:
                keys.append(program)
        for _, accounts, _ in calls:
            for account in accounts:
                if account not in keys:
                    keys.append(account)

        def compile_ix(program: str, accounts: list[str], ix_data: str) -> dict:
            indices = [keys.index(a) for a in accounts]
            if versioned:
                return {
                    "programIdIndex": keys.index(program),
                    "accountKeyIndexes": indices,
                    "data": list(base58.b58decode(ix_data)),
                }
            return {
                "programIdIndex": keys.index(program),
                "accounts": indices,
                "data": ix_data,
            }

        instructions = [compile_ix(*call) for call in calls]
        meta: dict = {"err": None, "loadedAddresses": {"writable": [], "readonly": []}}

        if versioned:
            split = len(keys) // 2
            third = split + (len(keys) - split) // 2
            message = {
                "staticAccountKeys": keys[:split],
                "compiledInstructions": instructions,
            }
            meta["loadedAddresses"] = {
                "writable": keys[split:third],
                "readonly": keys[third:],
            }
        else:
            message = {"accountKeys": keys, "instructions": instructions}

        return {
            "slot": 250_000_000,
            "version": 0 if versioned else "legacy",
            "meta": meta,
            "transaction": {"signatures": ["sig"], "message": message},
        }

    return _build


@pytest.fixture
def fake_rpc() -> MagicMock:
    """RPC collaborator double; set ``balances`` to map vault -> ui amount."""
    rpc = MagicMock()
    rpc.balances = {}
    rpc.get_transaction = AsyncMock(return_value=None)
    rpc.get_token_ui_amount = AsyncMock(side_effect=lambda account: rpc.balances.get(account))
    return rpc


@pytest.fixture
def fake_store() -> MagicMock:
    store = MagicMock()
    store.insert_pool = AsyncMock(return_value="65f0c0ffee0000000000beef")
    return store
