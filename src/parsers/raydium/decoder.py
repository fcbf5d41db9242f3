"""Decode Raydium AMM v4 pool creation (initialize2) transactions.

Works on the ``getTransaction`` result as returned by Solana JSON-RPC.
Both message shapes resolve to the same flat account list:

  legacy   message.accountKeys
  v0       message.staticAccountKeys (or accountKeys) + meta.loadedAddresses
           (writable first, then readonly)

Instructions come from ``compiledInstructions`` or ``instructions``; account
indices from ``accounts`` or ``accountKeyIndexes``.

No I/O here; the extractor owns RPC and storage calls.
"""

from dataclasses import dataclass
from typing import Any

import base58
from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.raydium.constants import (
    MIN_POOL_ACCOUNTS,
    POOL_ACCOUNT_LAYOUT,
    WSOL_MINT,
)
from src.parsers.raydium.exceptions import AddressDecodeError, InstructionLayoutError
from src.parsers.raydium.models import PoolAccounts, PoolRecord


PUBKEY_LENGTH = 32


@dataclass
class MatchedInstruction:
    """First AMM instruction found in a transaction."""

    position: int
    account_indices: list[int]
    data: bytes


def to_address(value: Any) -> str:
    """Canonical base58 form of an account reference.

    Raises AddressDecodeError for a missing reference or anything that is
    not a 32-byte public key.
    """
    if value is None:
        raise AddressDecodeError("missing account reference")
    if isinstance(value, (bytes, bytearray)):
        # solders panics (BaseException) on a wrong-length slice
        if len(value) != PUBKEY_LENGTH:
            raise AddressDecodeError(f"expected {PUBKEY_LENGTH} bytes, got {len(value)}")
        return str(Pubkey.from_bytes(bytes(value)))
    try:
        return str(Pubkey.from_string(str(value)))
    except (ValueError, TypeError) as e:
        raise AddressDecodeError(f"invalid address {str(value)[:16]!r}: {e}") from e


def resolve_account_keys(tx: dict) -> list[str]:
    """Flat account list of a transaction, identical for legacy and v0."""
    message = tx["transaction"]["message"]

    static_keys = message.get("staticAccountKeys")
    if static_keys is None:
        static_keys = message.get("accountKeys") or []

    keys = [_key_to_str(k) for k in static_keys]

    loaded = (tx.get("meta") or {}).get("loadedAddresses") or {}
    keys.extend(_key_to_str(k) for k in loaded.get("writable") or [])
    keys.extend(_key_to_str(k) for k in loaded.get("readonly") or [])
    return keys


def resolve_instructions(message: dict) -> list[dict] | None:
    instructions = message.get("compiledInstructions")
    if instructions is None:
        instructions = message.get("instructions")
    return instructions


def instruction_account_indices(ix: dict) -> list[int] | None:
    indices = ix.get("accounts")
    if indices is None:
        indices = ix.get("accountKeyIndexes")
    return list(indices) if indices is not None else None


def instruction_data(ix: dict) -> bytes:
    """Instruction payload; base58 string (RPC json) or byte list."""
    data = ix.get("data")
    if not data:
        return b""
    if isinstance(data, str):
        return base58.b58decode(data)
    return bytes(data)


def find_amm_instruction(
    account_keys: list[str],
    instructions: list[dict],
    program_id: str,
) -> MatchedInstruction | None:
    """First instruction invoking ``program_id`` with a non-empty payload.

    Instructions without an account index list are skipped.
    """
    for position, ix in enumerate(instructions):
        program_idx = ix.get("programIdIndex")
        if program_idx is None or not 0 <= program_idx < len(account_keys):
            continue
        if account_keys[program_idx] != program_id:
            continue

        data = instruction_data(ix)
        if not data:
            continue

        indices = instruction_account_indices(ix)
        if indices is None:
            logger.warning(f"[RAYDIUM] AMM instruction #{position} has no account indices")
            continue

        return MatchedInstruction(position=position, account_indices=indices, data=data)
    return None


def map_pool_accounts(account_keys: list[str], account_indices: list[int]) -> PoolAccounts:
    """Resolve the initialize2 account roles by fixed position.

    Raises InstructionLayoutError if the instruction is too short for the
    layout and AddressDecodeError if a position points outside the
    transaction's account list or at an undecodable address.
    """
    if len(account_indices) < MIN_POOL_ACCOUNTS:
        raise InstructionLayoutError(
            f"expected at least {MIN_POOL_ACCOUNTS} accounts, got {len(account_indices)}"
        )

    fields: dict[str, str] = {}
    for offset, role in POOL_ACCOUNT_LAYOUT.items():
        key_index = account_indices[offset]
        value = account_keys[key_index] if 0 <= key_index < len(account_keys) else None
        try:
            fields[role] = to_address(value)
        except AddressDecodeError as e:
            raise AddressDecodeError(f"{role} (account #{offset}): {e}") from e
    return PoolAccounts(**fields)


def compute_pool_metrics(base_amount: float, quote_amount: float) -> tuple[float, float]:
    """Return (K, V): reserve product and min/max reserve ratio.

    V is 0.0 when the larger reserve is zero.
    """
    k = base_amount * quote_amount
    larger = max(base_amount, quote_amount)
    if larger <= 0:
        return k, 0.0
    return k, min(base_amount, quote_amount) / larger


def normalize_mints(coin_mint: str, pc_mint: str) -> tuple[str, str]:
    """Keep wrapped SOL on the pc (quote) side."""
    if coin_mint == WSOL_MINT:
        return pc_mint, coin_mint
    return coin_mint, pc_mint


def build_pool_record(
    signature: str,
    accounts: PoolAccounts,
    base_amount: float,
    quote_amount: float,
) -> PoolRecord:
    k, v = compute_pool_metrics(base_amount, quote_amount)
    coin_mint, pc_mint = normalize_mints(accounts.coin_mint, accounts.pc_mint)

    return PoolRecord(
        signature=signature,
        program_id=accounts.program_id,
        amm_id=accounts.amm_id,
        amm_authority=accounts.amm_authority,
        amm_open_orders=accounts.amm_open_orders,
        lp_mint=accounts.lp_mint,
        coin_mint=coin_mint,
        pc_mint=pc_mint,
        coin_vault=accounts.coin_vault,
        pc_vault=accounts.pc_vault,
        amm_target_orders=accounts.amm_target_orders,
        deployer=accounts.deployer,
        base_amount=base_amount,
        quote_amount=quote_amount,
        k=k,
        v=v,
    )


def _key_to_str(key: Any) -> str:
    # jsonParsed encoding returns {"pubkey": ..., "signer": ..., "writable": ...}
    if isinstance(key, dict):
        return str(key.get("pubkey", ""))
    return str(key)
