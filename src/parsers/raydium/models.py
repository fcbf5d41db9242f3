"""Pydantic v2 models for Raydium pool creation events and records."""

from typing import Any

from pydantic import BaseModel, Field

from src.parsers.raydium.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)


class PoolAccounts(BaseModel):
    """Accounts resolved from an initialize2 instruction by position."""

    program_id: str
    amm_id: str
    amm_authority: str
    amm_open_orders: str
    lp_mint: str
    coin_mint: str
    pc_mint: str
    coin_vault: str
    pc_vault: str
    amm_target_orders: str
    deployer: str

    model_config = {"frozen": True}


class PoolRecord(BaseModel):
    """Pool metadata persisted once per pool creation transaction.

    Document keys (aliases) are camelCase; ``K`` and ``V`` are the
    reserve product and the min/max reserve ratio at query time.
    """

    signature: str
    program_id: str = Field(alias="programId")
    amm_id: str = Field(alias="ammId")
    amm_authority: str = Field(alias="ammAuthority")
    amm_open_orders: str = Field(alias="ammOpenOrders")
    lp_mint: str = Field(alias="lpMint")
    coin_mint: str = Field(alias="coinMint")
    pc_mint: str = Field(alias="pcMint")
    coin_vault: str = Field(alias="coinVault")
    pc_vault: str = Field(alias="pcVault")
    amm_target_orders: str = Field(alias="ammTargetOrders")
    deployer: str
    system_program_id: str = Field(default=SYSTEM_PROGRAM_ID, alias="systemProgramId")
    token_program_id: str = Field(default=TOKEN_PROGRAM_ID, alias="tokenProgramId")
    associated_token_program_id: str = Field(
        default=ASSOCIATED_TOKEN_PROGRAM_ID, alias="associatedTokenProgramId"
    )
    base_amount: float = Field(alias="baseAmount")
    quote_amount: float = Field(alias="quoteAmount")
    k: float = Field(alias="K")
    v: float = Field(alias="V")

    model_config = {"frozen": True, "populate_by_name": True}

    def to_document(self) -> dict[str, Any]:
        """Mongo document with camelCase keys (fresh dict per call)."""
        return self.model_dump(by_alias=True)


class RaydiumNewPool(BaseModel):
    """Event: pool creation detected via logsSubscribe."""

    signature: str
    slot: int | None = None

    model_config = {"extra": "ignore"}
