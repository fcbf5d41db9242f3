"""Raydium AMM v4 program constants and the pool-creation account layout."""

RAYDIUM_AMM_PROGRAM_ID = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"

# Wrapped SOL mint. Always reported as the quote (pc) side of a pool.
WSOL_MINT = "So11111111111111111111111111111111111111112"

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPv1sfdS5qUnx9GbS6hX1TTjR1L6rT3HaZJFA"

# Raydium logs "initialize2: InitializeInstruction2 {...}" on pool creation
INSTRUCTION_INIT_POOL = "initialize2"

# Instruction account position -> PoolAccounts field, for initialize2.
# Ordering is owned by the on-chain program; edit only this table if it changes.
POOL_ACCOUNT_LAYOUT: dict[int, str] = {
    0: "program_id",
    4: "amm_id",
    5: "amm_authority",
    6: "amm_open_orders",
    7: "lp_mint",
    8: "coin_mint",
    9: "pc_mint",
    10: "coin_vault",
    11: "pc_vault",
    13: "amm_target_orders",
    17: "deployer",
}

# initialize2 must carry at least this many account indices
MIN_POOL_ACCOUNTS = max(POOL_ACCOUNT_LAYOUT) + 1
