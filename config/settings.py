from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana RPC + WebSocket (Helius/Triton endpoints recommended, public one is throttled)
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    solana_ws_url: str = "wss://api.mainnet-beta.solana.com"
    rpc_max_rps: float = 10.0
    rpc_timeout_sec: float = 15.0

    # Raydium AMM v4
    raydium_amm_program_id: str = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"

    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "bot"
    mongo_collection: str = "raydium_lp_transactions"
    mongo_timeout_ms: int = 5000

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False
    # empty disables the file sink
    log_file: str = "logs/raydium_lp_{time:YYYY-MM-DD}.log"
    log_retention: str = "7 days"


settings = Settings()
