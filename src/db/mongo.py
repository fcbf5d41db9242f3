from loguru import logger
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from src.parsers.raydium.models import PoolRecord


class StorageUnavailableError(Exception):
    pass


class PoolStore:
    """Insert-only MongoDB store for pool records.

    Owned by the caller: ``connect()`` before use, ``close()`` on shutdown.
    """

    def __init__(
        self,
        uri: str,
        db_name: str = "bot",
        collection_name: str = "raydium_lp_transactions",
        timeout_ms: int = 5000,
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._collection_name = collection_name
        self._timeout_ms = timeout_ms
        self._client: AsyncMongoClient | None = None
        self._collection: AsyncCollection | None = None

    @property
    def is_connected(self) -> bool:
        return self._collection is not None

    async def connect(self) -> None:
        """Open the client and verify the server answers. No-op if already connected."""
        if self._collection is not None:
            return

        client: AsyncMongoClient = AsyncMongoClient(
            self._uri, serverSelectionTimeoutMS=self._timeout_ms
        )
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            await client.close()
            raise StorageUnavailableError(f"MongoDB connection failed: {e}") from e

        self._client = client
        self._collection = client[self._db_name][self._collection_name]
        logger.info(f"[MONGO] Connected, writing to {self._db_name}.{self._collection_name}")

    async def insert_pool(self, record: PoolRecord) -> str | None:
        """Insert one record. Returns the inserted id, or None if the write failed."""
        if self._collection is None:
            raise StorageUnavailableError("PoolStore.connect() was not called")

        try:
            result = await self._collection.insert_one(record.to_document())
        except PyMongoError as e:
            logger.error(f"[MONGO] Insert failed for {record.amm_id[:12]}: {e}")
            return None

        if not result.acknowledged:
            logger.error(f"[MONGO] Insert not acknowledged for {record.amm_id[:12]}")
            return None

        logger.info(f"[MONGO] Saved pool {record.amm_id[:12]} as {result.inserted_id}")
        return str(result.inserted_id)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._collection = None
