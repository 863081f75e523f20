# cartsync/repos/redis_cart_repo.py
import redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from cartsync.domain.errors import CartStorageError
from cartsync.domain.schemas import CartState
from cartsync.repos.storage import CartStorage
from cartsync.utils.retry import redis_retry
from cartsync.utils.settings import REDIS_URL
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCartStorage(CartStorage):
    """
    Cart snapshot as one JSON document under cart:<name>.
    """

    def __init__(self, name: str, url: str | None = None, client: redis.Redis | None = None):
        self.key = f"cart:{name}"
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def _get(self) -> str | None:
        return self.redis.get(self.key)

    @redis_retry()
    def _set(self, value: str) -> None:
        self.redis.set(self.key, value)

    def load(self) -> CartState | None:
        try:
            raw = self._get()
        except RedisError as e:
            raise CartStorageError(f"Could not load {self.key}: {e}") from e

        if raw is None:
            return None
        try:
            return CartState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring corrupted cart snapshot {self.key}: {e}")
            return None

    def save(self, state: CartState) -> None:
        logger.info(f"Saving cart snapshot {self.key}")
        try:
            self._set(state.model_dump_json())
        except RedisError as e:
            raise CartStorageError(f"Could not save {self.key}: {e}") from e

    def close(self) -> None:
        self.redis.close()
