import uuid

import redis
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete in one step, so a lock that already expired and was
# taken by another checkout is never released by us
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    -per user checkout lock (SET NX EX)
    -release only by the token holder (lua)
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def checkout_key(user_id: int) -> str:
        return f"checkout:user:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, ttl: int) -> str | None:
        """Returns the lock token, or None when another checkout holds it."""
        key = self.checkout_key(user_id)
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        #SET checkout:user:1:lock "<token>" NX EX 30
        acquired = self.redis.set(name=key, value=token, nx=True, ex=ttl)
        return token if acquired else None

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self.checkout_key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
