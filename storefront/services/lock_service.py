import redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


#transport failures only, a script or command error will not get better on retry
def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
    )


#LUA compare-and-delete, atomic
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis runs the script as one uninterruptible operation
#nobody can squeeze in between GET and DEL, so an expired lock taken over
#by another checkout is never released by the previous holder


class LockService:
    """
    -per user checkout lock
    -release only by the holder
    -atomicity via lua
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, holder: str, ttl: int) -> bool:
        key = self._key(user_id)
        logger.info(f"Acquire lock {key} for {holder}")
        #SET checkout:1:lock "<holder>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=holder,
                nx=True, #only if the key does not exist yet
                ex=ttl, #expires by itself if the holder dies
            )
        )

    @redis_retry()
    def release_checkout_lock(self, user_id: int, holder: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key} for {holder}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, holder)
        return bool(res)
