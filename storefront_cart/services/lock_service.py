import redis
from storefront_cart.utils.retry import redis_retry
from storefront_cart.utils.settings import REDIS_URL
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL

class LockService:
    """
    -lock na zadanie okresowe (jedno uruchomienie naraz na wszystkich workerach)
    -zwalnianie tylko przez wlasciciela
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int) -> bool:
        key = f"task:{name}:lock"
        logger.info(f"Acquire lock {key} for {owner}")
        #SET task:x:lock "owner" NX EX ttl
        return bool(self.redis.set(
            name=key,
            value=owner,
            nx=True, #jak klucz jest to nic nie rob i False
            ex=ttl, #wygasa sam, nawet jak worker padnie
        ))

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        key = f"task:{name}:lock"
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
