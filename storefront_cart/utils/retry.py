# storefront_cart/utils/retry.py
import logging

from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from storefront_cart.utils.settings import RETRY_ATTEMPTS, RETRY_MAX_WAIT_SECONDS
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)


def _retry(exc_type, base_wait: float):
    return retry(
        reraise=True,
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=base_wait, min=base_wait, max=RETRY_MAX_WAIT_SECONDS),
        retry=retry_if_exception_type(exc_type),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def http_retry():
    # polaczenie, timeout i statusy zamienione w HTTPError przez raise_for_status
    return _retry(requests.RequestException, 0.3)


def redis_retry():
    return _retry(redis.RedisError, 0.2)
