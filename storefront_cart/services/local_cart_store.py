# storefront_cart/services/local_cart_store.py
import json
import math
from datetime import datetime, timezone, timedelta
from typing import List

import redis
from pydantic import TypeAdapter
from redis.exceptions import RedisError

from storefront_cart.domain.errors import CartPersistenceError
from storefront_cart.domain.schemas import CartConfig, CartLine
from storefront_cart.utils.retry import redis_retry
from storefront_cart.utils.settings import REDIS_URL, LOCAL_CART_KEY_PREFIX
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)

_LINES = TypeAdapter(List[CartLine])
_DAY_MS = 24 * 60 * 60 * 1000


def _now_ms(now: datetime | None) -> int:
    now = now or datetime.now(timezone.utc)
    return int(now.timestamp() * 1000)


class LocalCartStore:
    """
    Koszyk goscia trzymany pod jednym kluczem na urzadzenie.

    -payload: {"items": [...], "savedAt": ms, "expirationDays": n}
    -odczyt brakujacego, zepsutego albo przeterminowanego klucza = pusty koszyk
    -waznosc liczona wg AKTUALNEJ polityki (admin mogl skrocic okno)
    -klucz wspolny dla wszystkich instancji tego urzadzenia, bez locka
    """

    def __init__(
        self,
        device_id: str,
        url: str | None = None,
        client: redis.Redis | None = None,
        prefix: str = LOCAL_CART_KEY_PREFIX,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.key = f"{prefix}:{device_id}"

    @redis_retry()
    def _read(self) -> str | None:
        return self.redis.get(self.key)

    @redis_retry()
    def _write(self, payload: str, ttl: int | None) -> None:
        # EX jako siatka bezpieczenstwa, o waznosci decyduje savedAt
        self.redis.set(name=self.key, value=payload, ex=ttl)

    @redis_retry()
    def _delete(self) -> None:
        self.redis.delete(self.key)

    def _discard(self) -> None:
        try:
            self._delete()
        except RedisError as e:
            logger.warning(f"Nie udalo sie usunac {self.key}: {e}")

    def save(self, lines: List[CartLine], config: CartConfig, now: datetime | None = None) -> None:
        if not config.persist_cart:
            logger.info(f"Trwalosc koszyka wylaczona, usuwam {self.key}")
            self.clear()
            return

        days = config.cart_expiration_days
        saved_at = _now_ms(now)
        payload = json.dumps(
            {
                "items": [line.to_wire() for line in lines],
                "savedAt": saved_at,
                "expirationDays": days,
                "expiresAt": saved_at + days * _DAY_MS if days else None,
            }
        )

        try:
            self._write(payload, days * 24 * 60 * 60 or None)
        except RedisError as e:
            logger.error(f"Zapis koszyka {self.key} nieudany: {e}")
            raise CartPersistenceError(f"Nie udalo sie zapisac koszyka: {e}") from e

        logger.info(
            f"Zapisano koszyk {self.key} ({len(lines)} pozycji, "
            f"{'bez wygasania' if days == 0 else f'{days} dni'})"
        )

    def load(self, config: CartConfig, now: datetime | None = None) -> List[CartLine]:
        if not config.persist_cart:
            self._discard()
            return []

        try:
            raw = self._read()
        except RedisError as e:
            logger.warning(f"Odczyt koszyka {self.key} nieudany, traktuje jak pusty: {e}")
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
            saved_at = int(data["savedAt"])
            lines = _LINES.validate_python(data["items"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Uszkodzony koszyk {self.key}, usuwam: {e}")
            self._discard()
            return []

        days = config.cart_expiration_days
        if days and _now_ms(now) >= saved_at + days * _DAY_MS:
            logger.info(f"Koszyk {self.key} wygasl, usuwam")
            self._discard()
            return []

        return lines

    def clear(self) -> None:
        try:
            self._delete()
        except RedisError as e:
            logger.error(f"Usuniecie koszyka {self.key} nieudane: {e}")
            raise CartPersistenceError(f"Nie udalo sie usunac koszyka: {e}") from e
        logger.info(f"Usunieto koszyk {self.key}")

    def expiry_info(self, config: CartConfig, now: datetime | None = None) -> dict | None:
        """Dane do baneru "koszyk wkrotce wygasnie"; None gdy brak koszyka."""
        try:
            raw = self._read()
            saved_at = int(json.loads(raw)["savedAt"]) if raw else None
        except (RedisError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Brak informacji o waznosci {self.key}: {e}")
            return None

        if saved_at is None:
            return None

        days = config.cart_expiration_days
        if not days:
            return {"expires_at": None, "days_remaining": None, "is_expired": False}

        now_ms = _now_ms(now)
        expires_ms = saved_at + days * _DAY_MS
        return {
            "expires_at": datetime.fromtimestamp(0, timezone.utc) + timedelta(milliseconds=expires_ms),
            "days_remaining": max(0, math.ceil((expires_ms - now_ms) / _DAY_MS)),
            "is_expired": now_ms >= expires_ms,
        }
