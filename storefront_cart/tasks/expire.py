# storefront_cart/tasks/expire.py
import os
import socket
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from storefront_cart.celery_worker import celery_app
from storefront_cart.data.database import SessionLocal
from storefront_cart.repos.cart_repo import CartRepo
from storefront_cart.services.lock_service import LockService
from storefront_cart.utils.logging import get_logger

logger = get_logger(__name__)

LOCK_NAME = "expire-carts"
LOCK_TTL_SECONDS = 55


def expire_carts(db: Session, now: datetime | None = None) -> int:
    """ACTIVE z expires_at <= now -> EXPIRED, pozycje usuniete. Zwraca liczbe koszykow."""
    now = now or datetime.now(timezone.utc)
    repo = CartRepo(db)

    carts = repo.get_expired_carts(now)
    logger.info(f"Found {len(carts)} carts to expire")

    for cart in carts:
        cart.status = "EXPIRED"
        repo.delete_cart_items(cart.id)
        logger.info(f"Cart {cart.id} marked as expired")

    repo.commit()
    return len(carts)


@celery_app.task(name="storefront_cart.tasks.expire.expire_carts_task")
def expire_carts_task(lock_service: LockService | None = None):
    logger.info("Expire carts task started")

    lock_service = lock_service or LockService()
    owner = f"{socket.gethostname()}:{os.getpid()}"

    if not lock_service.acquire(LOCK_NAME, owner, LOCK_TTL_SECONDS):
        logger.info("Expire carts already running, skipping")
        return 0

    db = SessionLocal()
    try:
        return expire_carts(db)
    finally:
        db.close()
        lock_service.release(LOCK_NAME, owner)
