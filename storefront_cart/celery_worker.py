# storefront_cart/celery_worker.py
from celery import Celery

from storefront_cart.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "storefront_cart.tasks.expire",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "expire-carts-every-minute": {
        "task": "storefront_cart.tasks.expire.expire_carts_task",
        "schedule": 60.0,  # co 60 sekund
    },
}

celery_app.conf.timezone = "UTC"
