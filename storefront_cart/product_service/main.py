# product_service/main.py
from datetime import datetime, timezone, timedelta

from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Service (dev mock)")


def _in_hours(hours: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


PRODUCTS = {
    1: {"id": 1, "name": "Keyboard", "price": 1_990_000},
    2: {"id": 2, "name": "Mouse", "price": 495_000, "discount": 20},
    3: {"id": 3, "name": "Monitor", "price": 8_990_000, "compareAtPrice": 9_900_000},
    4: {
        "id": 4,
        "name": "Headset",
        "price": 2_400_000,
        "discount": 15,
        "isFlashDeal": True,
        "flashDealEndTime": _in_hours(6),
        "campaignLabel": "Flash Deal",
    },
    5: {
        "id": 5,
        "name": "Webcam",
        "price": 1_200_000,
        "discount": 30,
        "isSpecialOffer": True,
        "specialOfferEndTime": _in_hours(48),
    },
}

@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
