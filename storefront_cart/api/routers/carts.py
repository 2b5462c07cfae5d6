#storefront_cart/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from requests import RequestException
from sqlalchemy.orm import Session

from storefront_cart.data.database import get_db
from storefront_cart.domain.schemas import CartEnvelope, ItemIn, RemoveItemIn, SyncIn
from storefront_cart.services.cart_service import CartService
from storefront_cart.services.product_client import ProductClient

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db=db, product_client=ProductClient())


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _run(action, message: str):
    try:
        return CartEnvelope(success=True, message=message, data=action())
    except ValueError as e:
        return _fail(400, str(e))
    except RequestException:
        return _fail(502, "Product-service niedostepny")


@router.get("", response_model=CartEnvelope, response_model_exclude_none=True)
def get_cart(user_id: int = Query(..., gt=0), svc: CartService = Depends(get_service)):
    return CartEnvelope(success=True, data=svc.get_cart(user_id))


@router.post("/sync", response_model=CartEnvelope, response_model_exclude_none=True)
def sync_cart(payload: SyncIn, user_id: int = Query(..., gt=0), svc: CartService = Depends(get_service)):
    return _run(lambda: svc.sync_items(user_id, payload.items), "Koszyk zsynchronizowany")


@router.post("/item", response_model=CartEnvelope, response_model_exclude_none=True)
def upsert_item(payload: ItemIn, user_id: int = Query(..., gt=0), svc: CartService = Depends(get_service)):
    return _run(
        lambda: svc.upsert_item(user_id, payload.product_id, payload.quantity, payload.variant_options),
        "Koszyk zaktualizowany",
    )


@router.delete("/item/{product_id}", response_model=CartEnvelope, response_model_exclude_none=True)
def remove_item(
    product_id: int,
    payload: RemoveItemIn | None = None,
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_service),
):
    variants = payload.variant_options if payload else None
    return _run(lambda: svc.remove_item(user_id, product_id, variants), "Produkt usuniety z koszyka")


@router.delete("", response_model=CartEnvelope, response_model_exclude_none=True)
def clear_cart(user_id: int = Query(..., gt=0), svc: CartService = Depends(get_service)):
    return _run(lambda: svc.clear_cart(user_id), "Koszyk wyczyszczony")
