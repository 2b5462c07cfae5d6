# storefront_cart/api/__init__.py
from fastapi import FastAPI
from storefront_cart.api.routers import carts, settings
from storefront_cart.api.routers.health import router as health_router

def create_app():
    app = FastAPI(title="Cart Service", version="1.0.0")
    app.include_router(health_router)
    app.include_router(carts.router)
    app.include_router(settings.router)
    return app
