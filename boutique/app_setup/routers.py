"""
Registre central des routers.
- API v1: checkout, coupons, orders
- Health: health_router
"""
from fastapi import FastAPI
from boutique.checkout import views as checkout_views
from boutique.coupons import views as coupons_views
from boutique.orders import views as orders_views
from boutique.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_views.router)
    app.include_router(coupons_views.router)
    app.include_router(orders_views.router)
    app.include_router(health_router)
