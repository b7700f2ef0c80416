"""
Endpoints API 'orders': historique des commandes de l'utilisateur authentifié.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from boutique.orders import repository as orders_repository
from boutique.utils.security import require_user

router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

@router.get("")
def list_orders(user: Dict[str, Any] = Depends(require_user)):
    orders = orders_repository.list_user_orders(user.get("id"))
    return {"orders": [o.to_public() for o in orders]}
