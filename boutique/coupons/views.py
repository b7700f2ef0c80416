"""
Endpoints API 'coupons' (utilisateur authentifié).
- GET  /api/v1/coupons: coupon actif et non expiré de l'utilisateur, ou null.
- POST /api/v1/coupons/validate: vérifie un code pour l'utilisateur courant.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from boutique.coupons import service as coupons_service
from boutique.coupons.models import ValidateCouponRequest
from boutique.utils.security import require_user

router = APIRouter(prefix="/api/v1/coupons", tags=["Coupons API"])

@router.get("")
def get_my_coupon(user: Dict[str, Any] = Depends(require_user)):
    coupon = coupons_service.get_active_coupon(user.get("id"))
    return coupon.to_public() if coupon else None

@router.post("/validate")
def validate_coupon(payload: ValidateCouponRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Valide un code coupon.
    - 200: {message, code, discountPercentage}
    - 404: introuvable, inactif ou expiré (désactivé au passage)
    """
    coupon = coupons_service.require_valid(payload.code, user.get("id"))
    return {
        "message": "Coupon is valid",
        "code": coupon.code,
        "discountPercentage": coupon.discount_percentage,
    }
