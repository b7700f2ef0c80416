"""
Endpoints API 'checkout' (utilisateur authentifié).
- POST /api/v1/checkout/preview: totaux du panier (sans effet de bord).
- POST /api/v1/checkout/session: crée la session Stripe Checkout (rate-limité).
- POST /api/v1/checkout/confirm: confirme le paiement et matérialise la commande (idempotent).
Les handlers sont synchrones: Starlette les exécute dans son threadpool, les appels
bloquants Stripe/Supabase ne bloquent donc pas la boucle d'événements.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from boutique.checkout import reconciliation
from boutique.checkout import service as checkout_service
from boutique.checkout.models import CheckoutRequest, ConfirmRequest
from boutique.utils.rate_limit import optional_rate_limit
from boutique.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])

# module boutique.checkout.views
@router.post("/preview")
def preview_cart(payload: CheckoutRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Aperçu: {subtotal, discount, total, couponApplied} en unités majeures.
    - Prix catalogue courants, coupon appliqué seulement s'il est valide.
    """
    return checkout_service.preview(user.get("id"), payload.products, payload.coupon_code)

@router.post("/session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(payload: CheckoutRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Crée une session Checkout Stripe pour le panier de l'utilisateur.
    - Entrée JSON: {"products": [{"id": "<product_id>", "quantity": <int>}, ...], "couponCode": "..."}
    - Retour: {"sessionId", "url", "totalAmount"}
    - Erreurs: 400 panier vide/invalide, 502 Stripe indisponible, 503 base indisponible
    """
    return checkout_service.build_session(user.get("id"), payload.products, payload.coupon_code)

@router.post("/confirm", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def confirm_checkout(payload: ConfirmRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Confirme la session Stripe et retourne la commande.
    - Entrée JSON: {"sessionId": "cs_..."}
    - Retour: {"success", "message", "orderId", "order"}
    - Erreurs: 409 paiement non confirmé, 403 session d'un autre utilisateur
    """
    order = reconciliation.reconcile(payload.session_id, current_user_id=user.get("id"))
    return {
        "success": True,
        "message": "Payment successful, order created, and coupon deactivated if used.",
        "orderId": order.id,
        "order": order.to_public(),
    }
