"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
- Toute erreur du SDK (réseau, clé, API) devient PaymentProviderError (502, rejouable).
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from boutique import config
from boutique.errors import PaymentProviderError

logger = logging.getLogger(__name__)

# module boutique.checkout.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def _to_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject expose to_dict() (récursif); les fakes de test sont déjà des dicts
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_discount(amount_off: int, currency: str) -> str:
    """Crée un coupon Stripe one-shot (amount_off en centimes) et retourne son id."""
    require_stripe()
    try:
        coupon = stripe.Coupon.create(amount_off=amount_off, currency=currency, duration="once")
    except stripe.StripeError as e:
        logger.exception("stripe.create_discount failed amount_off=%s", amount_off)
        raise PaymentProviderError(f"Création de la remise impossible: {e.user_message or e}") from e
    return coupon["id"]

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    metadata: Dict[str, str],
    discounts: Optional[List[Dict[str, Any]]] = None,
    client_reference_id: Optional[str] = None,
    success_url: str = config.CHECKOUT_SUCCESS_URL,
    cancel_url: str = config.CHECKOUT_CANCEL_URL,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (mode payment, carte).
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            payment_method_types=["card"],
            line_items=line_items,
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            discounts=discounts or [],
            metadata=metadata,
            client_reference_id=client_reference_id,
        )
    except stripe.StripeError as e:
        logger.exception("stripe.create_session failed user_id=%s", client_reference_id)
        raise PaymentProviderError(f"Création de la session impossible: {e.user_message or e}") from e
    return _to_dict(session)

def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "amount_total", "metadata".
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.exception("stripe.get_session failed session_id=%s", session_id)
        raise PaymentProviderError(f"Lecture de la session impossible: {e.user_message or e}") from e
    return _to_dict(session)
