"""
Cas d'usage 'checkout': aperçu du panier et création de la session de paiement.
Orchestre catalogue, moteur de prix, coupons, metadata et Stripe.
"""
from typing import Any, Dict, List, NamedTuple, Optional
import logging

from boutique import config
from boutique.catalog import repository as catalog_repository
from boutique.checkout import cart as cart_logic
from boutique.checkout import metadata as meta
from boutique.checkout import stripe_client
from boutique.checkout.models import CheckoutSessionSnapshot, SnapshotLine
from boutique.coupons import service as coupons_service
from boutique.coupons.models import Coupon
from boutique.pricing import CartItem, PriceBreakdown, price, to_major_units

logger = logging.getLogger(__name__)


class PricedCart(NamedTuple):
    items: List[CartItem]
    products_by_id: Dict[str, Dict[str, Any]]
    coupon: Optional[Coupon]
    breakdown: PriceBreakdown


# module boutique.checkout.service
def price_cart(user_id: str, products: Any, coupon_code: Optional[str] = None, read_only: bool = False) -> PricedCart:
    """
    Résout le panier aux prix catalogue courants et applique le coupon s'il est utilisable.
    - EmptyCart si le panier est vide/malformé ou sans article facturable.
    - Un code coupon inconnu ou expiré est ignoré (total sans remise).
    - read_only=False: un coupon expiré encore actif est désactivé au passage.
    """
    quantities = cart_logic.aggregate_quantities(products)
    products_by_id = catalog_repository.get_products_map(quantities.keys())
    items = cart_logic.build_cart_items(products_by_id, quantities)
    coupon = None
    if coupon_code:
        lookup = coupons_service.find_usable if read_only else coupons_service.validate
        coupon = lookup(coupon_code, user_id)
    breakdown = price(items, coupon=coupon, coupon_applied=coupon is not None)
    return PricedCart(items, products_by_id, coupon, breakdown)

def preview(user_id: str, products: Any, coupon_code: Optional[str] = None) -> Dict[str, Any]:
    """Totaux du panier en unités majeures, sans écriture (ni coupon, ni Stripe)."""
    return price_cart(user_id, products, coupon_code, read_only=True).breakdown.to_public()

def make_snapshot(user_id: str, priced: PricedCart) -> CheckoutSessionSnapshot:
    return CheckoutSessionSnapshot(
        line_items=[
            SnapshotLine(product_id=i.product_id, quantity=i.quantity, unit_price=i.unit_price)
            for i in priced.items
        ],
        user_id=user_id,
        applied_coupon_code=priced.coupon.code if priced.coupon else None,
        computed_total=priced.breakdown.total,
    )

def build_session(user_id: str, products: Any, coupon_code: Optional[str] = None) -> Dict[str, Any]:
    """
    Crée la session Stripe Checkout pour le panier de l'utilisateur.
    Étapes:
      1) Prix catalogue + coupon (price_cart)
      2) Snapshot figé -> metadata de session
      3) Remise Stripe one-shot (amount_off = remise calculée) si coupon appliqué, puis création de la session
      4) Coupon cadeau si le sous-total (avant remise) atteint le seuil
    Retour: {"sessionId", "url", "totalAmount"} (totalAmount en unités majeures, après remise).
    Remarque: le coupon cadeau est émis à la création de session, même si le paiement
    est ensuite abandonné. Rien n'est annulé en cas d'erreur (remise Stripe orpheline possible).
    """
    priced = price_cart(user_id, products, coupon_code)
    snapshot = make_snapshot(user_id, priced)
    metadata = meta.snapshot_to_metadata(snapshot)

    discounts = []
    if priced.coupon is not None and priced.breakdown.discount > 0:
        # remise en montant fixe: total Stripe == breakdown.total
        discounts = [{"coupon": stripe_client.create_discount(priced.breakdown.discount, config.CHECKOUT_CURRENCY)}]

    session = stripe_client.create_session(
        line_items=cart_logic.to_line_items(priced.items, priced.products_by_id, config.CHECKOUT_CURRENCY),
        metadata=metadata,
        discounts=discounts,
        client_reference_id=user_id,
    )

    if priced.breakdown.subtotal >= config.COUPON_GIFT_THRESHOLD:
        coupons_service.auto_issue(user_id)

    logger.info(
        "checkout.session created session_id=%s user_id=%s subtotal=%s total=%s coupon=%s",
        session.get("id"), user_id, priced.breakdown.subtotal, priced.breakdown.total, snapshot.applied_coupon_code,
    )
    return {
        "sessionId": session.get("id"),
        "url": session.get("url"),
        "totalAmount": to_major_units(priced.breakdown.total),
    }
