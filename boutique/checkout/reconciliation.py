"""
Réconciliation d'une session de paiement: Pending -> Confirmed -> Materialized (ou Rejected).

Garanties:
- Exactement une commande par session: la contrainte unique du registre arbitre les appels
  concurrents, le perdant relit et renvoie la commande gagnante.
- Le coupon éventuel est lu dans le snapshot de la session (jamais revalidé) et désactivé
  de manière idempotente.
- Le montant de la commande est celui rapporté par Stripe, pas un recalcul catalogue.
"""
from typing import Optional
import logging

from boutique.checkout import metadata as meta
from boutique.checkout import stripe_client
from boutique.coupons import service as coupons_service
from boutique.errors import CheckoutError, DuplicateOrder, PaymentNotConfirmed, SessionOwnershipError, StoreUnavailable
from boutique.orders import repository as orders_repository
from boutique.orders.models import Order

logger = logging.getLogger(__name__)

PAID = "paid"

def _check_owner(owner_id: str, current_user_id: Optional[str]) -> None:
    if current_user_id and owner_id and owner_id != current_user_id:
        raise SessionOwnershipError()

# module boutique.checkout.reconciliation
def reconcile(session_id: str, current_user_id: Optional[str] = None) -> Order:
    """
    Confirme la session et retourne la commande correspondante (créée au premier appel).
    - PaymentNotConfirmed si payment_status != "paid" (aucune commande créée).
    - SessionOwnershipError si current_user_id est fourni et ne correspond pas au snapshot.
    - Rejouable sans limite: les appels suivants renvoient la même commande.
    """
    session_id = (session_id or "").strip()
    if not session_id:
        raise CheckoutError("session_id manquant")

    existing = orders_repository.find_by_session_id(session_id)
    if existing is not None:
        _check_owner(existing.user_id, current_user_id)
        return existing

    session = stripe_client.get_session(session_id)
    payment_status = session.get("payment_status") or ""
    if payment_status != PAID:
        logger.info("checkout.reconcile not paid session_id=%s payment_status=%s", session_id, payment_status)
        raise PaymentNotConfirmed(payment_status)

    snapshot = meta.snapshot_from_session(session)
    _check_owner(snapshot.user_id, current_user_id)

    if snapshot.applied_coupon_code:
        coupons_service.deactivate(snapshot.applied_coupon_code, snapshot.user_id)

    amount_total = session.get("amount_total")
    if amount_total is None:
        logger.warning("checkout.reconcile missing amount_total session_id=%s, using snapshot total", session_id)
    order = Order.from_snapshot(snapshot, amount_total=amount_total)

    try:
        created = orders_repository.insert_order(order)
    except DuplicateOrder:
        winner = orders_repository.find_by_session_id(session_id)
        if winner is None:
            raise StoreUnavailable()
        logger.info("checkout.reconcile duplicate resolved session_id=%s order_id=%s", session_id, winner.id)
        return winner
    logger.info("checkout.reconcile order created session_id=%s order_id=%s user_id=%s", session_id, created.id, created.user_id)
    return created
