"""
Registre des commandes (table orders, client service-role).
- orders.stripe_session_id est UNIQUE: c'est la clé d'idempotence de la réconciliation.
- insert_order lève DuplicateOrder sur conflit d'unicité (code Postgres 23505), que
  l'appelant résout en relisant la commande gagnante.
"""
from typing import List, Optional
import logging

from postgrest.exceptions import APIError

import boutique.infra.supabase_client as supabase_client
from boutique.errors import DuplicateOrder, StoreUnavailable
from boutique.orders.models import Order

logger = logging.getLogger(__name__)

TABLE = "orders"
UNIQUE_VIOLATION = "23505"

# module boutique.orders.repository
def find_by_session_id(session_id: str) -> Optional[Order]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("stripe_session_id", session_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.find_by_session_id failed session_id=%s", session_id)
        raise StoreUnavailable() from e
    rows = res.data or []
    return Order.from_row(rows[0]) if rows else None

def insert_order(order: Order) -> Order:
    """Insert conditionnel (contrainte unique sur la session)."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .insert(order.to_row())
            .execute()
        )
    except APIError as e:
        if getattr(e, "code", None) == UNIQUE_VIOLATION:
            raise DuplicateOrder(order.external_session_id) from e
        logger.exception("orders.repository.insert_order failed session_id=%s", order.external_session_id)
        raise StoreUnavailable() from e
    except Exception as e:
        logger.exception("orders.repository.insert_order failed session_id=%s", order.external_session_id)
        raise StoreUnavailable() from e
    rows = res.data or []
    return Order.from_row(rows[0]) if rows else order

def list_user_orders(user_id: str, limit: int = 50) -> List[Order]:
    """Commandes de l'utilisateur, les plus récentes d'abord."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        raise StoreUnavailable() from e
    return [Order.from_row(r) for r in res.data or []]
