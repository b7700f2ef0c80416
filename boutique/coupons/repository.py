"""
Accès aux données 'coupons' (table coupons, client service-role).
- La contrainte unique sur coupons.user_id garantit au plus un coupon par utilisateur:
  le remplacement d'un coupon est un upsert unique (atomique côté Postgres).
- Les échecs du store sont journalisés puis remontés en StoreUnavailable (rejouable).
"""
from typing import Any, Dict, Optional
import logging

import boutique.infra.supabase_client as supabase_client
from boutique.errors import StoreUnavailable

logger = logging.getLogger(__name__)

TABLE = "coupons"

# module boutique.coupons.repository
def find_active_coupon(code: str, user_id: str) -> Optional[Dict[str, Any]]:
    """Coupon {code, user_id, is_active=true} ou None (l'expiration est évaluée par le service)."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("code", code)
            .eq("user_id", user_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("coupons.repository.find_active_coupon failed code=%s user_id=%s", code, user_id)
        raise StoreUnavailable() from e
    rows = res.data or []
    return rows[0] if rows else None

def find_active_coupon_for_user(user_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("coupons.repository.find_active_coupon_for_user failed user_id=%s", user_id)
        raise StoreUnavailable() from e
    rows = res.data or []
    return rows[0] if rows else None

def replace_user_coupon(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remplace (ou crée) le coupon de row['user_id'] en une seule instruction.
    - upsert on_conflict=user_id: jamais d'état intermédiaire sans coupon ou avec deux coupons.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .upsert(row, on_conflict="user_id")
            .execute()
        )
    except Exception as e:
        logger.exception("coupons.repository.replace_user_coupon failed user_id=%s", row.get("user_id"))
        raise StoreUnavailable() from e
    rows = res.data or []
    return rows[0] if rows else row

def deactivate_coupon(code: str, user_id: str) -> int:
    """
    Passe is_active à false pour (code, user_id). Retourne le nombre de lignes modifiées.
    - Filtre is_active=true: la transition est monotone et un second appel ne modifie rien.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .update({"is_active": False})
            .eq("code", code)
            .eq("user_id", user_id)
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.exception("coupons.repository.deactivate_coupon failed code=%s user_id=%s", code, user_id)
        raise StoreUnavailable() from e
    return len(res.data or [])
