"""
Lecture du catalogue (table products) au moment du checkout.
- Les prix renvoyés sont ceux de la base: le client ne fournit jamais de prix de confiance.
"""
from typing import Any, Dict, Iterable, List
import logging

import boutique.infra.supabase_client as supabase_client
from boutique.errors import StoreUnavailable

logger = logging.getLogger(__name__)

# module boutique.catalog.repository
def fetch_products_by_ids(ids: List[str]) -> List[Dict[str, Any]]:
    """Produits {id, name, price, image} pour les ids donnés ([] si ids vide)."""
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("id, name, price, image")
            .in_("id", [str(i) for i in ids])
            .execute()
        )
    except Exception as e:
        logger.exception("catalog.repository.fetch_products_by_ids failed ids=%s", ids)
        raise StoreUnavailable() from e
    return res.data or []

def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit}."""
    products = fetch_products_by_ids(list(ids))
    return {str(p.get("id")): p for p in products}
