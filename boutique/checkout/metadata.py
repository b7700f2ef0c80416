"""
Sérialisation/désérialisation du snapshot de checkout dans les métadonnées Stripe.

Stripe limite chaque valeur de metadata à 500 caractères (50 clés max): la liste des
produits est donc découpée en products_0..products_n et recollée à la lecture.
"""
import json
from typing import Any, Dict, List

from pydantic import ValidationError

from boutique.checkout.models import CheckoutSessionSnapshot, SnapshotLine
from boutique.errors import PaymentProviderError

METADATA_VALUE_LIMIT = 500
MAX_PRODUCT_CHUNKS = 40

# module boutique.checkout.metadata
def snapshot_to_metadata(snapshot: CheckoutSessionSnapshot) -> Dict[str, str]:
    """
    Metadata Stripe: user_id, coupon_code ("" si aucun), total (centimes) et products_*.
    - products: JSON compact [{"id", "quantity", "price"}] (prix unitaires avant remise, centimes).
    """
    products = json.dumps(
        [{"id": li.product_id, "quantity": li.quantity, "price": li.unit_price} for li in snapshot.line_items],
        separators=(",", ":"),
    )
    chunks = [products[i:i + METADATA_VALUE_LIMIT] for i in range(0, len(products), METADATA_VALUE_LIMIT)]
    if len(chunks) > MAX_PRODUCT_CHUNKS:
        raise ValueError(f"Panier trop volumineux pour les metadata ({len(products)} caractères)")
    metadata = {
        "user_id": snapshot.user_id,
        "coupon_code": snapshot.applied_coupon_code or "",
        "total": str(snapshot.computed_total),
        "products_chunks": str(len(chunks)),
    }
    for i, chunk in enumerate(chunks):
        metadata[f"products_{i}"] = chunk
    return metadata

def snapshot_from_metadata(metadata: Dict[str, Any], session_id: str) -> CheckoutSessionSnapshot:
    """Reconstruit le snapshot; PaymentProviderError si l'enveloppe est absente ou corrompue."""
    meta = metadata or {}
    try:
        count = int(meta.get("products_chunks") or 0)
        raw = "".join(str(meta[f"products_{i}"]) for i in range(count))
        products: List[Dict[str, Any]] = json.loads(raw) if raw else []
        return CheckoutSessionSnapshot(
            external_session_id=session_id,
            line_items=[
                SnapshotLine(product_id=str(p["id"]), quantity=int(p["quantity"]), unit_price=int(p["price"]))
                for p in products
            ],
            user_id=str(meta.get("user_id") or ""),
            applied_coupon_code=(meta.get("coupon_code") or None),
            computed_total=int(meta.get("total") or 0),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise PaymentProviderError(f"Metadata de session invalides ({session_id})") from e

def snapshot_from_session(session: Dict[str, Any]) -> CheckoutSessionSnapshot:
    """Extrait le snapshot depuis une session Stripe Checkout (lecture directe)."""
    session = session or {}
    snapshot = snapshot_from_metadata(session.get("metadata") or {}, str(session.get("id") or ""))
    if not snapshot.user_id or not snapshot.line_items:
        raise PaymentProviderError(f"Metadata de session incomplètes ({session.get('id')})")
    return snapshot
