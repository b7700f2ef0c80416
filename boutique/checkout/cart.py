"""
Logique panier pure (pas de Stripe, pas de DB).
"""
from typing import Any, Dict, List
import logging

from boutique.errors import EmptyCart
from boutique.pricing import CartItem, to_minor_units

logger = logging.getLogger(__name__)

# module boutique.checkout.cart
def _product_id(entry: Dict[str, Any]) -> str:
    return str(entry.get("id") or entry.get("_id") or entry.get("productId") or "").strip()

def aggregate_quantities(products: Any) -> Dict[str, int]:
    """
    Agrège un panier brut [{id, quantity}, ...] en {product_id: total_quantity}.
    - Conserve l'ordre de première apparition des produits.
    - Ignore les lignes invalides (id vide, quantity <= 0 ou non numérique).
    - Les prix éventuellement envoyés par le client sont ignorés.
    - Lève EmptyCart si le payload n'est pas une liste ou si aucune ligne n'est valide.
    """
    if not isinstance(products, list) or not products:
        raise EmptyCart()
    quantities: Dict[str, int] = {}
    for entry in products:
        if not isinstance(entry, dict):
            continue
        product_id = _product_id(entry)
        raw_qty = entry.get("quantity")
        try:
            qty = 1 if raw_qty is None else int(raw_qty)
        except (TypeError, ValueError):
            continue
        if not product_id or qty <= 0:
            continue
        quantities[product_id] = quantities.get(product_id, 0) + qty
    if not quantities:
        raise EmptyCart()
    return quantities

def unit_price_of(product: Dict[str, Any]) -> int:
    """Prix catalogue en centimes; 0 si absent ou illisible."""
    try:
        return to_minor_units(product.get("price") or 0)
    except ValueError:
        return 0

def build_cart_items(products_by_id: Dict[str, Dict[str, Any]], quantities: Dict[str, int]) -> List[CartItem]:
    """
    Construit les CartItem à partir des prix catalogue courants.
    - Ignore (avec log) les produits introuvables ou sans prix valide.
    - Lève EmptyCart si aucun article n'est facturable.
    """
    items: List[CartItem] = []
    for product_id, qty in quantities.items():
        product = products_by_id.get(product_id)
        if not product:
            logger.warning("checkout.cart unknown product_id=%s", product_id)
            continue
        unit_price = unit_price_of(product)
        if unit_price <= 0:
            logger.warning("checkout.cart invalid price product_id=%s price=%r", product_id, product.get("price"))
            continue
        items.append(CartItem(product_id=product_id, quantity=qty, unit_price=unit_price))
    if not items:
        raise EmptyCart("Aucun article valide")
    return items

def to_line_items(items: List[CartItem], products_by_id: Dict[str, Dict[str, Any]], currency: str) -> List[Dict[str, Any]]:
    """
    Lignes Stripe Checkout (price_data) à partir des CartItem.
    - unit_amount en centimes, product_data.name/images depuis le catalogue.
    """
    line_items: List[Dict[str, Any]] = []
    for item in items:
        product = products_by_id.get(item.product_id) or {}
        product_data: Dict[str, Any] = {"name": product.get("name") or "Article"}
        if product.get("image"):
            product_data["images"] = [product["image"]]
        line_items.append({
            "quantity": item.quantity,
            "price_data": {
                "currency": currency,
                "unit_amount": item.unit_price,
                "product_data": product_data,
            },
        })
    return line_items
