"""
Module 'pricing': calcul pur des totaux du panier (centimes entiers).
Utilisé à l'identique par l'aperçu panier et par le snapshot de checkout.
"""
from .engine import (
    CartItem,
    PriceBreakdown,
    percentage_of,
    price,
    subtotal_of,
    to_major_units,
    to_minor_units,
)

__all__ = [
    "CartItem",
    "PriceBreakdown",
    "percentage_of",
    "price",
    "subtotal_of",
    "to_major_units",
    "to_minor_units",
]
