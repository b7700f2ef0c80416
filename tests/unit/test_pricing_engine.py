from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from boutique.coupons.models import Coupon
from boutique.pricing import CartItem, percentage_of, price, to_major_units, to_minor_units

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

def _coupon(pct=10, active=True, expires=NOW + timedelta(days=1)):
    return Coupon(code="GIFTTEST", discount_percentage=pct, expiration_date=expires, user_id="u1", is_active=active)

def test_no_coupon_total_equals_subtotal():
    cart = [CartItem(product_id="a", quantity=2, unit_price=5000)]
    result = price(cart)
    assert result.subtotal == 10000
    assert result.total == 10000
    assert result.discount == 0
    assert result.coupon_applied is False

def test_ten_percent_coupon_applied():
    cart = [CartItem(product_id="a", quantity=2, unit_price=5000)]
    result = price(cart, coupon=_coupon(10), coupon_applied=True, now=NOW)
    assert result.total == 9000
    assert result.discount == 1000
    assert result.coupon_applied is True

def test_coupon_ignored_when_not_applied():
    cart = [CartItem(product_id="a", quantity=1, unit_price=5000)]
    assert price(cart, coupon=_coupon(10), coupon_applied=False, now=NOW).total == 5000

@pytest.mark.parametrize("coupon", [
    _coupon(10, active=False),
    _coupon(10, expires=NOW - timedelta(seconds=1)),
    _coupon(10, expires=NOW),  # valide seulement si now < expiration
    _coupon(150),
])
def test_invalid_coupon_gives_no_discount(coupon):
    cart = [CartItem(product_id="a", quantity=1, unit_price=4000)]
    assert price(cart, coupon=coupon, coupon_applied=True, now=NOW).total == 4000

def test_discount_rounds_half_up():
    # 1005 * 10% = 100.5 -> 101
    cart = [CartItem(product_id="a", quantity=1, unit_price=1005)]
    result = price(cart, coupon=_coupon(10), coupon_applied=True, now=NOW)
    assert result.discount == 101
    assert result.total == 904

@pytest.mark.parametrize("pct", [0, 1, 7, 33, 50, 99, 100])
def test_total_bounded_by_subtotal(pct):
    cart = [
        CartItem(product_id="a", quantity=3, unit_price=1999),
        CartItem(product_id="b", quantity=1, unit_price=1),
    ]
    result = price(cart, coupon=_coupon(pct), coupon_applied=True, now=NOW)
    assert result.total == result.subtotal - percentage_of(result.subtotal, pct)
    assert 0 <= result.total <= result.subtotal

def test_empty_cart_prices_to_zero():
    assert price([]).total == 0

def test_quantity_must_be_positive():
    with pytest.raises(ValueError):
        CartItem(product_id="a", quantity=0, unit_price=100)

def test_minor_major_conversions():
    assert to_minor_units("19.99") == 1999
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(0.1 + 0.2) == 30
    assert to_minor_units(200) == 20000
    assert to_major_units(9000) == Decimal("90.00")
    with pytest.raises(ValueError):
        to_minor_units("abc")

def test_public_view_in_major_units():
    cart = [CartItem(product_id="a", quantity=2, unit_price=5000)]
    view = price(cart, coupon=_coupon(10), coupon_applied=True, now=NOW).to_public()
    assert view == {
        "subtotal": Decimal("100.00"),
        "discount": Decimal("10.00"),
        "total": Decimal("90.00"),
        "couponApplied": True,
    }
