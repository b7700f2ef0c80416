from fastapi import HTTPException

from boutique.utils.security import require_user

def test_create_session_unauthenticated(client, shop):
    client.app.dependency_overrides[require_user] = lambda: (_ for _ in ()).throw(HTTPException(status_code=401, detail="Non authentifié"))
    try:
        res = client.post("/api/v1/checkout/session", json={"products": [{"id": "p1", "quantity": 1}]})
        assert res.status_code == 401
    finally:
        client.app.dependency_overrides.pop(require_user, None)

def test_create_session(client, shop):
    res = client.post("/api/v1/checkout/session", json={"products": [{"id": "p1", "quantity": 2}]})
    assert res.status_code == 200
    body = res.json()
    assert body["sessionId"] == "cs_test_1"
    assert float(body["totalAmount"]) == 100.0

def test_create_session_empty_cart(client, shop):
    res = client.post("/api/v1/checkout/session", json={"products": []})
    assert res.status_code == 400
    assert res.json()["code"] == "empty_cart"

def test_create_session_products_not_a_list(client, shop):
    res = client.post("/api/v1/checkout/session", json={"products": "p1"})
    assert res.status_code == 400
    assert res.json()["code"] == "empty_cart"

def test_provider_down_is_502(client, shop):
    shop["stripe"].fail = True
    res = client.post("/api/v1/checkout/session", json={"products": [{"id": "p1", "quantity": 1}]})
    assert res.status_code == 502
    assert res.json()["code"] == "payment_provider_error"

def test_preview(client, shop):
    shop["coupons"].add("GIFTAAAA", user_id="user-1", discount_percentage=10)
    res = client.post("/api/v1/checkout/preview", json={"products": [{"id": "p1", "quantity": 2}], "couponCode": "GIFTAAAA"})
    assert res.status_code == 200
    body = res.json()
    assert float(body["subtotal"]) == 100.0
    assert float(body["total"]) == 90.0
    assert body["couponApplied"] is True
    assert shop["stripe"].sessions == {}

def test_full_checkout_flow(client, shop):
    shop["coupons"].add("GIFTAAAA", user_id="user-1", discount_percentage=10)
    res = client.post("/api/v1/checkout/session", json={"products": [{"id": "p2", "quantity": 2}], "couponCode": "GIFTAAAA"})
    assert res.status_code == 200
    session_id = res.json()["sessionId"]
    assert float(res.json()["totalAmount"]) == 225.0

    # seuil atteint (25000 avant remise): un seul coupon actif, le nouveau coupon cadeau
    active = shop["coupons"].active_for("user-1")
    assert len(active) == 1 and active[0]["discount_percentage"] == 10

    # paiement pas encore confirmé
    res = client.post("/api/v1/checkout/confirm", json={"sessionId": session_id})
    assert res.status_code == 409
    assert res.json()["code"] == "payment_not_confirmed"
    assert res.json()["payment_status"] == "unpaid"

    shop["stripe"].pay(session_id)
    first = client.post("/api/v1/checkout/confirm", json={"sessionId": session_id})
    again = client.post("/api/v1/checkout/confirm", json={"sessionId": session_id})
    assert first.status_code == 200 and again.status_code == 200
    assert first.json()["success"] is True
    assert first.json()["orderId"] == again.json()["orderId"]
    assert float(first.json()["order"]["totalAmount"]) == 225.0
    assert len(shop["orders"].orders) == 1

    res = client.get("/api/v1/orders")
    assert [o["id"] for o in res.json()["orders"]] == [first.json()["orderId"]]

def test_confirm_missing_session_id(client, shop):
    res = client.post("/api/v1/checkout/confirm", json={})
    assert res.status_code == 400

def test_confirm_other_users_session(client, shop):
    from boutique.checkout import service as checkout_service
    result = checkout_service.build_session("someone-else", [{"id": "p1", "quantity": 1}])
    shop["stripe"].pay(result["sessionId"])
    res = client.post("/api/v1/checkout/confirm", json={"sessionId": result["sessionId"]})
    assert res.status_code == 403
    assert shop["orders"].orders == {}

def test_gift_coupon_visible_after_checkout(client, shop):
    client.post("/api/v1/checkout/session", json={"products": [{"id": "p2", "quantity": 2}]})
    res = client.get("/api/v1/coupons")
    assert res.status_code == 200
    assert res.json()["discountPercentage"] == 10
    assert res.json()["isActive"] is True
