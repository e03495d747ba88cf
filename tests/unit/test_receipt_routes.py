import pytest


@pytest.fixture
def seller(auth_headers):
    return auth_headers("seller1")


@pytest.fixture
def buyer(auth_headers):
    return auth_headers("buyer1")


def _create(client, headers, **payload):
    return client.post("/receipts", json=payload, headers=headers)


def test_requires_token(client):
    res = client.get("/receipts")
    assert res.status_code == 401
    assert res.get_json()["status"] is False


def test_seller_receipt_appears_for_buyer(client, seller, buyer):
    res = _create(client, seller, buyerId="buyer1", amount=25.99, currency="gbp", storeName="Mama's Kitchen")
    assert res.status_code == 201
    original = res.get_json()["data"]["receipt"]
    assert original["userId"] == "seller1"
    assert original["isBuyerCopy"] is False
    assert original["currency"] == "GBP"

    items = client.get("/receipts", headers=buyer).get_json()["data"]["items"]
    assert len(items) == 1
    copy = items[0]
    assert copy["userId"] == "buyer1"
    assert copy["isBuyerCopy"] is True
    assert copy["originalReceiptId"] == original["id"]
    assert copy["amount"] == 25.99
    assert copy["storeName"] == "Mama's Kitchen"

    # the seller still sees only their own record
    seller_items = client.get("/receipts", headers=seller).get_json()["data"]["items"]
    assert [r["id"] for r in seller_items] == [original["id"]]


def test_buyer_cannot_read_seller_original(client, seller, buyer):
    rid = _create(client, seller, buyerId="buyer1").get_json()["data"]["receipt"]["id"]
    assert client.get(f"/receipts/{rid}", headers=buyer).status_code == 404
    assert client.get(f"/receipts/{rid}", headers=seller).status_code == 200


def test_same_party_gets_no_copy(client, seller):
    _create(client, seller, buyerId="seller1", amount=5)
    items = client.get("/receipts", headers=seller).get_json()["data"]["items"]
    assert len(items) == 1


def test_unknown_fields_are_kept(client, seller):
    res = _create(client, seller, buyerId="buyer1", deliveryNote="leave at door")
    assert res.get_json()["data"]["receipt"]["deliveryNote"] == "leave at door"


@pytest.mark.parametrize("payload, status", [
    ({"isBuyerCopy": True}, 422),
    ({"originalReceiptId": "r1"}, 422),
    ({"amount": "lots"}, 422),
    ({"amount": "1e30"}, 422),
    ({"amount": 12345678901}, 422),
    ({"currency": "pounds"}, 422),
    ({"currency": "G1P"}, 422),
    ({"currency": 826}, 422),
    ({"userId": "someone-else"}, 403),
])
def test_rejected_payloads(client, seller, payload, status):
    res = _create(client, seller, **payload)
    assert res.status_code == status
    assert res.get_json()["status"] is False


def test_list_is_newest_first_and_paginated(client, seller):
    ids = [_create(client, seller, orderId=str(i)).get_json()["data"]["receipt"]["id"] for i in range(3)]

    data = client.get("/receipts?per_page=2", headers=seller).get_json()["data"]
    assert data["total"] == 3
    assert len(data["items"]) == 2
    assert {r["id"] for r in data["items"]} <= set(ids)

    data = client.get("/receipts?page=2&per_page=2", headers=seller).get_json()["data"]
    assert len(data["items"]) == 1


def test_filter_by_store(client, seller):
    _create(client, seller, storeId="s1")
    _create(client, seller, storeId="s2")
    items = client.get("/receipts?store_id=s2", headers=seller).get_json()["data"]["items"]
    assert [r["storeId"] for r in items] == ["s2"]


def test_bad_date_filter(client, seller):
    assert client.get("/receipts?start=yesterday", headers=seller).status_code == 400


def test_largest_amount_that_fits(client, seller):
    res = _create(client, seller, amount="9999999999.99", currency="eur")
    assert res.status_code == 201
    receipt = res.get_json()["data"]["receipt"]
    assert receipt["amount"] == 9999999999.99
    assert receipt["currency"] == "EUR"
