"""Ledger purchase — POST /purchase happy path and every failure branch.

Invariants:
    - Success: item sold to buyer, newBalance = old balance - price
    - Price mismatch / insufficient funds / unknown item never mutate store or ledger
    - Purchasing a sold item fails with 409 ALREADY_SOLD
    - Balance never goes negative across a sequence of purchases
"""

from sqlalchemy import select

from marketplace.models.wallet_balance import WalletBalance

BASE = "/api/marketplace"
BUYER = "0xbuyer"


async def _balance(client, address=BUYER) -> str:
    res = await client.get(f"{BASE}/balance", params={"address": address})
    return res.json()["balance"]


async def test_purchase_success(client, seeded_catalog, upstream_down):
    assert await _balance(client) == "100.00"

    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": BUYER},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Item purchased successfully"
    assert body["newBalance"] == "60.00"
    assert body["item"]["sold"] is True
    assert body["item"]["buyer"] == BUYER
    assert body["item"]["status"] == "sold"

    assert await _balance(client) == "60.00"


async def test_purchase_initializes_default_balance_without_lookup(
    client, seeded_catalog, fake_chain,
):
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "2", "price": 30, "address": "0xnew"},
    )
    assert res.status_code == 200
    assert res.json()["newBalance"] == "70.00"
    assert fake_chain.calls == []


async def test_purchase_accepts_equivalent_decimal_price(client, seeded_catalog):
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40.00", "address": BUYER},
    )
    assert res.status_code == 200


async def test_price_mismatch_leaves_state_unchanged(
    client, seeded_catalog, upstream_down,
):
    before = await _balance(client)
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "39", "address": BUYER},
    )
    assert res.status_code == 400
    assert res.json() == {
        "error": "Please submit the asking price", "code": "PRICE_MISMATCH",
    }

    assert await _balance(client) == before
    item = (await client.get(f"{BASE}/items-detail/3")).json()["item"]
    assert item["sold"] is False
    assert item["buyer"] is None


async def test_price_mismatch_creates_no_ledger_entry(client, seeded_catalog, test_db):
    await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "39", "address": "0xnewcomer"},
    )
    entry = (await test_db.execute(
        select(WalletBalance).where(WalletBalance.address == "0xnewcomer"),
    )).scalar_one_or_none()
    assert entry is None


async def test_purchase_missing_fields_returns_400(client, seeded_catalog):
    res = await client.post(f"{BASE}/purchase", json={"itemId": "3", "price": "40"})
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields"


async def test_purchase_unknown_item_returns_404(client, seeded_catalog):
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "42", "price": "40", "address": BUYER},
    )
    assert res.status_code == 404
    assert res.json()["error"] == "Item not found"


async def test_purchase_already_sold_returns_409(client, seeded_catalog):
    first = await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": BUYER},
    )
    assert first.status_code == 200

    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": "0xother"},
    )
    assert res.status_code == 409
    assert res.json()["code"] == "ALREADY_SOLD"

    item = (await client.get(f"{BASE}/items-detail/3")).json()["item"]
    assert item["buyer"] == BUYER


async def test_second_buyer_not_charged_for_sold_item(client, seeded_catalog, upstream_down):
    await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": BUYER},
    )
    assert await _balance(client, "0xother") == "100.00"
    await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": "0xother"},
    )
    assert await _balance(client, "0xother") == "100.00"


async def test_insufficient_balance_leaves_item_listed(client, upstream_down):
    await client.post(
        f"{BASE}/items", json={"category": "golf", "name": "Cart", "price": "150"},
    )
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "1", "price": "150", "address": BUYER},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Insufficient balance", "code": "INSUFFICIENT_BALANCE"}

    item = (await client.get(f"{BASE}/items-detail/1")).json()["item"]
    assert item["status"] == "listed"
    assert await _balance(client) == "100.00"


async def test_balance_never_goes_negative(client, seeded_catalog, upstream_down):
    # 50 + 30 = 80 spent, the 40 bat no longer fits in the remaining 20
    results = []
    for item_id, price in (("1", "50"), ("2", "30"), ("3", "40")):
        res = await client.post(
            f"{BASE}/purchase",
            json={"itemId": item_id, "price": price, "address": BUYER},
        )
        results.append(res.status_code)
    assert results == [200, 200, 400]
    assert await _balance(client) == "20.00"


async def test_purchase_history_lists_bought_items(client, seeded_catalog):
    await client.post(
        f"{BASE}/purchase", json={"itemId": "1", "price": "50", "address": BUYER},
    )
    await client.post(
        f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": BUYER},
    )
    res = await client.get(f"{BASE}/purchases", params={"address": BUYER})
    assert [i["id"] for i in res.json()["items"]] == ["1", "3"]


async def test_purchase_history_requires_address(client):
    res = await client.get(f"{BASE}/purchases")
    assert res.status_code == 400


async def test_four_place_price_debited_exactly(client, test_db):
    created = (await client.post(
        f"{BASE}/items",
        json={"category": "golf", "name": "Tee", "price": "12.3456"},
    )).json()["item"]
    res = await client.post(
        f"{BASE}/purchase",
        json={"itemId": created["id"], "price": "12.3456", "address": BUYER},
    )
    assert res.status_code == 200
    assert res.json()["newBalance"] == "87.65"

    entry = (await test_db.execute(
        select(WalletBalance).where(WalletBalance.address == BUYER),
    )).scalar_one()
    assert entry.balance_units == 876_544


async def test_purchase_out_of_range_item_returns_404(client, seeded_catalog):
    res = await client.post(
        f"{BASE}/purchase", json={"itemId": "9" * 30, "price": "40", "address": BUYER},
    )
    assert res.status_code == 404
