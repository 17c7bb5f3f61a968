"""Concurrent purchases — exactly one buyer wins a contested item.

Invariants:
    - Two simultaneous purchases of one item: one 200, one 409 ALREADY_SOLD
    - Only the winner is debited
"""

import asyncio

BASE = "/api/marketplace"


async def test_two_buyers_one_item(client, seeded_catalog, upstream_down):
    buyers = ["0xalice", "0xbob"]
    responses = await asyncio.gather(*[
        client.post(
            f"{BASE}/purchase", json={"itemId": "3", "price": "40", "address": b},
        )
        for b in buyers
    ])
    codes = sorted(r.status_code for r in responses)
    assert codes == [200, 409]

    winner = next(b for b, r in zip(buyers, responses) if r.status_code == 200)
    loser = next(b for b in buyers if b != winner)

    item = (await client.get(f"{BASE}/items-detail/3")).json()["item"]
    assert item["buyer"] == winner

    balances = {}
    for b in buyers:
        res = await client.get(f"{BASE}/balance", params={"address": b})
        balances[b] = res.json()["balance"]
    assert balances[winner] == "60.00"
    assert balances[loser] == "100.00"


async def test_many_buyers_one_item(client, seeded_catalog):
    responses = await asyncio.gather(*[
        client.post(
            f"{BASE}/purchase",
            json={"itemId": "1", "price": "50", "address": f"0xbuyer{i}"},
        )
        for i in range(5)
    ])
    assert [r.status_code for r in responses].count(200) == 1
    assert [r.status_code for r in responses].count(409) == 4


async def test_ledger_and_chain_paths_race(client, seeded_catalog):
    responses = await asyncio.gather(
        client.post(
            f"{BASE}/purchase", json={"itemId": "2", "price": "30", "address": "0xledger"},
        ),
        client.post(
            f"{BASE}/purchase-complete",
            json={"itemId": "2", "transactionHash": "0xtx", "buyer": "0xchain"},
        ),
    )
    assert sorted(r.status_code for r in responses) == [200, 409]
