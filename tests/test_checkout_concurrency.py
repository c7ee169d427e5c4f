import asyncio
import pytest
from tests.helpers import (CHECKOUT_PAYLOAD, add_line, auth_headers, create_product, create_user, order_items_count,
                           orders_count, principal_for, product_stock, url_prefix)


@pytest.mark.asyncio
async def test_concurrent_checkouts_for_last_unit(ac_client):
    """
    Five users hold the last unit of the same product in their carts and
    check out at the same moment. Exactly one order is placed, the rest get
    409 and stock never goes negative.
    """
    product = await create_product(name="Last One", price=999, stock=1)
    users = [await create_user(email=f"buyer{i}@example.com") for i in range(5)]
    for u in users:
        await add_line(principal_for(u), product.id, 1)

    results = await asyncio.gather(*[
        ac_client.post(f"{url_prefix}/orders", json=CHECKOUT_PAYLOAD, headers=auth_headers(u)) for u in users
    ])

    codes = sorted(r.status_code for r in results)
    assert codes == [201, 409, 409, 409, 409], [r.text for r in results]
    for r in results:
        if r.status_code == 409:
            assert r.json()["error"] == "Insufficient stock for Last One"

    assert await product_stock(product.id) == 0
    assert await orders_count() == 1
    assert await order_items_count() == 1


@pytest.mark.asyncio
async def test_concurrent_checkouts_share_remaining_stock(ac_client):
    product = await create_product(name="Batch", price=100, stock=5)
    users = [await create_user(email=f"split{i}@example.com") for i in range(3)]
    for u in users:
        await add_line(principal_for(u), product.id, 2)

    results = await asyncio.gather(*[
        ac_client.post(f"{url_prefix}/orders", json=CHECKOUT_PAYLOAD, headers=auth_headers(u)) for u in users
    ])

    assert sorted(r.status_code for r in results) == [201, 201, 409]
    assert await product_stock(product.id) == 1
    assert await orders_count() == 2
