import pytest
from sqlalchemy.exc import IntegrityError
from storefront.cart.services import add_item, clear, list_items, remove_item, set_quantity
from storefront.common.custom_exceptions import InvalidInput, NotFound
from storefront.db.connection import async_session
from storefront.schema.full_schema import CartLine
from tests.helpers import (add_line, auth_headers, cart_lines, create_product, create_user, create_variant, guest,
                           principal_for, url_prefix)


@pytest.mark.asyncio
async def test_add_same_product_twice_keeps_one_line():
    product = await create_product(price=500, stock=10)
    user = await create_user()
    me = principal_for(user)

    await add_line(me, product.id, 2)
    await add_line(me, product.id, 3)

    lines = await cart_lines(user_id=user.id)
    assert len(lines) == 1
    assert lines[0].quantity == 5


@pytest.mark.asyncio
async def test_no_variant_and_variant_are_distinct_lines():
    product = await create_product()
    variant = await create_variant(product.id, value="XL")
    shopper = guest("g-distinct")

    await add_line(shopper, product.id, 1)
    await add_line(shopper, product.id, 1, variant_id=variant.id)
    await add_line(shopper, product.id, 1)

    lines = await cart_lines(guest_token="g-distinct")
    assert sorted((l.variant_id, l.quantity) for l in lines) == sorted([(None, 2), (variant.id, 1)])


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_null_variant_line():
    product = await create_product()
    user = await create_user()

    async with async_session() as s:
        s.add(CartLine(user_id=user.id, product_id=product.id, quantity=1))
        await s.commit()

    with pytest.raises(IntegrityError):
        async with async_session() as s:
            s.add(CartLine(user_id=user.id, product_id=product.id, quantity=1))
            await s.commit()


@pytest.mark.asyncio
async def test_variant_of_other_product_is_rejected():
    p1 = await create_product(name="Shirt")
    p2 = await create_product(name="Mug")
    foreign = await create_variant(p2.id)

    with pytest.raises(InvalidInput) as ei:
        await add_line(guest(), p1.id, 1, variant_id=foreign.id)
    assert ei.value.detail == "Variant does not belong to product"
    assert await cart_lines(guest_token="guest-token-1") == []


@pytest.mark.asyncio
async def test_inactive_product_and_missing_product_rejected():
    inactive = await create_product(is_active=False)

    with pytest.raises(InvalidInput):
        await add_line(guest(), inactive.id, 1)
    with pytest.raises(InvalidInput):
        await add_line(guest(), 9999, 1)


@pytest.mark.asyncio
async def test_zero_quantity_rejected():
    product = await create_product()
    async with async_session() as s:
        with pytest.raises(InvalidInput) as ei:
            await add_item(s, guest(), product.id, None, 0)
    assert ei.value.detail == "Quantity must be at least 1"


@pytest.mark.asyncio
async def test_set_quantity_checks_live_stock():
    product = await create_product(stock=3)
    user = await create_user()
    me = principal_for(user)
    await add_line(me, product.id, 1)
    line_id = (await cart_lines(user_id=user.id))[0].id

    async with async_session() as s:
        with pytest.raises(InvalidInput) as ei:
            await set_quantity(s, me, line_id, 4)
    assert ei.value.detail == "Only 3 items available"

    async with async_session() as s:
        res = await set_quantity(s, me, line_id, 3)
    assert res == {"id": line_id, "quantity": 3}
    assert (await cart_lines(user_id=user.id))[0].quantity == 3


@pytest.mark.asyncio
async def test_set_quantity_uses_variant_stock():
    product = await create_product(stock=100)
    variant = await create_variant(product.id, stock=2)
    shopper = guest("g-variant-stock")
    await add_line(shopper, product.id, 1, variant_id=variant.id)
    line_id = (await cart_lines(guest_token="g-variant-stock"))[0].id

    async with async_session() as s:
        with pytest.raises(InvalidInput):
            await set_quantity(s, shopper, line_id, 3)


@pytest.mark.asyncio
async def test_other_owner_cannot_touch_line():
    product = await create_product()
    owner = await create_user(email="owner@example.com")
    other = await create_user(email="other@example.com")
    await add_line(principal_for(owner), product.id, 2)
    line_id = (await cart_lines(user_id=owner.id))[0].id

    async with async_session() as s:
        with pytest.raises(NotFound):
            await set_quantity(s, principal_for(other), line_id, 1)

    async with async_session() as s:
        assert await remove_item(s, principal_for(other), line_id) is False
    assert (await cart_lines(user_id=owner.id))[0].quantity == 2


@pytest.mark.asyncio
async def test_remove_is_idempotent():
    product = await create_product()
    shopper = guest("g-remove")
    await add_line(shopper, product.id, 1)
    line_id = (await cart_lines(guest_token="g-remove"))[0].id

    async with async_session() as s:
        assert await remove_item(s, shopper, line_id) is True
    async with async_session() as s:
        assert await remove_item(s, shopper, line_id) is False


@pytest.mark.asyncio
async def test_list_items_prices_with_variant_modifier():
    shirt = await create_product(name="Shirt", price=500)
    xl = await create_variant(shirt.id, value="XL", price_modifier=50)
    mug = await create_product(name="Mug", price=200)
    shopper = guest("g-list")
    await add_line(shopper, shirt.id, 2, variant_id=xl.id)
    await add_line(shopper, mug.id, 3)

    async with async_session() as s:
        cart = await list_items(s, shopper)

    assert cart["subtotal"] == 2 * 550 + 3 * 200
    assert cart["item_count"] == 5
    first = cart["items"][0]
    assert first["unit_price"] == 550
    assert first["line_total"] == 1100
    assert first["variant_value"] == "XL"


@pytest.mark.asyncio
async def test_clear_only_touches_own_cart():
    product = await create_product()
    await add_line(guest("g-a"), product.id, 1)
    await add_line(guest("g-b"), product.id, 1)

    async with async_session() as s:
        assert await clear(s, guest("g-a")) == 1
    assert await cart_lines(guest_token="g-a") == []
    assert len(await cart_lines(guest_token="g-b")) == 1


# ---- over http ------------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_guest_cookie_minted_on_first_cart_call(ac_client):
    resp = await ac_client.get(f"{url_prefix}/cart")
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"success": True, "data": {"items": [], "subtotal": 0, "item_count": 0}}
    assert "guest_session_id=" in resp.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_existing_guest_cookie_is_reused(ac_client):
    product = await create_product(price=120)
    cookie = {"Cookie": "guest_session_id=fixed-guest-token"}

    resp = await ac_client.post(f"{url_prefix}/cart", json={"product_id": product.id, "quantity": 2}, headers=cookie)
    assert resp.status_code == 201, resp.text
    assert "guest_session_id=" not in resp.headers.get("set-cookie", "")

    resp = await ac_client.post(f"{url_prefix}/cart", json={"product_id": product.id, "quantity": 1}, headers=cookie)
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["quantity"] == 3
    assert resp.json()["data"]["created"] is False

    lines = await cart_lines(guest_token="fixed-guest-token")
    assert [(l.product_id, l.quantity) for l in lines] == [(product.id, 3)]


@pytest.mark.asyncio
async def test_http_zero_quantity_is_400(ac_client):
    product = await create_product()
    resp = await ac_client.post(f"{url_prefix}/cart", json={"product_id": product.id, "quantity": 0},
                                headers={"Cookie": "guest_session_id=g-zero"})
    assert resp.status_code == 400, resp.text
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_http_update_and_remove_line(ac_client):
    product = await create_product(stock=5)
    user = await create_user()
    headers = auth_headers(user)

    resp = await ac_client.post(f"{url_prefix}/cart", json={"product_id": product.id}, headers=headers)
    assert resp.status_code == 201, resp.text
    line_id = resp.json()["data"]["id"]

    resp = await ac_client.put(f"{url_prefix}/cart/{line_id}", json={"quantity": 6}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Only 5 items available"

    resp = await ac_client.put(f"{url_prefix}/cart/{line_id}", json={"quantity": 4}, headers=headers)
    assert resp.status_code == 200, resp.text

    resp = await ac_client.put(f"{url_prefix}/cart/999", json={"quantity": 1}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Cart item not found"

    resp = await ac_client.delete(f"{url_prefix}/cart/{line_id}", headers=headers)
    assert resp.status_code == 200
    resp = await ac_client.delete(f"{url_prefix}/cart/{line_id}", headers=headers)
    assert resp.status_code == 200
    assert await cart_lines(user_id=user.id) == []
