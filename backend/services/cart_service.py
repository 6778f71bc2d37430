from schemas import CartLineResponse, CartResponse
from services.cart_store import Cart, CartStore, add_item, cart_totals, remove_item, set_quantity
from services.catalog_service import get_orderable_item


def format_cart(cart: Cart) -> CartResponse:
    totals = cart_totals(cart)
    return CartResponse(
        vendor_id=cart.vendor_id,
        vendor_name=cart.vendor_name,
        items=[
            CartLineResponse(
                menu_item_id=line.menu_item_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                total_price=line.total_price,
            )
            for line in cart.lines
        ],
        item_count=totals.item_count,
        subtotal=totals.subtotal,
    )


async def add_to_cart(client, store: CartStore, key: str, menu_item_id: str) -> CartResponse:
    found = await get_orderable_item(client, menu_item_id)
    vendor = found["vendor"]
    cart = store.dispatch(
        key,
        add_item,
        found["item"],
        str(vendor["id"]),
        vendor.get("business_name"),
    )
    return format_cart(cart)


def change_quantity(store: CartStore, key: str, menu_item_id: str, quantity: int) -> CartResponse:
    if store.get(key).find(menu_item_id) is None:
        raise ValueError("Item not in cart")
    return format_cart(store.dispatch(key, set_quantity, menu_item_id, quantity))


def drop_item(store: CartStore, key: str, menu_item_id: str) -> CartResponse:
    return format_cart(store.dispatch(key, remove_item, menu_item_id))
