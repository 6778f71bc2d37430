import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Tuple

from constants import MAX_LINE_QUANTITY


@dataclass(frozen=True)
class CartLine:
    menu_item_id: str
    name: str
    unit_price: int
    quantity: int = 1

    @property
    def total_price(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Cart:
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    lines: Tuple[CartLine, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, menu_item_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.menu_item_id == menu_item_id:
                return line
        return None


@dataclass(frozen=True)
class CartTotals:
    item_count: int
    subtotal: int


EMPTY_CART = Cart()


def _cap(quantity: int) -> int:
    return min(quantity, MAX_LINE_QUANTITY)


def _with_lines(cart: Cart, lines: Tuple[CartLine, ...]) -> Cart:
    if not lines:
        return EMPTY_CART
    return replace(cart, lines=lines)


def add_item(
    cart: Cart,
    item: Dict[str, Any],
    vendor_id: str,
    vendor_name: Optional[str] = None,
) -> Cart:
    line = CartLine(
        menu_item_id=str(item["id"]),
        name=str(item.get("name") or ""),
        unit_price=int(float(item.get("price") or 0)),
    )
    if cart.vendor_id and cart.vendor_id != vendor_id:
        return Cart(vendor_id=vendor_id, vendor_name=vendor_name, lines=(line,))

    existing = cart.find(line.menu_item_id)
    if existing:
        lines = tuple(
            replace(current, quantity=_cap(current.quantity + 1))
            if current.menu_item_id == line.menu_item_id
            else current
            for current in cart.lines
        )
        return replace(cart, lines=lines)

    return Cart(vendor_id=vendor_id, vendor_name=vendor_name, lines=cart.lines + (line,))


def remove_item(cart: Cart, menu_item_id: str) -> Cart:
    lines = tuple(line for line in cart.lines if line.menu_item_id != menu_item_id)
    return _with_lines(cart, lines)


def set_quantity(cart: Cart, menu_item_id: str, quantity: int) -> Cart:
    if quantity <= 0:
        return remove_item(cart, menu_item_id)
    lines = tuple(
        replace(line, quantity=_cap(quantity)) if line.menu_item_id == menu_item_id else line
        for line in cart.lines
    )
    return replace(cart, lines=lines)


def clear_cart(cart: Cart) -> Cart:
    return EMPTY_CART


def cart_totals(cart: Cart) -> CartTotals:
    return CartTotals(
        item_count=sum(line.quantity for line in cart.lines),
        subtotal=sum(line.total_price for line in cart.lines),
    )


class CartStore:
    """Holds one cart per session key; every change goes through a reducer."""

    def __init__(self) -> None:
        self._carts: Dict[str, Cart] = {}
        # Placement runs in a worker thread while requests keep dispatching.
        self._lock = threading.Lock()

    def get(self, key: str) -> Cart:
        with self._lock:
            return self._carts.get(key, EMPTY_CART)

    def _store(self, key: str, cart: Cart) -> Cart:
        if cart.is_empty:
            self._carts.pop(key, None)
        else:
            self._carts[key] = cart
        return cart

    def dispatch(self, key: str, reducer: Callable[..., Cart], *args: Any) -> Cart:
        with self._lock:
            return self._store(key, reducer(self._carts.get(key, EMPTY_CART), *args))

    def clear(self, key: str) -> Cart:
        return self.dispatch(key, clear_cart)

    def clear_if(self, key: str, expected: Cart) -> bool:
        """Clear the cart only while it still equals `expected`."""
        with self._lock:
            if self._carts.get(key, EMPTY_CART) != expected:
                return False
            self._store(key, EMPTY_CART)
            return True


cart_store = CartStore()


def get_cart_store() -> CartStore:
    return cart_store
