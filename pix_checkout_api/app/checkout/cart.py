from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from ..models.schemas import OrderItem
from ..utilities import constants
from ..utilities.helpers import to_decimal


@dataclass
class CartItem:
    product_id: str
    name: str
    price: Decimal
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self):
        self.price = to_decimal(self.price)
        if self.quantity < 1:
            raise ValueError("A quantidade deve ser ao menos 1.")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def same_variant(self, other: "CartItem") -> bool:
        return (self.product_id, self.size, self.color) == (other.product_id, other.size, other.color)


@dataclass
class Cart:
    """
    Carrinho da sessão de checkout. O total final inclui o frete, grátis a
    partir de ``free_shipping_threshold``.
    """

    items: List[CartItem] = field(default_factory=list)
    free_shipping_threshold: Decimal = Decimal(constants.FREE_SHIPPING_THRESHOLD)
    shipping_fee: Decimal = Decimal(constants.SHIPPING_COST)

    @classmethod
    def from_settings(cls, settings) -> "Cart":
        return cls(
            free_shipping_threshold=to_decimal(settings.FREE_SHIPPING_THRESHOLD),
            shipping_fee=to_decimal(settings.SHIPPING_COST),
        )

    def add(self, item: CartItem) -> None:
        for existing in self.items:
            if existing.same_variant(item):
                existing.quantity += item.quantity
                return
        self.items.append(item)

    def remove(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> None:
        self.items = [
            item for item in self.items
            if (item.product_id, item.size, item.color) != (product_id, size, color)
        ]

    def clear(self) -> None:
        self.items.clear()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def subtotal(self) -> Decimal:
        return to_decimal(sum((item.line_total for item in self.items), Decimal("0")))

    @property
    def shipping_cost(self) -> Decimal:
        if self.subtotal >= self.free_shipping_threshold:
            return Decimal("0.00")
        return to_decimal(self.shipping_fee)

    @property
    def total(self) -> Decimal:
        return to_decimal(self.subtotal + self.shipping_cost)

    def description(self, store_name: str) -> str:
        summary = ", ".join(f"{item.quantity}x {item.name}" for item in self.items)
        return f"Pedido {store_name}: {summary}"

    def to_order_items(self) -> List[OrderItem]:
        return [
            OrderItem(
                id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                price=item.price,
                size=item.size,
                color=item.color,
            )
            for item in self.items
        ]
