"""
Shopping cart kept on the client.

Lines are keyed by medicine id: adding a medicine already in the cart
raises that line's quantity instead of adding a second line. Every
mutation is written through to storage.
"""
from typing import List, Optional

from pydantic import Field

from medora.client.storage import JsonFileStorage
from medora.schemas.common import CamelModel


class CartItem(CamelModel):
    medicine_id: int
    name: str
    price: float
    discount_price: Optional[float] = None
    quantity: int = Field(default=1, ge=1)
    image: Optional[str] = None
    prescription_required: bool = False

    @property
    def unit_price(self) -> float:
        return self.price if self.discount_price is None else self.discount_price


class CartStore:
    STORAGE_KEY = "items"

    def __init__(self, storage: JsonFileStorage):
        self.storage = storage
        self.items: List[CartItem] = [
            CartItem.model_validate(raw) for raw in storage.load().get(self.STORAGE_KEY, [])
        ]

    def _find(self, medicine_id: int) -> Optional[CartItem]:
        return next((i for i in self.items if i.medicine_id == medicine_id), None)

    def _persist(self) -> None:
        self.storage.save({
            self.STORAGE_KEY: [i.model_dump(by_alias=True) for i in self.items],
        })

    def add_item(self, item: CartItem) -> None:
        existing = self._find(item.medicine_id)
        if existing:
            existing.quantity += item.quantity
        else:
            self.items.append(item.model_copy())
        self._persist()

    def update_quantity(self, medicine_id: int, quantity: int) -> None:
        """Set a line's quantity. A quantity below 1 removes the line."""
        if quantity < 1:
            self.remove_item(medicine_id)
            return
        existing = self._find(medicine_id)
        if existing:
            existing.quantity = quantity
            self._persist()

    def remove_item(self, medicine_id: int) -> None:
        remaining = [i for i in self.items if i.medicine_id != medicine_id]
        if len(remaining) != len(self.items):
            self.items = remaining
            self._persist()

    def clear(self) -> None:
        self.items = []
        self._persist()

    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    def total_price(self) -> float:
        return sum(i.unit_price * i.quantity for i in self.items)

    @property
    def requires_prescription(self) -> bool:
        return any(i.prescription_required for i in self.items)
