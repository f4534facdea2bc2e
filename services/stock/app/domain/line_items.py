"""
Line items of a pending transaction.

A line item is either a raw part or a product. Each kind knows how to
resolve its reference against a catalog and which per-part contributions it
makes; callers never branch on ``kind`` themselves.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

from .catalog import Catalog
from .errors import ResolutionError


class Direction(int, Enum):
    """Sign of a transaction's effect on stock"""
    INCREASE = 1
    DECREASE = -1


class TransactionKind(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"

    @property
    def direction(self) -> Direction:
        return Direction.INCREASE if self is TransactionKind.PURCHASE else Direction.DECREASE


@dataclass(frozen=True)
class LineItem(ABC):
    reference_id: str
    quantity: int

    kind = "abstract"

    def validate_quantity(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ResolutionError(self, f"quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 1:
            raise ResolutionError(self, f"quantity must be at least 1, got {self.quantity}")

    @abstractmethod
    def contributions(self, catalog: Catalog, direction: Direction) -> Iterator[Tuple[str, int]]:
        """Yield ``(part_id, signed_quantity)`` pairs; raise ResolutionError if unresolvable"""

    def to_dict(self) -> dict:
        return {"kind": self.kind, "reference_id": self.reference_id, "quantity": self.quantity}


@dataclass(frozen=True)
class PartLine(LineItem):
    kind = "part"

    def contributions(self, catalog: Catalog, direction: Direction) -> Iterator[Tuple[str, int]]:
        self.validate_quantity()
        part = catalog.part(self.reference_id)
        if part is None:
            raise ResolutionError(self, "unknown part")
        yield part.id, int(direction) * self.quantity


@dataclass(frozen=True)
class ProductLine(LineItem):
    kind = "product"

    def contributions(self, catalog: Catalog, direction: Direction) -> Iterator[Tuple[str, int]]:
        self.validate_quantity()
        product = catalog.product(self.reference_id)
        if product is None:
            raise ResolutionError(self, "unknown product")
        for line in product.bill_of_materials:
            yield line.part_id, int(direction) * self.quantity * line.required_quantity


LINE_ITEM_KINDS = {cls.kind: cls for cls in (PartLine, ProductLine)}


def line_item_from_dict(data: dict) -> LineItem:
    """Build a line item from ``{"kind", "reference_id", "quantity"}``"""
    try:
        cls = LINE_ITEM_KINDS[data["kind"]]
    except KeyError:
        raise ValueError(f"Unknown line item kind: {data.get('kind')!r}")
    return cls(reference_id=data["reference_id"], quantity=data["quantity"])
