"""
Read-only catalog of parts and products.

A catalog is built once per calculation from whatever the catalog provider
returns and is never mutated afterwards. Parts keep the order they were
supplied in; that order is the order of every reconciliation summary.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .errors import CatalogIntegrityError


@dataclass(frozen=True)
class Part:
    id: str
    name: str
    quantity_on_hand: int = 0


@dataclass(frozen=True)
class BillOfMaterialsLine:
    part_id: str
    required_quantity: int


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    bill_of_materials: Tuple[BillOfMaterialsLine, ...] = ()

    @property
    def parts_per_unit(self) -> int:
        """Total number of parts one unit of this product is made of"""
        return sum(line.required_quantity for line in self.bill_of_materials)


@dataclass(frozen=True)
class Catalog:
    parts: Tuple[Part, ...]
    products: Tuple[Product, ...] = ()
    _parts_by_id: Mapping[str, Part] = field(init=False, repr=False, compare=False)
    _products_by_id: Mapping[str, Product] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        parts = tuple(self.parts)
        products = tuple(self.products)
        object.__setattr__(self, "parts", parts)
        object.__setattr__(self, "products", products)

        parts_by_id: Dict[str, Part] = {}
        for part in parts:
            if part.id in parts_by_id:
                raise CatalogIntegrityError(f"Duplicate part id {part.id!r}")
            parts_by_id[part.id] = part

        products_by_id: Dict[str, Product] = {}
        for product in products:
            if product.id in products_by_id:
                raise CatalogIntegrityError(f"Duplicate product id {product.id!r}")
            for line in product.bill_of_materials:
                if line.part_id not in parts_by_id:
                    raise CatalogIntegrityError(
                        f"Product {product.id!r} references unknown part {line.part_id!r}"
                    )
                if line.required_quantity < 1:
                    raise CatalogIntegrityError(
                        f"Product {product.id!r} requires {line.required_quantity} of part {line.part_id!r}"
                    )
            products_by_id[product.id] = product

        object.__setattr__(self, "_parts_by_id", MappingProxyType(parts_by_id))
        object.__setattr__(self, "_products_by_id", MappingProxyType(products_by_id))

    @classmethod
    def from_records(cls, parts: Iterable[Mapping], products: Iterable[Mapping] = ()) -> "Catalog":
        """
        Build a catalog from plain dicts.

        Parts look like ``{"id", "name", "quantity_on_hand"}``; products like
        ``{"id", "name", "bill_of_materials": [{"part_id", "required_quantity"}]}``.
        """
        return cls(
            parts=tuple(
                Part(id=p["id"], name=p["name"], quantity_on_hand=p.get("quantity_on_hand", 0))
                for p in parts
            ),
            products=tuple(
                Product(
                    id=p["id"],
                    name=p["name"],
                    bill_of_materials=tuple(
                        BillOfMaterialsLine(part_id=line["part_id"], required_quantity=line["required_quantity"])
                        for line in p.get("bill_of_materials", ())
                    ),
                )
                for p in products
            ),
        )

    def part(self, part_id: str) -> Optional[Part]:
        return self._parts_by_id.get(part_id)

    def product(self, product_id: str) -> Optional[Product]:
        return self._products_by_id.get(product_id)

    def stock_snapshot(self) -> Dict[str, int]:
        """On-hand quantity per part id, in catalog order"""
        return {part.id: part.quantity_on_hand for part in self.parts}

    def part_names(self) -> Dict[str, str]:
        return {part.id: part.name for part in self.parts}
