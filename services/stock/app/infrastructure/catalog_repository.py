"""SQLAlchemy-backed catalog provider."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.domain.catalog import BillOfMaterialsLine, Catalog, Part, Product
from app.domain.models import PartRow, ProductPartRow, ProductRow


class CatalogProvider(Protocol):
    def load_catalog(self) -> Catalog:
        ...


class SqlCatalogProvider:
    """Loads a fresh, read-only catalog snapshot from the parts/products tables"""

    def __init__(self, db: Session):
        self.db = db

    def load_catalog(self) -> Catalog:
        parts = self.db.execute(select(PartRow).order_by(PartRow.id)).scalars().all()
        products = (
            self.db.execute(
                select(ProductRow)
                .options(selectinload(ProductRow.parts).selectinload(ProductPartRow.part))
                .order_by(ProductRow.id)
            )
            .scalars()
            .all()
        )
        return Catalog(
            parts=tuple(
                Part(id=row.uuid, name=row.name, quantity_on_hand=row.quantity) for row in parts
            ),
            products=tuple(
                Product(
                    id=row.uuid,
                    name=row.name,
                    bill_of_materials=tuple(
                        BillOfMaterialsLine(part_id=line.part.uuid, required_quantity=line.quantity)
                        for line in row.parts
                    ),
                )
                for row in products
            ),
        )
