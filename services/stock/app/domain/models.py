from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
import uuid

class Base(DeclarativeBase):
    pass

def _new_uuid() -> str:
    return str(uuid.uuid4())

class PartRow(Base):
    __tablename__ = "parts"
    # Insertion order; reconciliation summaries list parts in this order
    id: Mapped[int] = mapped_column(primary_key=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True, default=_new_uuid)
    name: Mapped[str] = mapped_column(String(200))
    quantity: Mapped[int] = mapped_column(Integer, default=0)

class ProductRow(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(primary_key=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True, default=_new_uuid)
    name: Mapped[str] = mapped_column(String(200))
    parts: Mapped[list["ProductPartRow"]] = relationship(
        "ProductPartRow", back_populates="product", cascade="all, delete-orphan", order_by="ProductPartRow.id"
    )

class ProductPartRow(Base):
    """One bill-of-materials line: ``quantity`` of a part per unit of product"""
    __tablename__ = "product_parts"
    __table_args__ = (UniqueConstraint("product_id", "part_id", name="uq_product_parts_product_part"),)
    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), index=True)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id", ondelete="RESTRICT"), index=True)
    quantity: Mapped[int] = mapped_column(Integer)
    product: Mapped[ProductRow] = relationship("ProductRow", back_populates="parts")
    part: Mapped[PartRow] = relationship("PartRow")
