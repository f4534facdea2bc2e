from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union
from app.domain.line_items import LineItem, PartLine, ProductLine

class PartLineIn(BaseModel):
    kind: Literal["part"] = "part"
    reference_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)

    def to_domain(self) -> LineItem:
        return PartLine(reference_id=self.reference_id, quantity=self.quantity)

class ProductLineIn(BaseModel):
    kind: Literal["product"] = "product"
    reference_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)

    def to_domain(self) -> LineItem:
        return ProductLine(reference_id=self.reference_id, quantity=self.quantity)

LineItemIn = Annotated[Union[PartLineIn, ProductLineIn], Field(discriminator="kind")]

class PurchaseRequest(BaseModel):
    # Purchases may receive loose parts as well as whole products
    items: list[LineItemIn] = Field(default_factory=list)

class SaleRequest(BaseModel):
    # Sales only ever consume finished products
    items: list[ProductLineIn] = Field(default_factory=list)

class PartReconciliationRead(BaseModel):
    part_id: str
    name: str
    quantity_before: int
    quantity_change: int
    quantity_after: int
    class Config:
        from_attributes = True

class ReconciliationRead(BaseModel):
    records: list[PartReconciliationRead]
    any_negative: bool

class TransactionRead(BaseModel):
    kind: str
    line_items: list[dict]
    reconciliation_summary: ReconciliationRead
    receipt: Optional[dict] = None

class PartRead(BaseModel):
    id: str
    name: str
    quantity_on_hand: int
    class Config:
        from_attributes = True

class BillOfMaterialsLineRead(BaseModel):
    part_id: str
    required_quantity: int
    class Config:
        from_attributes = True

class ProductRead(BaseModel):
    id: str
    name: str
    bill_of_materials: list[BillOfMaterialsLineRead]
    class Config:
        from_attributes = True

class CatalogRead(BaseModel):
    parts: list[PartRead]
    products: list[ProductRead]
    class Config:
        from_attributes = True
