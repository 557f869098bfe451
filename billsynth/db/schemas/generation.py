from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from billsynth.db.models.generation_run import RunMode
from billsynth.services.inventory import to_number


class InventoryRow(BaseModel):
    """One stock sheet row; accepts the sheet's own column headers too."""
    name: str = Field(..., alias="Item Details", min_length=1)
    quantity: float = Field(0.0, alias="Qty.")
    unit_price: float = Field(0.0, alias="Price")
    gst_percent: float = Field(0.0, alias="GST PERCENT")
    cess_percent: float = Field(0.0, alias="CESS%")
    mrp: float = Field(0.0, alias="MRP")
    unit: str | None = Field(None, alias="Unit")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("quantity", "unit_price", "gst_percent", "cess_percent", "mrp", mode="before")
    @classmethod
    def _lenient_number(cls, v):
        return to_number(v)

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_text(cls, v):
        return str(v).strip() if v is not None else v

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_as_text(cls, v):
        return None if v is None else str(v)


class TargetRow(BaseModel):
    """UPI or cash target row; validated by the scheduler so bad rows can be logged and skipped."""
    target_amount: Any = Field(None, alias="Amount")
    date: str | None = Field(None, alias="Date")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_text(cls, v):
        return None if v is None else str(v)


class DailyTargetRow(BaseModel):
    date: str = Field(..., min_length=10, max_length=10)
    target_amount: float = Field(0.0, ge=0)


class GenerationRequestBase(BaseModel):
    inventory: List[InventoryRow]
    bill_prefix: str | None = None
    start_index: int = Field(1, ge=0)
    seed: int | None = None
    run_id: str | None = None
    fraction_rule: Literal["original", "current"] | None = None


class UpiGenerationRequest(GenerationRequestBase):
    targets: List[TargetRow]


class CashGenerationRequest(GenerationRequestBase):
    daily_targets: List[TargetRow]
    min_bill: float = Field(..., gt=0)
    max_bill: float = Field(..., gt=0)
    purchaser_names: List[str] = []
    strict: bool | None = None
    failure_ceiling: int | None = Field(None, ge=1)


class SkipLogItem(BaseModel):
    date: str | None
    kind: str
    percent_skipped: float
    remaining: float
    message: str


class ExportFiles(BaseModel):
    bills: str
    stock: str


class GenerationResponse(BaseModel):
    run_id: str
    mode: RunMode
    status: str
    message: str
    bill_count: int
    total_billed: float
    opening_stock_value: float
    closing_stock_value: float
    bill_rows: List[Dict[str, Any]]
    stock_rows: List[Dict[str, Any]]
    skip_log: List[SkipLogItem]
    files: ExportFiles


class RunSummaryResponse(BaseModel):
    run_id: str
    mode: RunMode
    status: str
    message: str | None
    bill_count: int
    total_billed: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RunDetailResponse(RunSummaryResponse):
    seed: int | None
    opening_stock_value: float
    closing_stock_value: float
    bill_rows: List[Dict[str, Any]]
    stock_rows: List[Dict[str, Any]]
    skip_log: List[SkipLogItem]


class ProgressResponse(BaseModel):
    run_id: str
    state: str
    date: Optional[str] = None
    percent: Optional[float] = None
    failures: Optional[int] = None
    bills: Optional[int] = None


class InventoryValueRequest(BaseModel):
    inventory: List[InventoryRow]


class InventoryValueResponse(BaseModel):
    item_count: int
    total_stock_value: float
