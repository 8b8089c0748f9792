from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid

from storefront.db.models import DiscountType


class DiscountBase(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount_type: DiscountType
    value: float
    description: str = ""
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    minimum_order_amount: Optional[float] = None
    maximum_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    usage_limit_per_user: Optional[int] = Field(default=None, ge=0)


class DiscountCreate(DiscountBase):
    pass


class DiscountUpdate(BaseModel):
    # code and discount_type are fixed once the discount exists
    value: Optional[float] = None
    description: Optional[str] = None
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    minimum_order_amount: Optional[float] = None
    maximum_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    usage_limit_per_user: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class DiscountResponse(DiscountBase):
    model_config = ConfigDict(from_attributes=True)

    uid: uuid.UUID
    used_count: int
    is_active: bool
    created_at: datetime


class DiscountUsageStats(BaseModel):
    total_usage: int
    remaining_usage: Optional[int] = None
    usage_percentage: float
    total_discount_given: float = 0.0


class DiscountValidateRequest(BaseModel):
    code: str


class DiscountValidation(BaseModel):
    is_valid: bool
    discount: Optional[DiscountResponse] = None
    reason: Optional[str] = None


class DiscountApplyRequest(BaseModel):
    code: str
    order_subtotal: float = Field(ge=0)
    shipping_cost: float = Field(default=0.0, ge=0)


class DiscountApplication(BaseModel):
    discount_amount: float
    final_amount: float
    free_shipping: bool = False
    shipping_discount: float = 0.0


class DiscountPreviewRequest(BaseModel):
    code: str
    order_subtotal: float = Field(ge=0)


class DiscountPreview(BaseModel):
    code: str
    savings: float
