from datetime import datetime
from typing import Dict, Optional
from enum import Enum
import uuid
from pydantic import BaseModel, ConfigDict, Field


class ReviewModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: uuid.UUID
    product_uid: uuid.UUID
    user_uid: uuid.UUID
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified_purchase: bool
    helpful_count: int
    created_at: datetime
    updated_at: datetime


class ReviewCreateModel(BaseModel):
    # range is enforced by the service so the error is a 400, not a 422
    rating: int
    title: Optional[str] = Field(default=None, max_length=200)
    comment: Optional[str] = None


class ReviewUpdateModel(BaseModel):
    rating: Optional[int] = None
    title: Optional[str] = Field(default=None, max_length=200)
    comment: Optional[str] = None


class ReviewSortField(str, Enum):
    RECENT = "recent"
    HELPFUL = "helpful"


class ReviewSummary(BaseModel):
    average_rating: float
    total_reviews: int
    distribution: Dict[int, int]
