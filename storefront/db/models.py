from sqlmodel import Relationship, SQLModel, Field
from datetime import datetime
from typing import List, Optional
import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, Uuid, ForeignKey, UniqueConstraint
from enum import Enum


"""
___________________________________________________

1.  User Table
___________________________________________________

"""
class User(SQLModel, table = True):
    __tablename__ = 'users'
    uid : uuid.UUID = Field(
        sa_column = Column(
            Uuid,
            nullable = False,
            primary_key = True,
            default = uuid.uuid4
        )
    )
    username : str
    email : str = Field(sa_column=Column(String, unique=True, index=True))
    role : str = Field(sa_column=Column(
        String, nullable=False, server_default='user'
    ))
    is_verified : bool = Field(default = False)
    created_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))
    updated_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now, onupdate=datetime.now))

    def __repr__(self):
        return f'<User {self.username}>'


"""
___________________________________________________

2.  Product Table
___________________________________________________

"""
class Product(SQLModel, table=True):
    __tablename__ = "products"

    uid: uuid.UUID = Field(
        sa_column=Column(Uuid, nullable=False, primary_key=True, default=uuid.uuid4)
    )
    title: str
    description: str = ""
    price: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))  # 10 total digits, 2 decimal places
    stock: int = Field(sa_column=Column(Integer, nullable=False, default=0), ge=0)
    is_active: bool = Field(nullable=False, default=True)

    # Cached aggregate, recomputed from the reviews table after every review mutation
    average_rating: float = Field(default=0.0, nullable=False)
    review_count: int = Field(default=0, nullable=False)

    created_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))
    updated_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now, onupdate=datetime.now))

    def __repr__(self):
        return f"<Product {self.title}>"


"""
___________________________________________________

3.  Review Table
___________________________________________________

"""
class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("product_uid", "user_uid", name="uq_reviews_product_user"),
    )

    uid: uuid.UUID = Field(
        sa_column=Column(Uuid, nullable=False, primary_key=True, default=uuid.uuid4)
    )
    product_uid: uuid.UUID = Field(foreign_key="products.uid", nullable=False, index=True)
    user_uid: uuid.UUID = Field(foreign_key="users.uid", nullable=False, index=True)
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified_purchase: bool = Field(default=False, nullable=False)
    helpful_count: int = Field(default=0, nullable=False)
    created_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))
    updated_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now, onupdate=datetime.now))

    def __repr__(self):
        return f"<Review for product {self.product_uid} by user {self.user_uid}>"


"""
___________________________________________________

4.  Orders Table
___________________________________________________

"""
def generate_order_uid():
    return f"ORD-{uuid.uuid4().hex[:6].upper()}"  # Example: ORD-3F9D1A

class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    canceled = "canceled"


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    uid: str = Field(default_factory=generate_order_uid, primary_key=True, index=True, unique=True)
    user_uid: uuid.UUID = Field(foreign_key="users.uid", index=True)
    status: OrderStatus = Field(default=OrderStatus.pending)
    total_price: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))
    discount: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), default=0.0))
    final_price: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))
    coupon_code: Optional[str] = None
    created_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))

    items: List["OrderItem"] = Relationship(back_populates="order", sa_relationship_kwargs={'lazy': 'selectin', 'cascade': 'all, delete-orphan'})


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    uid: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            nullable=False,
            primary_key=True,
            default=uuid.uuid4
        )
    )
    order_uid: str = Field(foreign_key="orders.uid", index=True)
    product_uid: uuid.UUID = Field(foreign_key="products.uid", index=True)
    quantity: int
    price_at_purchase: float
    total_price: float

    order: Optional[Order] = Relationship(back_populates="items")


"""
___________________________________________________

5.  Discount Tables
___________________________________________________

"""
class DiscountType(str, Enum):
    percentage = "percentage"
    fixed_amount = "fixed_amount"
    free_shipping = "free_shipping"


class Discount(SQLModel, table=True):
    __tablename__ = "discounts"

    uid: uuid.UUID = Field(
        sa_column=Column(Uuid, nullable=False, primary_key=True, default=uuid.uuid4)
    )
    code: str = Field(sa_column=Column(String, unique=True, index=True, nullable=False))  # always stored uppercase
    discount_type: str = Field(sa_column=Column(String, nullable=False))
    value: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))  # e.g. 15 for 15% or 5 for 5 off
    description: str = ""
    starts_at: Optional[datetime] = Field(sa_column=Column(DateTime, nullable=True))
    expires_at: Optional[datetime] = Field(sa_column=Column(DateTime, nullable=True))
    minimum_order_amount: Optional[float] = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=True))
    maximum_discount_amount: Optional[float] = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=True))
    usage_limit: Optional[int] = None
    usage_limit_per_user: Optional[int] = None
    used_count: int = Field(default=0, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))
    updated_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now, onupdate=datetime.now))

    def __repr__(self):
        return f"<Discount {self.code}>"


class DiscountUsage(SQLModel, table=True):
    """One row per successful application of a discount code."""
    __tablename__ = "discount_usages"

    uid: uuid.UUID = Field(
        sa_column=Column(Uuid, nullable=False, primary_key=True, default=uuid.uuid4)
    )
    discount_uid: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("discounts.uid", ondelete="CASCADE"), nullable=False, index=True)
    )
    user_uid: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    order_subtotal: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))
    discount_amount: float = Field(sa_column=Column(Numeric(10, 2, asdecimal=False), nullable=False))
    used_at: datetime = Field(sa_column=Column(DateTime, default=datetime.now))
