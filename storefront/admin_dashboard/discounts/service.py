from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import uuid

from storefront.db.models import Discount, DiscountType
from storefront.errors import (
    DiscountCodeAlreadyExists,
    InvalidDiscount,
    InvalidDiscountValue,
    MinimumPurchaseNotMet,
    DiscountUsageExceeded,
)
from .repository import DiscountRepository, canonical_code
from .schemas import (
    DiscountCreate,
    DiscountUpdate,
    DiscountValidation,
    DiscountApplication,
    DiscountUsageStats,
    DiscountResponse,
)

logger = logging.getLogger(__name__)

MONETARY_FIELDS = ("value", "minimum_order_amount", "maximum_discount_amount")
REQUIRED_FIELDS = ("value", "description", "is_active")


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # timestamps are stored as naive local time
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def compute_discount_amount(discount_type: str, value: float, order_subtotal: float, maximum_discount_amount: Optional[float] = None) -> float:
    """Amount taken off the subtotal for a percentage or fixed-amount code.

    Free-shipping codes never reduce the subtotal, so they return 0.
    """
    if discount_type == DiscountType.percentage:
        amount = order_subtotal * value / 100
        if maximum_discount_amount is not None and amount > maximum_discount_amount:
            amount = maximum_discount_amount
        return amount
    if discount_type == DiscountType.fixed_amount:
        return min(value, order_subtotal)
    return 0.0


def check_discount_values(data: Dict[str, Any]) -> None:
    for field in MONETARY_FIELDS:
        amount = data.get(field)
        if amount is not None and amount < 0:
            if field == "value":
                raise InvalidDiscountValue("Discount value must be positive")
            raise InvalidDiscountValue(f"{field.replace('_', ' ').capitalize()} cannot be negative")
    if data.get("discount_type") == DiscountType.percentage and data.get("value", 0) > 100:
        raise InvalidDiscountValue("Percentage discount cannot exceed 100%")


class DiscountService:
    def __init__(self, repository: DiscountRepository):
        self.repository = repository

    async def create_discount(self, data: DiscountCreate) -> Discount:
        payload = data.model_dump()
        check_discount_values(payload)

        payload["code"] = canonical_code(payload["code"])
        payload["discount_type"] = DiscountType(payload["discount_type"]).value
        payload["starts_at"] = _naive(payload.get("starts_at"))
        payload["expires_at"] = _naive(payload.get("expires_at"))

        if await self.repository.find_by_code(payload["code"]):
            raise DiscountCodeAlreadyExists()

        discount = await self.repository.discounts.create({**payload, "used_count": 0, "is_active": True})
        logger.info(f"Created discount {discount.code} ({discount.discount_type} {discount.value})")
        return discount

    async def get_discount(self, discount_uid: uuid.UUID) -> Discount:
        return await self.repository.discounts.get_or_404(discount_uid)

    async def get_discount_by_code(self, code: str) -> Discount:
        discount = await self.repository.find_by_code(code)
        if discount is None:
            raise self.repository.discounts.not_found("Discount code not found")
        return discount

    async def list_discounts(self) -> List[Discount]:
        return await self.repository.list_all()

    async def get_active_discounts(self) -> List[Discount]:
        return await self.repository.find_active()

    async def update_discount(self, discount_uid: uuid.UUID, data: DiscountUpdate) -> Discount:
        discount = await self.repository.discounts.get_or_404(discount_uid)
        changes = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in changes and changes[key] is None:
                raise InvalidDiscountValue(f"{key.replace('_', ' ').capitalize()} cannot be null")
        for key in ("starts_at", "expires_at"):
            if key in changes:
                changes[key] = _naive(changes[key])

        merged = {field: getattr(discount, field) for field in MONETARY_FIELDS}
        merged["discount_type"] = discount.discount_type
        merged.update({k: v for k, v in changes.items() if k in MONETARY_FIELDS})
        check_discount_values(merged)

        return await self.repository.discounts.update(discount_uid, changes)

    async def deactivate_discount(self, discount_uid: uuid.UUID) -> Discount:
        discount = await self.repository.discounts.update(discount_uid, {"is_active": False})
        logger.info(f"Deactivated discount {discount.code}")
        return discount

    async def delete_discount(self, discount_uid: uuid.UUID) -> None:
        await self.repository.delete(discount_uid)

    async def validate_discount(self, code: str) -> DiscountValidation:
        """Check whether a code can currently be redeemed.

        Checks run in a fixed order and the first failure wins: existence,
        active flag, expiry, start date, global usage cap.
        """
        discount = await self.repository.find_by_code(code)

        if discount is None:
            return DiscountValidation(is_valid=False, reason="Discount code not found")

        if not discount.is_active:
            return DiscountValidation(is_valid=False, reason="Discount code is not active")

        now = datetime.now()

        if discount.expires_at and discount.expires_at < now:
            return DiscountValidation(is_valid=False, reason="Discount code has expired")

        if discount.starts_at and discount.starts_at > now:
            return DiscountValidation(is_valid=False, reason="Discount code is not yet active")

        if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
            return DiscountValidation(is_valid=False, reason="Discount code has reached maximum usage limit")

        return DiscountValidation(is_valid=True, discount=DiscountResponse.model_validate(discount))

    async def apply_discount(self, code: str, order_subtotal: float, user_uid: uuid.UUID, shipping_cost: float = 0.0) -> DiscountApplication:
        """Redeem a code against an order subtotal.

        Not idempotent: every successful call consumes one use of the code,
        globally and for ``user_uid``.
        """
        validation = await self.validate_discount(code)
        if not validation.is_valid:
            raise InvalidDiscount(validation.reason)

        discount = await self.repository.find_by_code(code)

        if discount.minimum_order_amount is not None and order_subtotal < discount.minimum_order_amount:
            raise MinimumPurchaseNotMet(
                f"Order must meet minimum purchase amount of {discount.minimum_order_amount:.2f}"
            )

        if discount.usage_limit_per_user is not None:
            times_used = await self.repository.count_user_usage(discount.uid, user_uid)
            if times_used >= discount.usage_limit_per_user:
                raise DiscountUsageExceeded()

        free_shipping = discount.discount_type == DiscountType.free_shipping
        shipping_discount = (shipping_cost or 0.0) if free_shipping else 0.0
        discount_amount = compute_discount_amount(
            discount.discount_type,
            discount.value,
            order_subtotal,
            discount.maximum_discount_amount,
        )

        if not await self.repository.increment_usage(discount, user_uid, order_subtotal, discount_amount):
            raise InvalidDiscount("Discount code has reached maximum usage limit")

        logger.info(f"Applied discount {discount.code} for user {user_uid}: -{discount_amount} on {order_subtotal}")

        return DiscountApplication(
            discount_amount=discount_amount,
            final_amount=order_subtotal - discount_amount,
            free_shipping=free_shipping,
            shipping_discount=shipping_discount,
        )

    async def calculate_savings(self, code: str, order_subtotal: float) -> float:
        """Preview the amount a code would take off, without redeeming it."""
        discount = await self.repository.find_by_code(code)
        if discount is None:
            return 0.0
        return compute_discount_amount(
            discount.discount_type,
            discount.value,
            order_subtotal,
            discount.maximum_discount_amount,
        )

    async def get_usage_stats(self, discount_uid: uuid.UUID) -> DiscountUsageStats:
        discount = await self.repository.discounts.get_or_404(discount_uid)

        total_usage = discount.used_count or 0
        if discount.usage_limit is not None:
            remaining_usage = max(discount.usage_limit - total_usage, 0)
            usage_percentage = total_usage / discount.usage_limit * 100 if discount.usage_limit else 100.0
        else:
            remaining_usage = None
            usage_percentage = 0.0

        return DiscountUsageStats(
            total_usage=total_usage,
            remaining_usage=remaining_usage,
            usage_percentage=usage_percentage,
            total_discount_given=await self.repository.usage_total(discount.uid),
        )
