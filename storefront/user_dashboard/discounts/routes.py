from fastapi import APIRouter, Depends

from storefront.auth.dependencies import get_current_user
from storefront.db.models import User
from storefront.admin_dashboard.discounts.dependencies import get_discount_service
from storefront.admin_dashboard.discounts.repository import canonical_code
from storefront.admin_dashboard.discounts.service import DiscountService
from storefront.admin_dashboard.discounts.schemas import (
    DiscountValidateRequest,
    DiscountValidation,
    DiscountApplyRequest,
    DiscountApplication,
    DiscountPreviewRequest,
    DiscountPreview,
)

user_discount_router = APIRouter()


@user_discount_router.post("/validate", response_model=DiscountValidation)
async def validate_discount_code(
    data: DiscountValidateRequest,
    service: DiscountService = Depends(get_discount_service),
    current_user: User = Depends(get_current_user),
):
    """Check a code without redeeming it"""
    return await service.validate_discount(data.code)


@user_discount_router.post("/apply", response_model=DiscountApplication)
async def apply_discount_code(
    data: DiscountApplyRequest,
    service: DiscountService = Depends(get_discount_service),
    current_user: User = Depends(get_current_user),
):
    """Redeem a code. Consumes one use, so clients must not blindly retry."""
    return await service.apply_discount(
        code=data.code,
        order_subtotal=data.order_subtotal,
        user_uid=current_user.uid,
        shipping_cost=data.shipping_cost,
    )


@user_discount_router.post("/preview", response_model=DiscountPreview)
async def preview_discount_savings(
    data: DiscountPreviewRequest,
    service: DiscountService = Depends(get_discount_service),
    current_user: User = Depends(get_current_user),
):
    savings = await service.calculate_savings(data.code, data.order_subtotal)
    return DiscountPreview(code=canonical_code(data.code), savings=savings)
