from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
from uuid import UUID

from storefront.db.models import User
from storefront.db.main import get_session
from storefront.auth.dependencies import get_current_user
from storefront.admin_dashboard.products.repository import ProductRepository
from storefront.admin_dashboard.orders.repository import OrderRepository
from .repository import ReviewRepository
from .schemas import ReviewCreateModel, ReviewUpdateModel, ReviewModel, ReviewSortField, ReviewSummary
from .service import ReviewService

user_review_router = APIRouter()


async def get_review_service(session: AsyncSession = Depends(get_session)) -> ReviewService:
    return ReviewService(
        reviews=ReviewRepository(session),
        products=ProductRepository(session),
        orders=OrderRepository(session),
    )


@user_review_router.get('/me', response_model=List[ReviewModel])
async def get_my_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    return await service.get_user_reviews(current_user.uid)


@user_review_router.get('/product/{product_uid}', response_model=List[ReviewModel])
async def get_product_reviews(
    product_uid: UUID,
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    verified_only: bool = False,
    sort_by: ReviewSortField = ReviewSortField.RECENT,
    page: int = Query(1, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of reviews per page"),
    service: ReviewService = Depends(get_review_service)
):
    return await service.get_product_reviews(product_uid, min_rating, verified_only, sort_by, page, limit)


@user_review_router.get('/product/{product_uid}/summary', response_model=ReviewSummary)
async def get_product_review_summary(
    product_uid: UUID,
    service: ReviewService = Depends(get_review_service)
):
    return await service.get_review_summary(product_uid)


@user_review_router.post('/product/{product_uid}', response_model=ReviewModel, status_code=status.HTTP_201_CREATED)
async def add_review_to_product(
    product_uid: UUID,
    review_data: ReviewCreateModel,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    return await service.create_review(
        product_uid=product_uid,
        user_uid=current_user.uid,
        rating=review_data.rating,
        title=review_data.title,
        comment=review_data.comment,
    )


@user_review_router.patch('/{review_uid}', response_model=ReviewModel)
async def update_review_by_uid(
    review_uid: UUID,
    review_data: ReviewUpdateModel,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    return await service.update_review(review_uid, current_user.uid, review_data)


@user_review_router.delete('/{review_uid}')
async def delete_review_by_uid(
    review_uid: UUID,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    await service.delete_review(review_uid, current_user.uid)
    return {"message": "review deleted successfully"}


@user_review_router.post('/{review_uid}/helpful', response_model=ReviewModel)
async def mark_review_helpful(
    review_uid: UUID,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    return await service.mark_helpful(review_uid, current_user.uid)
