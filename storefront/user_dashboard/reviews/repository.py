from typing import Dict, List, Optional
import uuid

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.db.models import Review
from storefront.db.repository import Repository
from storefront.errors import ReviewNotFound
from .schemas import ReviewSortField


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.reviews = Repository(session, Review, not_found=ReviewNotFound)

    async def find_by_product(
        self,
        product_uid: uuid.UUID,
        min_rating: Optional[int] = None,
        verified_only: bool = False,
        sort_by: ReviewSortField = ReviewSortField.RECENT,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Review]:
        statement = select(Review).where(Review.product_uid == product_uid)
        if min_rating is not None:
            statement = statement.where(Review.rating >= min_rating)
        if verified_only:
            statement = statement.where(Review.is_verified_purchase == True)  # noqa: E712

        if sort_by == ReviewSortField.HELPFUL:
            statement = statement.order_by(Review.helpful_count.desc(), Review.created_at.desc())
        else:
            statement = statement.order_by(Review.created_at.desc())

        if limit:
            statement = statement.offset(offset).limit(limit)

        result = await self.session.exec(statement)
        return list(result.all())

    async def find_by_user(self, user_uid: uuid.UUID) -> List[Review]:
        statement = select(Review).where(Review.user_uid == user_uid).order_by(Review.created_at.desc())
        result = await self.session.exec(statement)
        return list(result.all())

    async def find_by_user_and_product(self, user_uid: uuid.UUID, product_uid: uuid.UUID) -> Optional[Review]:
        return await self.reviews.find_one(user_uid=user_uid, product_uid=product_uid)

    async def count_by_product(self, product_uid: uuid.UUID) -> int:
        return await self.reviews.count(product_uid=product_uid)

    async def average_rating(self, product_uid: uuid.UUID) -> float:
        statement = select(func.avg(Review.rating)).where(Review.product_uid == product_uid)
        result = await self.session.exec(statement)
        average = result.one()
        return float(average) if average is not None else 0.0

    async def rating_counts(self, product_uid: uuid.UUID) -> Dict[int, int]:
        statement = (
            select(Review.rating, func.count())
            .where(Review.product_uid == product_uid)
            .group_by(Review.rating)
        )
        result = await self.session.exec(statement)
        return {rating: count for rating, count in result.all()}

    async def increment_helpful(self, review_uid: uuid.UUID) -> Review:
        await self.session.exec(
            update(Review)
            .where(Review.uid == review_uid)
            .values(helpful_count=Review.helpful_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        review = await self.reviews.get_or_404(review_uid)
        await self.session.refresh(review)
        return review
