from typing import Dict, List, Optional
import logging
import uuid

from sqlalchemy.exc import IntegrityError

from storefront.db.models import Review, Product
from storefront.admin_dashboard.products.repository import ProductRepository
from storefront.admin_dashboard.orders.repository import OrderRepository
from storefront.errors import (
    InvalidRating,
    ReviewAlreadyExists,
    ReviewOwnershipRequired,
    SelfHelpfulVote,
)
from .repository import ReviewRepository
from .schemas import ReviewUpdateModel, ReviewSortField, ReviewSummary

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def check_rating(rating: int) -> None:
    if rating is None or rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRating()


class ReviewService:
    def __init__(self, reviews: ReviewRepository, products: ProductRepository, orders: OrderRepository):
        self.reviews = reviews
        self.products = products
        self.orders = orders

    async def _refresh_product_rating(self, product_uid: uuid.UUID) -> Product:
        """Recompute the cached average and count from the stored reviews."""
        average_rating = await self.reviews.average_rating(product_uid)
        review_count = await self.reviews.count_by_product(product_uid)
        product = await self.products.update_rating(product_uid, average_rating, review_count)
        logger.info(f"Product {product_uid} rating recomputed: {average_rating:.2f} over {review_count} reviews")
        return product

    async def _get_owned_review(self, review_uid: uuid.UUID, requester_uid: uuid.UUID) -> Review:
        review = await self.reviews.reviews.get_or_404(review_uid)
        if review.user_uid != requester_uid:
            raise ReviewOwnershipRequired()
        return review

    async def create_review(self, product_uid: uuid.UUID, user_uid: uuid.UUID, rating: int, title: Optional[str] = None, comment: Optional[str] = None) -> Review:
        check_rating(rating)
        await self.products.get_or_404(product_uid)

        if await self.reviews.find_by_user_and_product(user_uid, product_uid):
            raise ReviewAlreadyExists()

        is_verified_purchase = await self.orders.has_user_purchased_product(user_uid, product_uid)

        try:
            review = await self.reviews.reviews.create({
                "product_uid": product_uid,
                "user_uid": user_uid,
                "rating": rating,
                "title": title,
                "comment": comment,
                "is_verified_purchase": is_verified_purchase,
                "helpful_count": 0,
            })
        except IntegrityError:
            # lost a race against a concurrent submission by the same user
            await self.reviews.session.rollback()
            raise ReviewAlreadyExists()

        await self._refresh_product_rating(product_uid)
        return review

    async def update_review(self, review_uid: uuid.UUID, requester_uid: uuid.UUID, changes: ReviewUpdateModel) -> Review:
        review = await self._get_owned_review(review_uid, requester_uid)

        update_data = changes.model_dump(exclude_unset=True)
        if "rating" in update_data:
            check_rating(update_data["rating"])

        updated = await self.reviews.reviews.update(review.uid, update_data)
        await self._refresh_product_rating(review.product_uid)
        return updated

    async def delete_review(self, review_uid: uuid.UUID, requester_uid: uuid.UUID) -> None:
        review = await self._get_owned_review(review_uid, requester_uid)
        product_uid = review.product_uid

        await self.reviews.reviews.delete(review.uid)
        await self._refresh_product_rating(product_uid)

    async def mark_helpful(self, review_uid: uuid.UUID, requester_uid: uuid.UUID) -> Review:
        review = await self.reviews.reviews.get_or_404(review_uid)
        if review.user_uid == requester_uid:
            raise SelfHelpfulVote()
        return await self.reviews.increment_helpful(review.uid)

    async def get_product_reviews(
        self,
        product_uid: uuid.UUID,
        min_rating: Optional[int] = None,
        verified_only: bool = False,
        sort_by: ReviewSortField = ReviewSortField.RECENT,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[Review]:
        offset = (page - 1) * limit if limit else 0
        return await self.reviews.find_by_product(
            product_uid,
            min_rating=min_rating,
            verified_only=verified_only,
            sort_by=sort_by,
            offset=offset,
            limit=limit,
        )

    async def get_user_reviews(self, user_uid: uuid.UUID) -> List[Review]:
        return await self.reviews.find_by_user(user_uid)

    async def get_rating_distribution(self, product_uid: uuid.UUID) -> Dict[int, int]:
        counts = await self.reviews.rating_counts(product_uid)
        return {stars: counts.get(stars, 0) for stars in range(MAX_RATING, MIN_RATING - 1, -1)}

    async def get_average_rating(self, product_uid: uuid.UUID) -> float:
        return await self.reviews.average_rating(product_uid)

    async def get_review_count(self, product_uid: uuid.UUID) -> int:
        return await self.reviews.count_by_product(product_uid)

    async def get_review_summary(self, product_uid: uuid.UUID) -> ReviewSummary:
        return ReviewSummary(
            average_rating=await self.get_average_rating(product_uid),
            total_reviews=await self.get_review_count(product_uid),
            distribution=await self.get_rating_distribution(product_uid),
        )
