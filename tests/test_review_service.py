"""
Review and rating aggregation tests.
"""
import uuid
from statistics import mean

import pytest

from storefront.admin_dashboard.orders.repository import OrderRepository
from storefront.admin_dashboard.products.repository import ProductRepository
from storefront.db.models import OrderStatus
from storefront.errors import (
    InvalidRating,
    ProductNotFound,
    ReviewAlreadyExists,
    ReviewNotFound,
    ReviewOwnershipRequired,
    SelfHelpfulVote,
)
from storefront.user_dashboard.reviews.repository import ReviewRepository
from storefront.user_dashboard.reviews.schemas import ReviewSortField, ReviewUpdateModel
from storefront.user_dashboard.reviews.service import ReviewService


@pytest.fixture
def service(session) -> ReviewService:
    return ReviewService(
        reviews=ReviewRepository(session),
        products=ProductRepository(session),
        orders=OrderRepository(session),
    )


class TestCreateReview:

    async def test_creates_review_and_updates_product(self, service: ReviewService, session, make_user, make_product) -> None:
        user = await make_user()
        product = await make_product()

        review = await service.create_review(product.uid, user.uid, 4, title="Solid", comment="Bright enough")

        assert review.rating == 4
        assert review.helpful_count == 0
        assert review.is_verified_purchase is False
        await session.refresh(product)
        assert product.average_rating == 4
        assert product.review_count == 1

    @pytest.mark.parametrize("rating", [0, 6, -1, 10])
    async def test_rating_out_of_range(self, service: ReviewService, make_user, make_product, rating: int) -> None:
        user = await make_user()
        product = await make_product()

        with pytest.raises(InvalidRating) as exc:
            await service.create_review(product.uid, user.uid, rating)

        assert exc.value.status_code == 400

    async def test_unknown_product(self, service: ReviewService, make_user) -> None:
        user = await make_user()

        with pytest.raises(ProductNotFound) as exc:
            await service.create_review(uuid.uuid4(), user.uid, 5)

        assert exc.value.status_code == 404

    async def test_one_review_per_user_and_product(self, service: ReviewService, make_user, make_product) -> None:
        user = await make_user()
        product = await make_product()
        await service.create_review(product.uid, user.uid, 5)

        with pytest.raises(ReviewAlreadyExists) as exc:
            await service.create_review(product.uid, user.uid, 1)

        assert exc.value.status_code == 400
        assert "already reviewed" in exc.value.message

    async def test_verified_purchase_requires_delivered_order(self, service: ReviewService, make_user, make_product, make_order) -> None:
        buyer = await make_user()
        pending_buyer = await make_user()
        product = await make_product()
        await make_order(buyer, product, OrderStatus.delivered)
        await make_order(pending_buyer, product, OrderStatus.shipped)

        verified = await service.create_review(product.uid, buyer.uid, 5)
        unverified = await service.create_review(product.uid, pending_buyer.uid, 3)

        assert verified.is_verified_purchase is True
        assert unverified.is_verified_purchase is False

    async def test_verified_purchase_is_per_product(self, service: ReviewService, make_user, make_product, make_order) -> None:
        user = await make_user()
        bought = await make_product("Lamp")
        other = await make_product("Chair")
        await make_order(user, bought)

        review = await service.create_review(other.uid, user.uid, 4)

        assert review.is_verified_purchase is False


class TestAggregate:

    async def test_average_is_recomputed_from_all_reviews(self, service: ReviewService, session, make_user, make_product) -> None:
        product = await make_product()
        ratings = [5, 4, 4, 2, 1]
        for rating in ratings:
            user = await make_user()
            await service.create_review(product.uid, user.uid, rating)

        await session.refresh(product)
        assert product.review_count == len(ratings)
        assert product.average_rating == pytest.approx(mean(ratings))
        assert await service.get_average_rating(product.uid) == pytest.approx(mean(ratings))
        assert await service.get_review_count(product.uid) == len(ratings)

    async def test_update_recomputes(self, service: ReviewService, session, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 2)
        await service.create_review(product.uid, (await make_user()).uid, 4)

        await service.update_review(review.uid, author.uid, ReviewUpdateModel(rating=5))

        await session.refresh(product)
        assert product.average_rating == pytest.approx(4.5)
        assert product.review_count == 2

    async def test_deleting_only_review_resets_aggregate(self, service: ReviewService, session, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 5)

        await service.delete_review(review.uid, author.uid)

        await session.refresh(product)
        assert product.average_rating == 0
        assert product.review_count == 0
        assert await service.get_average_rating(product.uid) == 0

    async def test_reviews_on_other_products_do_not_leak(self, service: ReviewService, session, make_user, make_product) -> None:
        lamp = await make_product("Lamp")
        chair = await make_product("Chair")
        user = await make_user()
        await service.create_review(lamp.uid, user.uid, 1)
        await service.create_review(chair.uid, user.uid, 5)

        await session.refresh(lamp)
        assert lamp.average_rating == 1
        assert lamp.review_count == 1

    async def test_distribution_sums_to_count(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        for rating in [5, 5, 5, 3, 1, 1]:
            await service.create_review(product.uid, (await make_user()).uid, rating)

        distribution = await service.get_rating_distribution(product.uid)

        assert distribution == {5: 3, 4: 0, 3: 1, 2: 0, 1: 2}
        assert sum(distribution.values()) == await service.get_review_count(product.uid)

    async def test_summary_with_no_reviews(self, service: ReviewService, make_product) -> None:
        product = await make_product()

        summary = await service.get_review_summary(product.uid)

        assert summary.average_rating == 0
        assert summary.total_reviews == 0
        assert summary.distribution == {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}


class TestOwnership:

    async def test_only_author_can_update(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        stranger = await make_user()
        review = await service.create_review(product.uid, author.uid, 3)

        with pytest.raises(ReviewOwnershipRequired) as exc:
            await service.update_review(review.uid, stranger.uid, ReviewUpdateModel(rating=1))

        assert exc.value.status_code == 401

    async def test_only_author_can_delete(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 3)

        with pytest.raises(ReviewOwnershipRequired):
            await service.delete_review(review.uid, uuid.uuid4())

        assert await service.get_review_count(product.uid) == 1

    async def test_update_validates_rating(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 3)

        with pytest.raises(InvalidRating):
            await service.update_review(review.uid, author.uid, ReviewUpdateModel(rating=9))

    async def test_update_text_only(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 3, title="Ok")

        updated = await service.update_review(review.uid, author.uid, ReviewUpdateModel(comment="Grew on me"))

        assert updated.rating == 3
        assert updated.title == "Ok"
        assert updated.comment == "Grew on me"

    async def test_missing_review(self, service: ReviewService) -> None:
        with pytest.raises(ReviewNotFound):
            await service.delete_review(uuid.uuid4(), uuid.uuid4())


class TestHelpful:

    async def test_other_users_can_mark_helpful(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 4)

        await service.mark_helpful(review.uid, (await make_user()).uid)
        marked = await service.mark_helpful(review.uid, (await make_user()).uid)

        assert marked.helpful_count == 2

    async def test_author_cannot_mark_own_review(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        author = await make_user()
        review = await service.create_review(product.uid, author.uid, 4)

        with pytest.raises(SelfHelpfulVote) as exc:
            await service.mark_helpful(review.uid, author.uid)

        assert exc.value.status_code == 400


class TestListing:

    async def test_filters_and_sorting(self, service: ReviewService, make_user, make_product, make_order) -> None:
        product = await make_product()
        buyer = await make_user()
        await make_order(buyer, product)
        low = await service.create_review(product.uid, (await make_user()).uid, 2)
        high = await service.create_review(product.uid, buyer.uid, 5)
        await service.mark_helpful(low.uid, buyer.uid)

        assert [r.uid for r in await service.get_product_reviews(product.uid, min_rating=4)] == [high.uid]
        assert [r.uid for r in await service.get_product_reviews(product.uid, verified_only=True)] == [high.uid]
        by_helpful = await service.get_product_reviews(product.uid, sort_by=ReviewSortField.HELPFUL)
        assert by_helpful[0].uid == low.uid

    async def test_pagination(self, service: ReviewService, make_user, make_product) -> None:
        product = await make_product()
        for rating in [1, 2, 3, 4, 5]:
            await service.create_review(product.uid, (await make_user()).uid, rating)

        first = await service.get_product_reviews(product.uid, page=1, limit=2)
        third = await service.get_product_reviews(product.uid, page=3, limit=2)

        assert len(first) == 2
        assert len(third) == 1

    async def test_user_reviews(self, service: ReviewService, make_user, make_product) -> None:
        user = await make_user()
        for title in ["Lamp", "Chair"]:
            product = await make_product(title)
            await service.create_review(product.uid, user.uid, 4)

        assert len(await service.get_user_reviews(user.uid)) == 2

    async def test_repository_combines_filters_and_window(self, service: ReviewService, session, make_user, make_product) -> None:
        product = await make_product()
        other = await make_product("Chair")
        for rating in [1, 3, 4, 5]:
            await service.create_review(product.uid, (await make_user()).uid, rating)
        await service.create_review(other.uid, (await make_user()).uid, 5)

        repository = ReviewRepository(session)
        matching = await repository.find_by_product(product.uid, min_rating=3)
        window = await repository.find_by_product(product.uid, min_rating=3, offset=1, limit=1)

        assert sorted(r.rating for r in matching) == [3, 4, 5]
        assert len(window) == 1
        assert window[0].uid == matching[1].uid
