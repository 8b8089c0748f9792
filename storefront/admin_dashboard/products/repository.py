import uuid

from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.db.models import Product
from storefront.db.repository import Repository
from storefront.errors import ProductNotFound


class ProductRepository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = Repository(session, Product, not_found=ProductNotFound)

    async def get_or_404(self, product_uid: uuid.UUID) -> Product:
        return await self.products.get_or_404(product_uid)

    async def update_rating(self, product_uid: uuid.UUID, average_rating: float, review_count: int) -> Product:
        return await self.products.update(product_uid, {
            "average_rating": average_rating,
            "review_count": review_count,
        })
