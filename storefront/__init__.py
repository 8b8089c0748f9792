from fastapi import FastAPI, Depends
import logging

from storefront.config import Config
from storefront.auth.dependencies import admin_role_checker

from storefront.admin_dashboard.discounts.routes import discount_router

from storefront.user_dashboard.discounts.routes import user_discount_router
from storefront.user_dashboard.reviews.routes import user_review_router

from .errors import register_all_errors
from .admin_dashboard.middleware import register_middleware

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

version = "v1"

app = FastAPI(
    title = "Storefront",
    description = "Discount and product review rules for the storefront",
    version = version,
)


register_all_errors(app)
register_middleware(app)


app.include_router(discount_router, prefix=f"/admin/discounts", tags=["admin discounts"], dependencies=[Depends(admin_role_checker)])

app.include_router(user_discount_router, prefix=f"/discounts", tags = ['user discounts'])
app.include_router(user_review_router, prefix=f"/reviews", tags = ['user reviews'])
