from fastapi import APIRouter, Depends, status
from uuid import UUID
from typing import List
from . import schemas
from .dependencies import get_discount_service
from .service import DiscountService
from storefront.auth.dependencies import admin_role_checker

discount_router = APIRouter()


@discount_router.get("/", response_model=List[schemas.DiscountResponse], dependencies=[Depends(admin_role_checker)])
async def list_discounts(active_only: bool = False, service: DiscountService = Depends(get_discount_service)):
    if active_only:
        return await service.get_active_discounts()
    return await service.list_discounts()

@discount_router.get("/code/{code}", response_model=schemas.DiscountResponse, dependencies=[Depends(admin_role_checker)])
async def read_discount_by_code(code: str, service: DiscountService = Depends(get_discount_service)):
    return await service.get_discount_by_code(code)

@discount_router.get("/{uid}", response_model=schemas.DiscountResponse, dependencies=[Depends(admin_role_checker)])
async def read_discount(uid: UUID, service: DiscountService = Depends(get_discount_service)):
    return await service.get_discount(uid)

@discount_router.get("/{uid}/stats", response_model=schemas.DiscountUsageStats, dependencies=[Depends(admin_role_checker)])
async def discount_usage_stats(uid: UUID, service: DiscountService = Depends(get_discount_service)):
    return await service.get_usage_stats(uid)

@discount_router.post("/", response_model=schemas.DiscountResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(admin_role_checker)])
async def create_discount(data: schemas.DiscountCreate, service: DiscountService = Depends(get_discount_service)):
    return await service.create_discount(data)

@discount_router.put("/{uid}", response_model=schemas.DiscountResponse, dependencies=[Depends(admin_role_checker)])
async def update_discount(uid: UUID, data: schemas.DiscountUpdate, service: DiscountService = Depends(get_discount_service)):
    return await service.update_discount(uid, data)

@discount_router.patch("/{uid}/deactivate", response_model=schemas.DiscountResponse, dependencies=[Depends(admin_role_checker)])
async def deactivate_discount(uid: UUID, service: DiscountService = Depends(get_discount_service)):
    return await service.deactivate_discount(uid)

@discount_router.delete("/{uid}", status_code=status.HTTP_200_OK, dependencies=[Depends(admin_role_checker)])
async def delete_discount(uid: UUID, service: DiscountService = Depends(get_discount_service)):
    await service.delete_discount(uid)
    return {"message": "Discount deleted successfully"}
