from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.repository import product_availability

prods_public_router=APIRouter()


@prods_public_router.get("/{product_id}/availability")
async def get_availability(product_id: int = Path(..., ge=1), session: AsyncSession = Depends(get_session)):
    data = await product_availability(session, product_id)
    return success_response(data)
