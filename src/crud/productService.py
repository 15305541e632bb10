import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from beanie import PydanticObjectId
from fastapi import UploadFile

from src.commonUtils.enumUtils import ProductStatus
from src.commonUtils.errors import NotFoundError
from src.commonUtils.paginationUtils import fetch_page, plan_page
from src.commonUtils.queryUtils import (
    FieldSpec,
    compile_filters,
    expand_keyword,
    parse_datetime,
    parse_int,
    parse_number,
)
from src.crud.mediaUploadService import delete_product_images, upload_product_images
from src.models.productModel import Product
from src.schemas.productSchema import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

# Public parameter name -> stored field. camelCase names are what the storefront client sends.
PRODUCT_FILTER_FIELDS: Dict[str, FieldSpec] = {
    "name": FieldSpec("name"),
    "category": FieldSpec("category"),
    "brand": FieldSpec("brand"),
    "status": FieldSpec("status"),
    "skinType": FieldSpec("skin_type"),
    "skin_type": FieldSpec("skin_type"),
    "price": FieldSpec("price", parse_number, orderable=True),
    "ratings": FieldSpec("ratings", parse_number, orderable=True),
    "stock": FieldSpec("stock", parse_int, orderable=True),
    "numOfReviews": FieldSpec("num_of_reviews", parse_int, orderable=True),
    "num_of_reviews": FieldSpec("num_of_reviews", parse_int, orderable=True),
    "createdAt": FieldSpec("created_at", parse_datetime, orderable=True),
    "created_at": FieldSpec("created_at", parse_datetime, orderable=True),
}

# Storefront listing always pins status, so it cannot be filtered on
ACTIVE_FILTER_FIELDS = {k: v for k, v in PRODUCT_FILTER_FIELDS.items() if k != "status"}

PRODUCT_SORT = [("created_at", -1), ("_id", -1)]


def build_product_query(
        params: Mapping[str, Any],
        fields: Mapping[str, FieldSpec] = PRODUCT_FILTER_FIELDS,
        pinned: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Compile filters, pin any fixed conditions, then AND the keyword search on top."""
    predicate = compile_filters(params, fields)
    if pinned:
        predicate.update(pinned)
    return expand_keyword(predicate, params.get("keyword"))


class ProductService:
    """Service layer for product operations"""

    @staticmethod
    async def list_active_products(params: Mapping[str, Any]) -> List[Product]:
        """All active products matching the filters and keyword. Not paginated."""
        query = build_product_query(params, ACTIVE_FILTER_FIELDS, pinned={"status": ProductStatus.ACTIVE.value})
        return await Product.find(query).sort(*PRODUCT_SORT).to_list()

    @staticmethod
    async def list_products(params: Mapping[str, Any]) -> Tuple[List[Product], Dict[str, int]]:
        """Filtered, searched and paginated listing across every status"""
        query = build_product_query(params)
        plan = plan_page(params.get("page"), params.get("limit"))
        return await fetch_page(Product, query, plan, sort=PRODUCT_SORT)

    @staticmethod
    async def get_product(product_id: PydanticObjectId) -> Product:
        product = await Product.get(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    async def create_product(
            user_id: PydanticObjectId,
            product_data: ProductCreate,
            files: Optional[List[UploadFile]] = None,
    ) -> Product:
        """Upload images, then create the product owned by ``user_id``"""
        images = await upload_product_images(files or [])

        product = Product(
            user_id=user_id,
            **product_data.model_dump(),
            images=images,
        )
        try:
            await product.insert()
        except Exception:
            await delete_product_images(images)
            raise

        logger.info(f"Product {product.id} created by {user_id}")
        return product

    @staticmethod
    async def update_product(
            product_id: PydanticObjectId,
            product_data: ProductUpdate,
            files: Optional[List[UploadFile]] = None,
            keep_images: Optional[List[str]] = None,
    ) -> Product:
        """Update scalar fields and optionally replace the image set.

        With new uploads, images whose public_id is not in ``keep_images`` are destroyed
        (all of them when ``keep_images`` is omitted) and the new list is kept + uploaded.
        Without uploads, ``keep_images`` alone prunes the existing list.
        """
        product = await ProductService.get_product(product_id)

        for field, value in product_data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        uploaded = await upload_product_images(files or [])
        removed = []
        if uploaded or keep_images is not None:
            keep = set(keep_images or [])
            kept = [image for image in product.images if image.public_id in keep]
            removed = [image for image in product.images if image.public_id not in keep]
            product.images = kept + uploaded

        product.updated_at = datetime.utcnow()
        try:
            await product.save()
        except Exception:
            await delete_product_images(uploaded)
            raise

        if removed:
            await delete_product_images(removed)
        return product

    @staticmethod
    async def delete_product(product_id: PydanticObjectId) -> None:
        """Destroy stored images, then delete the product"""
        product = await ProductService.get_product(product_id)

        deleted = await delete_product_images(product.images)
        logger.info(f"Deleted {deleted}/{len(product.images)} images for product {product_id}")

        await product.delete()
