from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from beanie import PydanticObjectId
from pydantic import ValidationError as SchemaValidationError
from typing import List, Optional

from src.commonUtils.errors import from_schema_error
from src.commonUtils.queryUtils import query_params_to_mapping
from src.dependencies.auth_dependencies import require_admin
from src.models.userModel import User
from src.schemas.productSchema import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse, MessageResponse,
)
from src.crud.productService import ProductService

router = APIRouter()


def product_create_form(
        name: str = Form(...),
        description: str = Form(...),
        price: float = Form(...),
        category: str = Form(...),
        brand: str = Form(...),
        skin_type: List[str] = Form(...),
        stock: int = Form(1),
        ratings: float = Form(0),
        status: Optional[str] = Form(None),
) -> ProductCreate:
    fields = dict(name=name, description=description, price=price, category=category, brand=brand,
                  skin_type=skin_type, stock=stock, ratings=ratings, status=status)
    try:
        return ProductCreate(**{k: v for k, v in fields.items() if v is not None})
    except SchemaValidationError as e:
        raise from_schema_error(e)


def product_update_form(
        name: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        price: Optional[float] = Form(None),
        category: Optional[str] = Form(None),
        brand: Optional[str] = Form(None),
        skin_type: Optional[List[str]] = Form(None),
        stock: Optional[int] = Form(None),
        ratings: Optional[float] = Form(None),
        status: Optional[str] = Form(None),
) -> ProductUpdate:
    fields = dict(name=name, description=description, price=price, category=category, brand=brand,
                  skin_type=skin_type, stock=stock, ratings=ratings, status=status)
    try:
        # Only fields the client sent count as set
        return ProductUpdate(**{k: v for k, v in fields.items() if v is not None})
    except SchemaValidationError as e:
        raise from_schema_error(e)


# ============= PUBLIC PRODUCT ROUTES =============
@router.get("/products/active", response_model=ProductListResponse, tags=["products"])
async def list_active_products(request: Request):
    """Active products with filtering and keyword search"""
    products = await ProductService.list_active_products(query_params_to_mapping(request.query_params))
    return {"success": True, "count": len(products), "data": products}


@router.get("/products/{product_id}", response_model=ProductResponse, tags=["products"])
async def get_product(product_id: PydanticObjectId):
    """Get a specific product"""
    product = await ProductService.get_product(product_id)
    return {"success": True, "data": product}


# ============= ADMIN PRODUCT ROUTES =============
@router.get("/products", response_model=ProductListResponse, tags=["products"])
async def list_products(request: Request, admin: User = Depends(require_admin)):
    """Every product with filtering, keyword search and pagination"""
    products, meta = await ProductService.list_products(query_params_to_mapping(request.query_params))
    return {"success": True, "count": len(products), "data": products, "meta": meta}


@router.get("/products/{product_id}/detail", response_model=ProductResponse, tags=["products"])
async def get_product_detail(product_id: PydanticObjectId, admin: User = Depends(require_admin)):
    product = await ProductService.get_product(product_id)
    return {"success": True, "data": product, "message": "Product detail fetched successfully."}


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED, tags=["products"])
async def create_product(
        product_data: ProductCreate = Depends(product_create_form),
        images: Optional[List[UploadFile]] = File(None),
        admin: User = Depends(require_admin),
):
    """Create a new product with up to MAX_PRODUCT_IMAGES images"""
    product = await ProductService.create_product(admin.id, product_data, images)
    return {"success": True, "data": product, "message": "Product created successfully."}


@router.put("/products/{product_id}", response_model=ProductResponse, tags=["products"])
async def update_product(
        product_id: PydanticObjectId,
        product_data: ProductUpdate = Depends(product_update_form),
        images: Optional[List[UploadFile]] = File(None),
        keep_images: Optional[List[str]] = Form(None),
        admin: User = Depends(require_admin),
):
    """Update a product. ``keep_images`` lists the public_ids of existing images to retain."""
    product = await ProductService.update_product(product_id, product_data, images, keep_images)
    return {"success": True, "data": product, "message": "Product updated successfully"}


@router.delete("/products/{product_id}", response_model=MessageResponse, tags=["products"])
async def delete_product(product_id: PydanticObjectId, admin: User = Depends(require_admin)):
    """Delete a product and its stored images"""
    await ProductService.delete_product(product_id)
    return {"success": True, "message": "Product and associated images deleted successfully"}
