"""FastAPI routes for the Product Catalog domain: products and categories."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from product_catalog import queries
from product_catalog.api.schemas import (
    AddMediaRequest,
    AddVariantRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    ScheduleProductRequest,
    TagProductRequest,
    UpdateCategoryRequest,
    UpdateProductDetailsRequest,
    UpdateVariantRequest,
)
from product_catalog.category.management import CreateCategory, DeactivateCategory, UpdateCategory
from product_catalog.product.creation import CreateProduct
from product_catalog.product.details import TagProduct, UpdateProductDetails
from product_catalog.product.lifecycle import (
    ArchiveProduct,
    PublishProduct,
    RestoreProduct,
    ScheduleProduct,
    UnpublishProduct,
)
from product_catalog.product.media import AddProductMedia, RemoveProductMedia, SetCoverMedia
from product_catalog.product.variants import AddVariant, RemoveVariant, UpdateVariant
from shared.api import UUIDStr
from shared.result import CommandResult

# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=CommandResult)
async def create_product(body: CreateProductRequest) -> CommandResult:
    command = CreateProduct(
        title=body.title,
        slug=body.slug,
        brand=body.brand,
        short_description=body.short_description,
        long_description=body.long_description,
        country_of_origin=body.country_of_origin,
        seo_title=body.seo_title,
        seo_description=body.seo_description,
        category_ids=json.dumps(body.category_ids),
        tags=json.dumps(body.tags),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return CommandResult.ok({"product_id": product_id})


@product_router.get("", response_model=CommandResult)
async def list_products(
    status: str | None = None,
    category_id: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> CommandResult:
    return CommandResult.ok(queries.list_products(status, category_id, page, page_size))


@product_router.get("/search", response_model=CommandResult)
async def search_products(q: str = "", page: int = 1, page_size: int = 20) -> CommandResult:
    return CommandResult.ok(queries.search_products(q, page=page, page_size=page_size))


@product_router.get("/{product_id}", response_model=CommandResult)
async def get_product(product_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_product(product_id))


@product_router.put("/{product_id}", response_model=CommandResult)
async def update_product_details(product_id: UUIDStr, body: UpdateProductDetailsRequest) -> CommandResult:
    command = UpdateProductDetails(
        product_id=product_id,
        title=body.title,
        slug=body.slug,
        brand=body.brand,
        short_description=body.short_description,
        long_description=body.long_description,
        country_of_origin=body.country_of_origin,
        seo_title=body.seo_title,
        seo_description=body.seo_description,
        category_ids=json.dumps(body.category_ids) if body.category_ids is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return CommandResult.ok({"product_id": product_id})


@product_router.put("/{product_id}/tags", response_model=CommandResult)
async def tag_product(product_id: UUIDStr, body: TagProductRequest) -> CommandResult:
    current_domain.process(TagProduct(product_id=product_id, tags=json.dumps(body.tags)), asynchronous=False)
    return CommandResult.ok({"product_id": product_id})


@product_router.put("/{product_id}/publish", response_model=CommandResult)
async def publish_product(product_id: UUIDStr) -> CommandResult:
    current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "status": "published"})


@product_router.put("/{product_id}/schedule", response_model=CommandResult)
async def schedule_product(product_id: UUIDStr, body: ScheduleProductRequest) -> CommandResult:
    current_domain.process(ScheduleProduct(product_id=product_id, publish_at=body.publish_at), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "status": "scheduled"})


@product_router.put("/{product_id}/unpublish", response_model=CommandResult)
async def unpublish_product(product_id: UUIDStr) -> CommandResult:
    current_domain.process(UnpublishProduct(product_id=product_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "status": "draft"})


@product_router.put("/{product_id}/archive", response_model=CommandResult)
async def archive_product(product_id: UUIDStr) -> CommandResult:
    current_domain.process(ArchiveProduct(product_id=product_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "status": "archived"})


@product_router.put("/{product_id}/restore", response_model=CommandResult)
async def restore_product(product_id: UUIDStr) -> CommandResult:
    current_domain.process(RestoreProduct(product_id=product_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "status": "draft"})


@product_router.post("/{product_id}/variants", status_code=201, response_model=CommandResult)
async def add_variant(product_id: UUIDStr, body: AddVariantRequest) -> CommandResult:
    command = AddVariant(product_id=product_id, **body.model_dump())
    variant_id = current_domain.process(command, asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "variant_id": variant_id})


@product_router.put("/{product_id}/variants/{variant_id}", response_model=CommandResult)
async def update_variant(product_id: UUIDStr, variant_id: UUIDStr, body: UpdateVariantRequest) -> CommandResult:
    command = UpdateVariant(product_id=product_id, variant_id=variant_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "variant_id": variant_id})


@product_router.delete("/{product_id}/variants/{variant_id}", response_model=CommandResult)
async def remove_variant(product_id: UUIDStr, variant_id: UUIDStr) -> CommandResult:
    current_domain.process(RemoveVariant(product_id=product_id, variant_id=variant_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "variant_id": variant_id})


@product_router.post("/{product_id}/media", status_code=201, response_model=CommandResult)
async def add_media(product_id: UUIDStr, body: AddMediaRequest) -> CommandResult:
    media_id = current_domain.process(AddProductMedia(product_id=product_id, **body.model_dump()), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "media_id": media_id})


@product_router.put("/{product_id}/media/{media_id}/cover", response_model=CommandResult)
async def set_cover_media(product_id: UUIDStr, media_id: UUIDStr) -> CommandResult:
    current_domain.process(SetCoverMedia(product_id=product_id, media_id=media_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "media_id": media_id})


@product_router.delete("/{product_id}/media/{media_id}", response_model=CommandResult)
async def remove_media(product_id: UUIDStr, media_id: UUIDStr) -> CommandResult:
    current_domain.process(RemoveProductMedia(product_id=product_id, media_id=media_id), asynchronous=False)
    return CommandResult.ok({"product_id": product_id, "media_id": media_id})


# ---------------------------------------------------------------------------
# Category Router
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"])


@category_router.post("", status_code=201, response_model=CommandResult)
async def create_category(body: CreateCategoryRequest) -> CommandResult:
    category_id = current_domain.process(CreateCategory(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"category_id": category_id})


@category_router.get("", response_model=CommandResult)
async def list_categories(include_inactive: bool = False) -> CommandResult:
    return CommandResult.ok(queries.list_categories(include_inactive))


@category_router.put("/{category_id}", response_model=CommandResult)
async def update_category(category_id: UUIDStr, body: UpdateCategoryRequest) -> CommandResult:
    current_domain.process(UpdateCategory(category_id=category_id, **body.model_dump()), asynchronous=False)
    return CommandResult.ok({"category_id": category_id})


@category_router.put("/{category_id}/deactivate", response_model=CommandResult)
async def deactivate_category(category_id: UUIDStr) -> CommandResult:
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return CommandResult.ok({"category_id": category_id, "is_active": False})
