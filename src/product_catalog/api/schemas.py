"""Pydantic request schemas for the Product Catalog API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shared.api import UUIDStr

# --- Product ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Linen Relaxed Shirt",
                    "brand": "Modett",
                    "short_description": "Breathable linen shirt with a relaxed fit.",
                    "country_of_origin": "LK",
                    "category_ids": ["4b0ad0c4-3c36-4a34-a76c-6c2fdc6f9d1e"],
                    "tags": ["linen", "summer"],
                }
            ]
        }
    }

    title: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=100)
    short_description: str | None = Field(None, max_length=500)
    long_description: str | None = None
    country_of_origin: str | None = Field(None, min_length=2, max_length=2)
    seo_title: str | None = Field(None, max_length=70)
    seo_description: str | None = Field(None, max_length=160)
    category_ids: list[UUIDStr] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class UpdateProductDetailsRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=100)
    short_description: str | None = Field(None, max_length=500)
    long_description: str | None = None
    country_of_origin: str | None = Field(None, min_length=2, max_length=2)
    seo_title: str | None = Field(None, max_length=70)
    seo_description: str | None = Field(None, max_length=160)
    category_ids: list[UUIDStr] | None = None


class TagProductRequest(BaseModel):
    tags: list[str]


class ScheduleProductRequest(BaseModel):
    publish_at: datetime


# --- Variants & media ---


class AddVariantRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sku": "LIN-SHIRT-WHT-M",
                    "size": "M",
                    "color": "White",
                    "price": 59.0,
                    "compare_at_price": 79.0,
                    "weight_g": 240,
                }
            ]
        }
    }

    sku: str = Field(..., min_length=1, max_length=64)
    price: float = Field(..., ge=0)
    size: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=50)
    barcode: str | None = Field(None, max_length=64)
    compare_at_price: float | None = Field(None, ge=0)
    weight_g: int | None = Field(None, ge=0)


class UpdateVariantRequest(BaseModel):
    price: float | None = Field(None, ge=0)
    compare_at_price: float | None = Field(None, ge=0)
    size: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=50)
    barcode: str | None = Field(None, max_length=64)
    weight_g: int | None = Field(None, ge=0)
    is_active: bool | None = None


class AddMediaRequest(BaseModel):
    asset_url: str = Field(..., max_length=500)
    alt_text: str | None = Field(None, max_length=255)
    is_cover: bool = False


# --- Categories ---


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(None, max_length=120)
    parent_id: UUIDStr | None = None
    position: int = Field(0, ge=0)


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    parent_id: UUIDStr | None = None
    position: int | None = Field(None, ge=0)
