"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class InventorySchema(BaseModel):
    quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(10, ge=0)
    track_quantity: bool = True


class VariantOptionSchema(BaseModel):
    value: str = Field(..., min_length=1, max_length=50)
    price_modifier: float = 0.0


class VariantGroupSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    options: list[VariantOptionSchema] = Field(..., min_length=1)


class ProductImageSchema(BaseModel):
    url: str = Field(..., max_length=500)
    alt_text: str | None = Field(None, max_length=200)
    is_primary: bool = False


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoe",
                    "description": "Lightweight shoe with a grippy outsole.",
                    "price": 89.99,
                    "compare_price": 119.99,
                    "category_id": "7d4c3f0e-0b7e-4b0f-9e55-1f6f0c2a9d10",
                    "sku": "shoe-trail-01",
                    "brand": "Acme",
                    "inventory": {"quantity": 40, "low_stock_threshold": 5},
                    "variants": [
                        {
                            "name": "Size",
                            "options": [{"value": "42"}, {"value": "46", "price_modifier": 5}],
                        }
                    ],
                    "images": [{"url": "https://cdn.example.com/shoe.jpg", "alt_text": "Side view"}],
                    "tags": ["Running", "Outdoor"],
                    "specifications": {"weight": "280g"},
                }
            ]
        }
    }

    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=2000)
    price: float = Field(..., ge=0)
    compare_price: float | None = Field(None, ge=0)
    category_id: str
    sku: str = Field(..., max_length=50)
    brand: str | None = Field(None, max_length=100)
    inventory: InventorySchema | None = None
    variants: list[VariantGroupSchema] | None = None
    images: list[ProductImageSchema] | None = None
    tags: list[str] | None = None
    specifications: dict[str, str] | None = None
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: str = "active"
    is_featured: bool = False
    is_digital: bool = False
    weight: float | None = Field(None, ge=0)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, min_length=10, max_length=2000)
    price: float | None = Field(None, ge=0)
    compare_price: float | None = Field(None, ge=0)
    category_id: str | None = None
    sku: str | None = Field(None, max_length=50)
    brand: str | None = Field(None, max_length=100)
    inventory: InventorySchema | None = None
    variants: list[VariantGroupSchema] | None = None
    images: list[ProductImageSchema] | None = None
    tags: list[str] | None = None
    specifications: dict[str, str] | None = None
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: str | None = None
    is_featured: bool | None = None
    is_digital: bool | None = None
    weight: float | None = Field(None, ge=0)


class SubmitReviewRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)


# --- Category Request Schemas ---


class CategoryAttributeSchema(BaseModel):
    name: str
    type: str = "text"
    options: list[str] | None = None
    required: bool = False


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Shoes",
                    "parent_id": "b1e0a9a4-43f3-4a4e-a1c2-0d9b2d5f7e11",
                    "description": "Footwear for every occasion",
                    "sort_order": 2,
                }
            ]
        }
    }

    name: str = Field(..., min_length=2, max_length=50)
    parent_id: str | None = None
    description: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=500)
    image_alt: str | None = Field(None, max_length=200)
    sort_order: int = 0
    is_active: bool = True
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)
    attributes: list[CategoryAttributeSchema] | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    parent_id: str | None = None
    description: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=500)
    image_alt: str | None = Field(None, max_length=200)
    is_active: bool | None = None
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)
    attributes: list[CategoryAttributeSchema] | None = None


class ReorderCategoryRequest(BaseModel):
    sort_order: int


class CategoryPosition(BaseModel):
    category_id: str
    sort_order: int


class ReorderCategoriesRequest(BaseModel):
    categories: list[CategoryPosition] = Field(..., min_length=1)


# --- Response Schemas ---


class ProductIdResponse(BaseModel):
    product_id: str


class ReviewIdResponse(BaseModel):
    review_id: str


class CategoryIdResponse(BaseModel):
    category_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
