"""Product aggregate root with image, variant group and review entities.

Inventory lives in an immutable value object that is swapped on every stock
movement. Rating average and count are stored for sorting and filtering but
are only ever written by recomputing them from the review list.
"""

import json
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.shared.errors import InsufficientStock
from storefront.shared.money import to_amount, to_decimal


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


# Attributes an administrator may change through ``update_details``
EDITABLE_FIELDS = (
    "name",
    "description",
    "price",
    "compare_price",
    "category_id",
    "brand",
    "status",
    "is_featured",
    "is_digital",
    "weight",
    "seo_title",
    "seo_description",
)


def compute_rating(ratings) -> tuple[float, int]:
    """Average rounded to one decimal place, and the number of ratings."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    average = (Decimal(sum(ratings)) / len(ratings)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(average), len(ratings)


def normalize_tags(tags) -> list[str]:
    normalized = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def _parse_options(options_json):
    try:
        options = json.loads(options_json)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({"variants": ["Variant options must be valid JSON"]}) from None

    if not isinstance(options, list) or not options:
        raise ValidationError({"variants": ["Every variant group needs at least one option"]})

    for option in options:
        if not isinstance(option, dict) or not str(option.get("value") or "").strip():
            raise ValidationError({"variants": ["Every variant option needs a value"]})
        modifier = option.get("price_modifier", 0)
        if isinstance(modifier, bool) or not isinstance(modifier, int | float):
            raise ValidationError({"variants": [f"Price modifier for '{option['value']}' must be a number"]})

    return options


@storefront.value_object(part_of="Product")
class Inventory:
    """Stock on hand and how it is tracked."""

    quantity: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)
    track_quantity: Boolean(default=True)


@storefront.entity(part_of="Product")
class ProductImage:
    url: String(required=True, max_length=500)
    alt_text: String(max_length=200)
    is_primary: Boolean(default=False)


@storefront.entity(part_of="Product")
class VariantGroup:
    """A named option group such as "Size", each option carrying a price modifier.

    ``options`` holds a JSON array: [{"value": "XL", "price_modifier": 2.5}, ...]
    """

    name: String(required=True, max_length=50)
    options: Text(required=True)

    @invariant.post
    def options_must_be_valid(self):
        _parse_options(self.options)

    def option_list(self) -> list[dict]:
        return json.loads(self.options)

    def find_option(self, value):
        return next((option for option in self.option_list() if option["value"] == value), None)


@storefront.entity(part_of="Product")
class Review:
    user_id: Identifier(required=True)
    user_name: String(max_length=100)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: String(required=True, max_length=500)
    created_at: DateTime(default=datetime.now)


@storefront.aggregate
class Product:
    """A sellable item in the catalogue."""

    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    category_id: Identifier(required=True)
    brand: String(max_length=100)
    sku: String(required=True, max_length=50)
    images: HasMany(ProductImage)
    inventory: ValueObject(Inventory)
    variants: HasMany(VariantGroup)
    reviews: HasMany(Review)
    rating_average: Float(default=0.0)
    rating_count: Integer(default=0)
    tags: Text()  # JSON array of lower-cased tags
    specifications: Text()  # JSON object
    search_text: Text()
    seo_title: String(max_length=60)
    seo_description: String(max_length=160)
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    is_featured: Boolean(default=False)
    is_digital: Boolean(default=False)
    weight: Float(min_value=0.0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def only_one_primary_image(self):
        if len([image for image in self.images if image.is_primary]) > 1:
            raise ValidationError({"images": ["Only one image can be marked as primary"]})

    @invariant.post
    def variant_group_names_must_be_unique(self):
        names = [group.name.lower() for group in self.variants]
        if len(names) != len(set(names)):
            raise ValidationError({"variants": ["Variant group names must be unique"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        category_id,
        sku,
        compare_price=None,
        brand=None,
        inventory=None,
        variants=None,
        images=None,
        tags=None,
        specifications=None,
        seo_title=None,
        seo_description=None,
        status=ProductStatus.ACTIVE.value,
        is_featured=False,
        is_digital=False,
        weight=None,
    ):
        from storefront.catalogue.product.events import ProductCreated

        now = datetime.now()
        inventory = inventory or {}

        product = cls(
            name=name,
            description=description,
            price=to_amount(price),
            compare_price=to_amount(compare_price) if compare_price is not None else None,
            category_id=category_id,
            brand=brand,
            sku=sku,
            inventory=Inventory(
                quantity=inventory.get("quantity", 0),
                low_stock_threshold=inventory.get("low_stock_threshold", 10),
                track_quantity=inventory.get("track_quantity", True),
            ),
            tags=json.dumps(normalize_tags(tags)),
            specifications=json.dumps(specifications) if specifications else None,
            seo_title=seo_title,
            seo_description=seo_description,
            status=status or ProductStatus.ACTIVE.value,
            is_featured=bool(is_featured),
            is_digital=bool(is_digital),
            weight=weight,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(product):
            product.replace_variants(variants or [])
            product.replace_images(images or [])
        product.refresh_search_text()

        product.raise_(
            ProductCreated(
                product_id=product.id,
                sku=product.sku,
                name=product.name,
                category_id=product.category_id,
                price=product.price,
                status=product.status,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def sale_percentage(self) -> int:
        if not self.compare_price or self.compare_price <= self.price:
            return 0
        compare = to_decimal(self.compare_price)
        ratio = (compare - to_decimal(self.price)) / compare * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def is_in_stock(self) -> bool:
        return not self.inventory.track_quantity or self.inventory.quantity > 0

    @property
    def is_low_stock(self) -> bool:
        return (
            self.inventory.track_quantity
            and 0 < self.inventory.quantity <= self.inventory.low_stock_threshold
        )

    @property
    def primary_image(self) -> str | None:
        primary = next((image for image in self.images if image.is_primary), None)
        if primary is None and self.images:
            primary = self.images[0]
        return primary.url if primary else None

    @property
    def tag_list(self) -> list[str]:
        return json.loads(self.tags) if self.tags else []

    @property
    def specification_map(self) -> dict:
        return json.loads(self.specifications) if self.specifications else {}

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial update; ``None`` values leave attributes untouched."""
        from storefront.catalogue.product.events import ProductDetailsUpdated, ProductPriceChanged

        previous_price = self.price
        changed = []

        with atomic_change(self):
            for field_name in EDITABLE_FIELDS:
                value = changes.get(field_name)
                if value is None:
                    continue
                if field_name in ("price", "compare_price"):
                    value = to_amount(value)
                if getattr(self, field_name) != value:
                    setattr(self, field_name, value)
                    changed.append(field_name)

            if changes.get("tags") is not None:
                self.tags = json.dumps(normalize_tags(changes["tags"]))
                changed.append("tags")
            if changes.get("specifications") is not None:
                self.specifications = json.dumps(changes["specifications"])
                changed.append("specifications")
            if changes.get("inventory") is not None:
                self.set_inventory(**changes["inventory"])
                changed.append("inventory")
            if changes.get("variants") is not None:
                self.replace_variants(changes["variants"])
                changed.append("variants")
            if changes.get("images") is not None:
                self.replace_images(changes["images"])
                changed.append("images")

        if not changed:
            return []

        self.refresh_search_text()
        self.updated_at = datetime.now()

        self.raise_(ProductDetailsUpdated(product_id=self.id, changed_fields=json.dumps(changed)))
        if "price" in changed:
            self.raise_(ProductPriceChanged(product_id=self.id, previous_price=previous_price, new_price=self.price))

        return changed

    def refresh_search_text(self):
        parts = [self.name, self.description, self.brand, " ".join(self.tag_list)]
        self.search_text = " ".join(part for part in parts if part).lower()

    def replace_variants(self, groups):
        for group in list(self.variants):
            self.remove_variants(group)

        for group in groups:
            options = group.get("options", [])
            self.add_variants(
                VariantGroup(
                    name=group.get("name"),
                    options=options if isinstance(options, str) else json.dumps(options),
                )
            )

    def replace_images(self, images):
        for image in list(self.images):
            self.remove_images(image)

        has_primary = any(image.get("is_primary") for image in images)
        for index, image in enumerate(images):
            self.add_images(
                ProductImage(
                    url=image.get("url"),
                    alt_text=image.get("alt_text") or self.name,
                    # First image becomes primary unless one is flagged
                    is_primary=bool(image.get("is_primary")) if has_primary else index == 0,
                )
            )

    def resolve_variant_selections(self, selections) -> list[dict]:
        """Match requested {name, value} pairs against this product's options.

        Unknown groups or values are dropped. Each match captures the option's
        current price modifier.
        """
        resolved = []
        for selection in selections or []:
            group = next((g for g in self.variants if g.name == selection.get("name")), None)
            if group is None:
                continue
            option = group.find_option(selection.get("value"))
            if option is None:
                continue
            resolved.append(
                {
                    "name": group.name,
                    "value": option["value"],
                    "price_modifier": to_amount(option.get("price_modifier", 0)),
                }
            )
        return resolved

    # -------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------
    def set_inventory(self, quantity=None, low_stock_threshold=None, track_quantity=None):
        current = self.inventory or Inventory()
        self.inventory = Inventory(
            quantity=current.quantity if quantity is None else quantity,
            low_stock_threshold=current.low_stock_threshold if low_stock_threshold is None else low_stock_threshold,
            track_quantity=current.track_quantity if track_quantity is None else track_quantity,
        )

    def has_stock_for(self, quantity) -> bool:
        return not self.inventory.track_quantity or self.inventory.quantity >= quantity

    def remove_stock(self, quantity, reason="sale"):
        """Decrement tracked stock, refusing to go below zero."""
        if not self.inventory.track_quantity:
            return
        if not self.has_stock_for(quantity):
            raise InsufficientStock(
                {"quantity": [f"Only {self.inventory.quantity} of {self.name} available in stock"]}
            )
        self._move_stock(-quantity, reason)

    def restore_stock(self, quantity, reason="restock"):
        if not self.inventory.track_quantity:
            return
        self._move_stock(quantity, reason)

    def _move_stock(self, delta, reason):
        from storefront.catalogue.product.events import StockLevelChanged

        previous = self.inventory.quantity
        self.set_inventory(quantity=previous + delta)
        self.updated_at = datetime.now()

        self.raise_(
            StockLevelChanged(
                product_id=self.id,
                previous_quantity=previous,
                new_quantity=self.inventory.quantity,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def add_review(self, user_id, rating, comment, user_name=None):
        from storefront.catalogue.product.events import ProductReviewed

        if any(str(review.user_id) == str(user_id) for review in self.reviews):
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = Review(
            user_id=user_id,
            user_name=user_name,
            rating=rating,
            comment=comment,
            created_at=datetime.now(),
        )
        self.add_reviews(review)
        self.refresh_rating()
        self.updated_at = datetime.now()

        self.raise_(
            ProductReviewed(
                product_id=self.id,
                review_id=review.id,
                user_id=user_id,
                rating=rating,
                rating_average=self.rating_average,
                rating_count=self.rating_count,
            )
        )
        return review

    def refresh_rating(self):
        self.rating_average, self.rating_count = compute_rating(review.rating for review in self.reviews)
