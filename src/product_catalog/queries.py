"""Read-side queries for the catalog, served from the product card projection."""

import json

from protean.utils.globals import current_domain

from product_catalog.category.category import Category
from product_catalog.product.product import Product, ProductStatus
from product_catalog.projections.product_card import ProductCard
from shared.paging import paginate


def _card_dict(card) -> dict:
    data = card.to_dict()
    data["category_ids"] = json.loads(card.category_ids) if card.category_ids else []
    data["tags"] = json.loads(card.tags) if card.tags else []
    return data


def get_product(product_id: str) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    data = product.to_dict()
    data["category_ids"] = product.category_list()
    data["tags"] = product.tag_list()
    return data


def list_products(status: str | None = None, category_id: str | None = None, page: int = 1, page_size: int = 20):
    dao = current_domain.repository_for(ProductCard)._dao
    if status:
        cards = dao.query.filter(status=ProductStatus.from_string(status).value).all().items
    else:
        cards = dao.query.all().items

    if category_id:
        cards = [c for c in cards if category_id in (json.loads(c.category_ids) if c.category_ids else [])]

    cards = sorted(cards, key=lambda c: c.title.lower())
    result = paginate(cards, page, page_size)
    result["items"] = [_card_dict(c) for c in result["items"]]
    return result


def search_products(term: str, published_only: bool = True, page: int = 1, page_size: int = 20):
    """Case-insensitive substring match on title, brand and tags."""
    needle = (term or "").strip().lower()
    dao = current_domain.repository_for(ProductCard)._dao
    cards = dao.query.all().items

    def matches(card):
        if published_only and card.status != ProductStatus.PUBLISHED.value:
            return False
        if not needle:
            return True
        haystack = [card.title or "", card.brand or ""] + (json.loads(card.tags) if card.tags else [])
        return any(needle in value.lower() for value in haystack)

    hits = sorted((c for c in cards if matches(c)), key=lambda c: c.title.lower())
    result = paginate(hits, page, page_size)
    result["items"] = [_card_dict(c) for c in result["items"]]
    return result


def list_categories(include_inactive: bool = False) -> list[dict]:
    dao = current_domain.repository_for(Category)._dao
    categories = dao.query.all().items
    if not include_inactive:
        categories = [c for c in categories if c.is_active]
    return [c.to_dict() for c in sorted(categories, key=lambda c: (c.level, c.position, c.name))]
