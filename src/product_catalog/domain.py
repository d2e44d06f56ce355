"""Product Catalog bounded context: products, variants, media and categories.

Owns what the storefront sells. Products move through a draft, scheduled,
published and archived lifecycle; the product card projection backs listing
and search.
"""

import structlog
from protean.domain import Domain

product_catalog = Domain(name="product_catalog")

logger = structlog.get_logger(__name__)
