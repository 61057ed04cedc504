"""API layer module.

Contains FastAPI routers and response schemas.
"""

from catalog_search.api.health import router as health_router
from catalog_search.api.products import router as products_router

__all__ = [
    "health_router",
    "products_router",
]
