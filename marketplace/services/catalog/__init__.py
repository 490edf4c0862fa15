from .catalog_service import CatalogListing, CatalogService, PLACEHOLDER_COURSES

__all__ = ["CatalogListing", "CatalogService", "PLACEHOLDER_COURSES"]
