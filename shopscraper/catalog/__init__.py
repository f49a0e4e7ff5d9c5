"""Product Catalog.

Provides the catalog models, natural-key repositories, the category
reconciler and the static category definitions.
"""

from shopscraper.catalog.definitions import BillaCategory, CategoryDefinition, CategoryDefinitionLoader, StoreConfig
from shopscraper.catalog.models import Category, Product, product_categories
from shopscraper.catalog.reconciler import CategoryNode, CategoryReconciler, flatten_definitions
from shopscraper.catalog.records import ProductRecord
from shopscraper.catalog.repository import CategoryRepository, ProductCategoryRepository, ProductRepository

__all__ = [
    # Definitions
    "BillaCategory",
    "CategoryDefinition",
    "CategoryDefinitionLoader",
    "StoreConfig",
    # Models
    "Category",
    "Product",
    "product_categories",
    "ProductRecord",
    # Repository
    "CategoryRepository",
    "ProductCategoryRepository",
    "ProductRepository",
    # Reconciler
    "CategoryNode",
    "CategoryReconciler",
    "flatten_definitions",
]
