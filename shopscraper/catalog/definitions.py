"""Static category definitions and store configuration.

Predefined category trees and the list of scraped stores live as JSON
assets under ``catalog/data``. Foodora trees are nested:

    [
      {"id": "971c4780-...", "name": "Ovoce a zelenina", "children": [
        {"id": "12f0aeb7-...", "name": "Ovoce"}
      ]}
    ]

Billa categories are a flat list of upstream slugs such as
``"ovoce-a-zelenina-1165"``.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DATA_DIR = Path(__file__).parent / "data"

DEFAULT_STORE = "BILLA"


class CategoryDefinition(BaseModel):
    """A node of a predefined category tree.

    Attributes:
        id: Upstream category identifier.
        name: Category name.
        number_of_products: Product count reported when the tree was captured.
        type: Upstream category type.
        children: Nested subcategories.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    number_of_products: int | None = Field(default=None, alias="numberOfProducts")
    type: str = "DEFAULT"
    children: list["CategoryDefinition"] = Field(default_factory=list)


class BillaCategory(BaseModel):
    """A top-level Billa category addressed by its upstream slug."""

    name: str
    slug: str

    @classmethod
    def from_slug(cls, slug: str) -> "BillaCategory":
        """Derive the name by dropping the trailing numeric id.

        Args:
            slug: Upstream slug, e.g. "ovoce-a-zelenina-1165".

        Returns:
            Category with name "ovoce-a-zelenina".
        """
        slug = slug.strip()
        return cls(name="-".join(slug.split("-")[:-1]), slug=slug)


class StoreConfig(BaseModel):
    """A scraped store.

    Attributes:
        store: Store code stored on products (e.g., "FOODORA_DMART").
        name: Display name.
        source: Upstream catalog family.
        store_code: Prefix for category keys and slugs.
        vendor_code: Foodora vendor id.
        categories_file: Category definitions asset.
        enabled: Whether the store is scraped by default.
    """

    store: str
    name: str
    source: Literal["billa", "foodora"]
    store_code: str
    vendor_code: str | None = None
    categories_file: str | None = None
    enabled: bool = True


_tree_adapter = TypeAdapter(list[CategoryDefinition])
_billa_adapter = TypeAdapter(list[str])
_stores_adapter = TypeAdapter(list[StoreConfig])


class CategoryDefinitionLoader:
    """Loader for the JSON category and store assets.

    Example usage:
        loader = CategoryDefinitionLoader()
        store = loader.get_store("FOODORA_DMART")
        tree = loader.load_store_tree(store)
    """

    def __init__(self, data_dir: Path | str | None = None) -> None:
        """Initialize loader.

        Args:
            data_dir: Directory holding the assets, defaults to the bundled data.
        """
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self._stores: list[StoreConfig] | None = None

    def _read(self, filename: str) -> bytes:
        return (self.data_dir / filename).read_bytes()

    def load_stores(self) -> list[StoreConfig]:
        """Load all configured stores."""
        if self._stores is None:
            self._stores = _stores_adapter.validate_json(self._read("stores.json"))
        return self._stores

    def get_store(self, store: str) -> StoreConfig | None:
        for config in self.load_stores():
            if config.store == store:
                return config
        return None

    def get_foodora_stores(self, include_disabled: bool = False) -> list[StoreConfig]:
        return [
            config
            for config in self.load_stores()
            if config.source == "foodora" and (include_disabled or config.enabled)
        ]

    def get_store_for_slug(self, slug: str) -> str:
        """Determine which store a category belongs to by its slug prefix.

        Foodora category slugs carry the store code as prefix, anything
        else belongs to the Billa catalog.

        Args:
            slug: Category slug.

        Returns:
            Store code.
        """
        foodora_stores = sorted(
            self.get_foodora_stores(include_disabled=True),
            key=lambda config: len(config.store_code),
            reverse=True,
        )
        for config in foodora_stores:
            if slug.startswith(f"{config.store_code}-"):
                return config.store
        return DEFAULT_STORE

    def load_tree(self, filename: str) -> list[CategoryDefinition]:
        """Load a nested category tree asset."""
        return _tree_adapter.validate_json(self._read(filename))

    def load_store_tree(self, config: StoreConfig) -> list[CategoryDefinition]:
        """Load the category tree configured for a Foodora store.

        Args:
            config: Store configuration.

        Returns:
            Top-level definitions, empty when the store has no tree.
        """
        if not config.categories_file:
            return []
        return self.load_tree(config.categories_file)

    def load_billa_categories(self, filename: str = "billa_categories.json") -> list[BillaCategory]:
        """Load the Billa top-level categories, skipping blank entries."""
        slugs = _billa_adapter.validate_json(self._read(filename))
        return [BillaCategory.from_slug(slug) for slug in slugs if slug.strip()]
