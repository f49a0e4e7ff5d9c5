"""Category hierarchy reconciliation.

Keeps the category forest consistent while scraper runs re-supply
overlapping trees: predefined trees from the data assets, parallel
category paths attached to Billa products, and the subcategory groupings
Foodora returns per request. Every node is upserted by its natural key,
parents are always stored before their children.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog
from slugify import slugify
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.catalog.definitions import CategoryDefinition
from shopscraper.catalog.models import Category
from shopscraper.catalog.repository import CategoryRepository

logger = structlog.get_logger()


@dataclass
class CategoryNode:
    """One segment of an upstream category path."""

    key: str
    name: str
    slug: str
    order_hint: str | None = None


def foodora_category_key(store_code: str, upstream_id: str) -> str:
    return f"{store_code}-{upstream_id}"


def foodora_category_slug(store_code: str, name: str, upstream_id: str) -> str:
    """Build a unique slug for a Foodora category.

    Names repeat across trees ("Ovoce" under several parents), so the
    slug carries the first eight characters of the upstream id.
    """
    return f"{store_code}-{slugify(name)}-{upstream_id[:8]}"


def flatten_definitions(definitions: Iterable[CategoryDefinition]) -> list[CategoryDefinition]:
    """Flatten nested definitions in pre-order (parent before children).

    Args:
        definitions: Top-level definitions.

    Returns:
        All definitions including nested children.
    """
    flat: list[CategoryDefinition] = []
    stack = list(reversed(list(definitions)))
    while stack:
        node = stack.pop()
        flat.append(node)
        stack.extend(reversed(node.children))
    return flat


class CategoryReconciler:
    """Upserts category trees and expands categories to their descendants.

    Example usage:
        async with async_session_factory() as session:
            reconciler = CategoryReconciler(session)
            root_id = await reconciler.save_category_tree(definition, "foodora-dmart")
            keys = await reconciler.get_all_descendant_category_keys(
                "foodora-dmart-971c4780-14f9-4df1-87c5-6386e0e0bc02"
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize reconciler with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.categories = CategoryRepository(session)

    async def upsert_category(
        self,
        key: str,
        name: str,
        slug: str,
        order_hint: str | None = None,
        parent_id: int | None = None,
    ) -> Category:
        """Insert or update a category by natural key.

        Idempotent: repeating the call with identical input changes
        nothing but updated_at.
        """
        return await self.categories.upsert(
            key=key,
            name=name,
            slug=slug,
            order_hint=order_hint,
            parent_id=parent_id,
        )

    async def save_category_tree(
        self,
        definition: CategoryDefinition,
        store_code: str,
        parent_id: int | None = None,
    ) -> int:
        """Save a predefined tree, parents first.

        Walks the tree in pre-order with an explicit worklist so each
        child is upserted with the database id of its already stored
        parent.

        Args:
            definition: Root of the tree.
            store_code: Store prefix for keys and slugs.
            parent_id: Database id to attach the root to.

        Returns:
            Database id of the root category.
        """
        root = await self._upsert_definition(definition, store_code, parent_id)
        worklist: list[tuple[CategoryDefinition, int]] = [
            (child, root.id) for child in reversed(definition.children)
        ]

        while worklist:
            node, node_parent_id = worklist.pop()
            category = await self._upsert_definition(node, store_code, node_parent_id)
            for child in reversed(node.children):
                worklist.append((child, category.id))

        logger.debug(
            "Saved category tree",
            store_code=store_code,
            root=definition.name,
            nodes=len(flatten_definitions([definition])),
        )
        return root.id

    async def _upsert_definition(
        self,
        node: CategoryDefinition,
        store_code: str,
        parent_id: int | None,
    ) -> Category:
        return await self.upsert_category(
            key=foodora_category_key(store_code, node.id),
            name=node.name,
            slug=foodora_category_slug(store_code, node.name, node.id),
            parent_id=parent_id,
        )

    async def save_category_path(self, path: Sequence[CategoryNode]) -> list[int]:
        """Save a root-to-leaf path, each segment parented to the previous one.

        Args:
            path: Path segments, root first.

        Returns:
            Database ids of the segments in path order.
        """
        ids: list[int] = []
        parent_id: int | None = None
        for node in path:
            category = await self.upsert_category(
                key=node.key,
                name=node.name,
                slug=node.slug,
                order_hint=node.order_hint,
                parent_id=parent_id,
            )
            ids.append(category.id)
            parent_id = category.id
        return ids

    async def save_category_paths(self, paths: Sequence[Sequence[CategoryNode]]) -> list[int]:
        """Save parallel category paths.

        Returns:
            Ids of every segment of every path, deduplicated, first
            occurrence order.
        """
        ids: list[int] = []
        for path in paths:
            ids.extend(await self.save_category_path(path))
        return list(dict.fromkeys(ids))

    async def resolve(self, key_or_slug: str) -> Category | None:
        """Find a category by key, falling back to slug."""
        category = await self.categories.get_by_key(key_or_slug)
        if category is None:
            category = await self.categories.get_by_slug(key_or_slug)
        return category

    async def get_descendants(self, key_or_slug: str) -> list[Category]:
        """Breadth-first walk from a category through all its descendants.

        The visited set keeps malformed parent cycles from looping.

        Args:
            key_or_slug: Category key or slug.

        Returns:
            The category followed by its descendants level by level,
            empty when the category does not exist.
        """
        root = await self.resolve(key_or_slug)
        if root is None:
            return []

        found = [root]
        visited = {root.id}
        frontier = [root.id]

        while frontier:
            children = await self.categories.get_children(frontier)
            frontier = []
            for child in children:
                if child.id in visited:
                    continue
                visited.add(child.id)
                found.append(child)
                frontier.append(child.id)

        return found

    async def get_all_descendant_category_keys(self, key_or_slug: str) -> list[str]:
        """Own key plus the keys of all transitive children."""
        return [category.key for category in await self.get_descendants(key_or_slug)]

    async def get_all_descendant_category_ids(self, key_or_slug: str) -> list[int]:
        """Own id plus the ids of all transitive children."""
        return [category.id for category in await self.get_descendants(key_or_slug)]
