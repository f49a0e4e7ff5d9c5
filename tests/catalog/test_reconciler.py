"""Tests for category tree reconciliation."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.catalog.definitions import CategoryDefinition
from shopscraper.catalog.reconciler import (
    CategoryNode,
    CategoryReconciler,
    flatten_definitions,
    foodora_category_key,
    foodora_category_slug,
)
from shopscraper.catalog.repository import CategoryRepository


@pytest.fixture
def fruit_tree() -> CategoryDefinition:
    return CategoryDefinition(
        id="971c4780-14f9-4df1-87c5-6386e0e0bc02",
        name="Ovoce a zelenina",
        children=[
            CategoryDefinition(
                id="12f0aeb7-55d3-4c81-92f7-00babe0d1532",
                name="Ovoce",
                children=[CategoryDefinition(id="aaaabbbb-0000", name="Jablka")],
            ),
            CategoryDefinition(id="2a65c386-468e-4db8-941e-7552d9b581ad", name="Zelenina"),
        ],
    )


class TestKeysAndSlugs:
    def test_key_carries_store_prefix(self) -> None:
        assert foodora_category_key("foodora-dmart", "abc") == "foodora-dmart-abc"

    def test_slug_uses_first_eight_id_characters(self) -> None:
        slug = foodora_category_slug(
            "foodora-dmart", "Ovoce a zelenina", "971c4780-14f9-4df1-87c5-6386e0e0bc02"
        )
        assert slug == "foodora-dmart-ovoce-a-zelenina-971c4780"


class TestFlattenDefinitions:
    def test_pre_order(self, fruit_tree: CategoryDefinition) -> None:
        """Parents come before their children, siblings keep their order."""
        names = [node.name for node in flatten_definitions([fruit_tree])]
        assert names == ["Ovoce a zelenina", "Ovoce", "Jablka", "Zelenina"]

    def test_empty(self) -> None:
        assert flatten_definitions([]) == []


class TestSaveCategoryTree:
    """Tests for saving predefined trees."""

    @pytest.mark.asyncio
    async def test_saves_parents_before_children(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        """Every node is stored with its parent's database id."""
        reconciler = CategoryReconciler(session)

        root_id = await reconciler.save_category_tree(fruit_tree, "foodora-dmart")

        repo = CategoryRepository(session)
        root = await repo.get_by_key("foodora-dmart-971c4780-14f9-4df1-87c5-6386e0e0bc02")
        fruit = await repo.get_by_key("foodora-dmart-12f0aeb7-55d3-4c81-92f7-00babe0d1532")
        apples = await repo.get_by_key("foodora-dmart-aaaabbbb-0000")
        vegetables = await repo.get_by_key("foodora-dmart-2a65c386-468e-4db8-941e-7552d9b581ad")

        assert root.id == root_id
        assert root.parent_id is None
        assert fruit.parent_id == root.id
        assert apples.parent_id == fruit.id
        assert vegetables.parent_id == root.id
        assert root.id < fruit.id < apples.id < vegetables.id

    @pytest.mark.asyncio
    async def test_is_idempotent(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        """Saving the same tree twice yields the same rows."""
        reconciler = CategoryReconciler(session)

        first = await reconciler.save_category_tree(fruit_tree, "foodora-dmart")
        second = await reconciler.save_category_tree(fruit_tree, "foodora-dmart")

        assert first == second
        assert await CategoryRepository(session).count() == 4

    @pytest.mark.asyncio
    async def test_same_tree_in_two_stores(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        """Store prefixes keep identical upstream trees apart."""
        reconciler = CategoryReconciler(session)

        dmart = await reconciler.save_category_tree(fruit_tree, "foodora-dmart")
        albert = await reconciler.save_category_tree(fruit_tree, "foodora-albert-florenc")

        assert dmart != albert
        assert await CategoryRepository(session).count() == 8

    @pytest.mark.asyncio
    async def test_attaches_root_to_given_parent(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        reconciler = CategoryReconciler(session)
        anchor = await reconciler.upsert_category(key="anchor", name="Anchor", slug="anchor")

        root_id = await reconciler.save_category_tree(fruit_tree, "foodora-dmart", parent_id=anchor.id)

        root = await CategoryRepository(session).get_by_id(root_id)
        assert root.parent_id == anchor.id

    @pytest.mark.asyncio
    async def test_childless_tree_returns_root_id(self, session: AsyncSession) -> None:
        reconciler = CategoryReconciler(session)
        leaf = CategoryDefinition(id="5b1e0c2d-8f3a-4e6b-9c7d-1a2b3c4d5e6f", name="Drogerie")

        root_id = await reconciler.save_category_tree(leaf, "foodora-dmart")

        root = await CategoryRepository(session).get_by_key(foodora_category_key("foodora-dmart", leaf.id))
        assert root is not None
        assert root_id == root.id
        assert root.parent_id is None
        assert await CategoryRepository(session).count() == 1


class TestSaveCategoryPath:
    """Tests for root-to-leaf category paths."""

    @pytest.mark.asyncio
    async def test_path_segments_are_chained(self, session: AsyncSession) -> None:
        reconciler = CategoryReconciler(session)
        path = [
            CategoryNode(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165", order_hint="0.1"),
            CategoryNode(key="1166", name="Ovoce", slug="ovoce-1166"),
            CategoryNode(key="1170", name="Jablka", slug="jablka-1170"),
        ]

        ids = await reconciler.save_category_path(path)

        repo = CategoryRepository(session)
        top, middle, leaf = [await repo.get_by_id(pk) for pk in ids]
        assert top.parent_id is None
        assert top.order_hint == "0.1"
        assert middle.parent_id == top.id
        assert leaf.parent_id == middle.id

    @pytest.mark.asyncio
    async def test_parallel_paths_share_prefix(self, session: AsyncSession) -> None:
        """Shared segments are stored once and reported once."""
        reconciler = CategoryReconciler(session)
        top = CategoryNode(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165")
        paths = [
            [top, CategoryNode(key="1166", name="Ovoce", slug="ovoce-1166")],
            [top, CategoryNode(key="1167", name="Zelenina", slug="zelenina-1167")],
        ]

        ids = await reconciler.save_category_paths(paths)

        assert len(ids) == 3
        assert await CategoryRepository(session).count() == 3


class TestDescendants:
    """Tests for descendant expansion."""

    @pytest.mark.asyncio
    async def test_breadth_first_order(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        """The category comes first, then its children level by level."""
        reconciler = CategoryReconciler(session)
        await reconciler.save_category_tree(fruit_tree, "foodora-dmart")

        keys = await reconciler.get_all_descendant_category_keys(
            "foodora-dmart-971c4780-14f9-4df1-87c5-6386e0e0bc02"
        )

        assert keys == [
            "foodora-dmart-971c4780-14f9-4df1-87c5-6386e0e0bc02",
            "foodora-dmart-12f0aeb7-55d3-4c81-92f7-00babe0d1532",
            "foodora-dmart-2a65c386-468e-4db8-941e-7552d9b581ad",
            "foodora-dmart-aaaabbbb-0000",
        ]

    @pytest.mark.asyncio
    async def test_resolves_by_slug(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        reconciler = CategoryReconciler(session)
        await reconciler.save_category_tree(fruit_tree, "foodora-dmart")

        ids = await reconciler.get_all_descendant_category_ids("foodora-dmart-ovoce-12f0aeb7")

        assert len(ids) == 2

    @pytest.mark.asyncio
    async def test_leaf_returns_itself(
        self, session: AsyncSession, fruit_tree: CategoryDefinition
    ) -> None:
        reconciler = CategoryReconciler(session)
        await reconciler.save_category_tree(fruit_tree, "foodora-dmart")

        keys = await reconciler.get_all_descendant_category_keys("foodora-dmart-aaaabbbb-0000")

        assert keys == ["foodora-dmart-aaaabbbb-0000"]

    @pytest.mark.asyncio
    async def test_unknown_category(self, session: AsyncSession) -> None:
        reconciler = CategoryReconciler(session)

        assert await reconciler.get_all_descendant_category_keys("missing") == []
        assert await reconciler.get_all_descendant_category_ids("missing") == []

    @pytest.mark.asyncio
    async def test_parent_cycle_terminates(self, session: AsyncSession) -> None:
        """A malformed parent cycle yields each category once."""
        reconciler = CategoryReconciler(session)
        a = await reconciler.upsert_category(key="a", name="A", slug="a")
        b = await reconciler.upsert_category(key="b", name="B", slug="b", parent_id=a.id)
        await reconciler.upsert_category(key="a", name="A", slug="a", parent_id=b.id)

        keys = await reconciler.get_all_descendant_category_keys("a")

        assert keys == ["a", "b"]
