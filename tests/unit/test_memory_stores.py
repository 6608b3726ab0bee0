"""인메모리 저장소 / 카탈로그 로더 테스트"""

from __future__ import annotations

import pytest

from inkinspot.engine import Budget, ErrorKind, ImageCollection, ImageVector, SearchError, with_cancel
from inkinspot.stores import InMemoryImageStore, InMemoryVectorStore, load_catalog
from tests.fixtures import QUERIES, TATTOOS


def _vector(vector_id: str) -> ImageVector:
    data = TATTOOS[vector_id]
    return ImageVector(id=vector_id, style=data["style"], subject=data["subject"], area=data["area"])


def _collection(collection_id: str) -> ImageCollection:
    return ImageCollection(id=collection_id, urls=tuple(TATTOOS[collection_id]["urls"]))


@pytest.fixture
def seeded_vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore([_vector(i) for i in TATTOOS], match_threshold=85)


@pytest.fixture
def seeded_image_store() -> InMemoryImageStore:
    return InMemoryImageStore([_collection(i) for i in TATTOOS])


class TestImageVector:
    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            ImageVector(id="bad", style={"bw": -1})

    def test_zero_weight_allowed(self):
        assert ImageVector(id="ok", area={"arm": 0}).area == {"arm": 0}


class TestInMemoryImageStore:
    @pytest.mark.asyncio
    async def test_requested_order(self, seeded_image_store):
        result = await seeded_image_store.get_collections_by_ids(Budget.background(), ["Z", "X"])
        assert [c.id for c in result] == ["Z", "X"]

    @pytest.mark.asyncio
    async def test_unknown_ids_skipped(self, seeded_image_store):
        result = await seeded_image_store.get_collections_by_ids(Budget.background(), ["nope", "Y"])
        assert [c.id for c in result] == ["Y"]

    @pytest.mark.asyncio
    async def test_empty_store(self):
        with pytest.raises(SearchError) as exc_info:
            await InMemoryImageStore().get_collections_by_ids(Budget.background(), ["X"])
        assert exc_info.value.kind == ErrorKind.STORE_EMPTY

    @pytest.mark.asyncio
    async def test_honours_finished_budget(self, seeded_image_store):
        budget, release = with_cancel(Budget.background())
        release()

        with pytest.raises(SearchError) as exc_info:
            await seeded_image_store.get_collections_by_ids(budget, ["X"])
        assert exc_info.value.kind == ErrorKind.CANCELLED

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            InMemoryImageStore().add_collection(ImageCollection(id=""))


class TestInMemoryVectorStore:
    @pytest.mark.asyncio
    async def test_best_match_first(self, seeded_vector_store):
        ids = await seeded_vector_store.get_ids_by_query(Budget.background(), QUERIES["terse"])
        assert ids[0] == "X"
        assert ids == ["X", "Y", "Z"]

    @pytest.mark.asyncio
    async def test_equivalent_queries_same_ids(self, seeded_vector_store):
        results = [
            await seeded_vector_store.get_ids_by_query(Budget.background(), q)
            for q in QUERIES.values()
        ]
        assert all(r == results[0] for r in results)

    @pytest.mark.asyncio
    async def test_fuzzy_label_match(self, seeded_vector_store):
        """오타(realstic)도 임계값 이상이면 매칭"""
        ids = await seeded_vector_store.get_ids_by_query(Budget.background(), "realstic")
        assert ids == ["X"]

    @pytest.mark.asyncio
    async def test_no_match(self, seeded_vector_store):
        assert await seeded_vector_store.get_ids_by_query(Budget.background(), "dragon") == []

    @pytest.mark.asyncio
    async def test_empty_query(self, seeded_vector_store):
        assert await seeded_vector_store.get_ids_by_query(Budget.background(), "   ") == []


class TestLoadCatalog:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "collections:\n"
            "  - id: X\n"
            "    urls: [lion_realistic_bw_chest.jpg]\n"
            "vectors:\n"
            "  - id: X\n"
            "    style: {realistic: 100, bw: 100}\n"
            "    subject: {lion: 100}\n"
            "    area: {chest: 100}\n",
            encoding="utf-8",
        )
        image_store = InMemoryImageStore()
        vector_store = InMemoryVectorStore()

        counts = load_catalog(str(path), image_store, vector_store)

        assert counts == (1, 1)
        assert len(image_store) == 1
        assert len(vector_store) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(str(tmp_path / "none.yaml"), InMemoryImageStore(), InMemoryVectorStore())

    def test_negative_weight_rejected(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("vectors:\n  - id: X\n    style: {bw: -5}\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_catalog(str(path), InMemoryImageStore(), InMemoryVectorStore())

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_catalog(str(path), InMemoryImageStore(), InMemoryVectorStore())
