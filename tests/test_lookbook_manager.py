"""Tests for the lookbook manager: variations, cascades, boards, export/import."""

import pytest

from conftest import look_draft
from lookstudio.core.errors import (
    ConstraintViolationError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    StoreUnavailableError,
)
from lookstudio.lookbook import LookbookManager, generate_public_id
from lookstudio.schemas import Visibility
from lookstudio.store import EntityKind


@pytest.fixture
def manager(store, gateway):
    return LookbookManager(store, gateway)


class TestVariations:

    @pytest.mark.asyncio
    async def test_add_variation_seeds_primary(self, manager, saved_look, store):
        look = await manager.add_variation(saved_look.id, "F2")

        assert look.variations == ["F1", "F2"]
        assert look.final_image == "F1"
        assert (await store.get(EntityKind.LOOK, saved_look.id)).variations == ["F1", "F2"]

    @pytest.mark.asyncio
    async def test_add_duplicate_is_noop(self, manager, saved_look):
        await manager.add_variation(saved_look.id, "F2")
        look = await manager.add_variation(saved_look.id, "F2")

        assert look.variations == ["F1", "F2"]

    @pytest.mark.asyncio
    async def test_promote_variation(self, manager, saved_look, store):
        await manager.add_variation(saved_look.id, "F2")
        look = await manager.promote_variation(saved_look.id, "F2")

        assert look.final_image == "F2"
        assert "F1" in look.variations
        assert (await store.get(EntityKind.LOOK, saved_look.id)).final_image == "F2"

    @pytest.mark.asyncio
    async def test_promote_unknown_leaves_look_unchanged(self, manager, saved_look, store):
        with pytest.raises(InvalidStateError):
            await manager.promote_variation(saved_look.id, "F9")

        assert await store.get(EntityKind.LOOK, saved_look.id) == saved_look

    @pytest.mark.asyncio
    async def test_variation_on_missing_look(self, manager):
        with pytest.raises(NotFoundError):
            await manager.add_variation(42, "F2")


class TestEdit:

    @pytest.mark.asyncio
    async def test_edit_adds_variation(self, manager, saved_look, gateway):
        look, image = await manager.edit_look(saved_look.id, "  make it red  ")

        assert gateway.edits == [("F1", "make it red", None)]
        assert image == "F1~edit1"
        assert look.final_image == "F1"
        assert look.variations == ["F1", "F1~edit1"]

    @pytest.mark.asyncio
    async def test_edit_from_known_variation(self, manager, saved_look, gateway):
        await manager.add_variation(saved_look.id, "F2")
        await manager.edit_look(saved_look.id, "shorter sleeves", source_image="F2", guide_image="G")

        assert gateway.edits == [("F2", "shorter sleeves", "G")]

    @pytest.mark.asyncio
    async def test_edit_from_unknown_image(self, manager, saved_look, gateway):
        with pytest.raises(InvalidStateError):
            await manager.edit_look(saved_look.id, "x", source_image="elsewhere")
        assert gateway.edits == []

    @pytest.mark.asyncio
    async def test_edit_needs_instruction(self, manager, saved_look):
        with pytest.raises(InvalidInputError):
            await manager.edit_look(saved_look.id, "   ")


class TestDeleteLook:

    @pytest.mark.asyncio
    async def test_cascade_keeps_empty_boards(self, manager, store, products):
        look_a = await store.add(EntityKind.LOOK, look_draft(products, final_image="FA"))
        look_b = await store.add(EntityKind.LOOK, look_draft(products, final_image="FB"))
        both = await manager.create_lookboard("Both", [look_a.id, look_b.id])
        only_a = await manager.create_lookboard("Only A", [look_a.id])
        only_b = await manager.create_lookboard("Only B", [look_b.id])

        changed = await manager.delete_look(look_a.id)

        assert {b.id for b in changed} == {both.id, only_a.id}
        assert (await store.get(EntityKind.LOOKBOARD, both.id)).look_ids == [look_b.id]
        assert (await store.get(EntityKind.LOOKBOARD, only_a.id)).look_ids == []
        assert (await store.get(EntityKind.LOOKBOARD, only_b.id)).look_ids == [look_b.id]
        with pytest.raises(NotFoundError):
            await store.get(EntityKind.LOOK, look_a.id)

    @pytest.mark.asyncio
    async def test_failed_cascade_logs_leftover_boards(
        self, manager, store, products, monkeypatch, caplog
    ):
        look = await store.add(EntityKind.LOOK, look_draft(products))
        first = await manager.create_lookboard("First", [look.id])
        second = await manager.create_lookboard("Second", [look.id])

        original_put = store.put
        calls = []

        async def flaky_put(kind, entity):
            calls.append(entity.id)
            if len(calls) == 2:
                raise StoreUnavailableError("disk full")
            return await original_put(kind, entity)

        monkeypatch.setattr(store, "put", flaky_put)
        with pytest.raises(StoreUnavailableError):
            await manager.delete_look(look.id)

        leftover = calls[1]
        assert str([leftover]) in caplog.text
        assert look.id in (await store.get(EntityKind.LOOKBOARD, leftover)).look_ids

        # Delete is idempotent, so running it again finishes the cascade
        monkeypatch.setattr(store, "put", original_put)
        await manager.delete_look(look.id)
        for board in (first, second):
            assert (await store.get(EntityKind.LOOKBOARD, board.id)).look_ids == []


class TestLookboards:

    @pytest.mark.asyncio
    async def test_create_lookboard(self, manager, saved_look):
        board = await manager.create_lookboard(
            "  Weekend  ", [saved_look.id, saved_look.id], note=" brunch ",
            visibility=Visibility.PUBLIC,
        )

        assert board.title == "Weekend"
        assert board.note == "brunch"
        assert board.look_ids == [saved_look.id]
        assert len(board.public_id) == 8
        assert board.public_id.isalnum() and board.public_id == board.public_id.lower()

    @pytest.mark.asyncio
    async def test_empty_title_rejected_before_write(self, manager, saved_look, store):
        with pytest.raises(InvalidInputError):
            await manager.create_lookboard("   ", [saved_look.id])
        assert await store.get_all(EntityKind.LOOKBOARD) == []

    @pytest.mark.asyncio
    async def test_unknown_look_rejected(self, manager, saved_look, store):
        with pytest.raises(NotFoundError) as exc_info:
            await manager.create_lookboard("Mix", [saved_look.id, 999])
        assert exc_info.value.missing == ["999"]
        assert await store.get_all(EntityKind.LOOKBOARD) == []

    @pytest.mark.asyncio
    async def test_public_id_collision_retries(self, manager, saved_look, monkeypatch):
        first = await manager.create_lookboard("First", [saved_look.id])
        tokens = iter([first.public_id, "fresh123"])
        monkeypatch.setattr(
            "lookstudio.lookbook.manager.generate_public_id", lambda length: next(tokens)
        )

        second = await manager.create_lookboard("Second", [saved_look.id])

        assert second.public_id == "fresh123"

    @pytest.mark.asyncio
    async def test_public_id_attempts_exhausted(self, store, saved_look, monkeypatch):
        manager = LookbookManager(store, public_id_max_attempts=3)
        await manager.create_lookboard("First", [saved_look.id])
        taken = (await store.get_all(EntityKind.LOOKBOARD))[0].public_id
        monkeypatch.setattr(
            "lookstudio.lookbook.manager.generate_public_id", lambda length: taken
        )

        with pytest.raises(ConstraintViolationError):
            await manager.create_lookboard("Second", [saved_look.id])

    @pytest.mark.asyncio
    async def test_public_board_view(self, manager, store, products):
        older = await store.add(EntityKind.LOOK, look_draft(products, created_at=1))
        newer = await store.add(EntityKind.LOOK, look_draft(products, created_at=2))
        board = await manager.create_lookboard(
            "Share", [newer.id, older.id], visibility=Visibility.PUBLIC
        )

        found, looks = await manager.get_public_board(board.public_id)

        assert found.id == board.id
        assert [l.id for l in looks] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_private_board_not_shared(self, manager, saved_look):
        board = await manager.create_lookboard("Private", [saved_look.id])
        with pytest.raises(NotFoundError):
            await manager.get_public_board(board.public_id)

    @pytest.mark.asyncio
    async def test_delete_board_keeps_looks(self, manager, saved_look, store):
        board = await manager.create_lookboard("Temp", [saved_look.id])
        await manager.delete_lookboard(board.id)

        assert await store.get_all(EntityKind.LOOKBOARD) == []
        assert await store.get(EntityKind.LOOK, saved_look.id) == saved_look

    def test_generate_public_id(self):
        token = generate_public_id(8)
        assert len(token) == 8
        assert all(c.isdigit() or c.islower() for c in token)


class TestListExportImport:

    @pytest.mark.asyncio
    async def test_list_newest_first(self, manager, store, products):
        old = await store.add(EntityKind.LOOK, look_draft(products, created_at=1))
        new = await store.add(EntityKind.LOOK, look_draft(products, created_at=5))

        assert [l.id for l in await manager.list_looks()] == [new.id, old.id]

    @pytest.mark.asyncio
    async def test_export_is_camel_case_oldest_first(self, manager, store, products):
        await store.add(EntityKind.LOOK, look_draft(products, created_at=5, final_image="NEW"))
        await store.add(EntityKind.LOOK, look_draft(products, created_at=1, final_image="OLD"))

        exported = await manager.export_looks()

        assert [r["finalImage"] for r in exported] == ["OLD", "NEW"]
        assert "createdAt" in exported[0]
        assert exported[0]["products"][0]["sku"] == "A"
        assert "class" in exported[0]["products"][0]

    @pytest.mark.asyncio
    async def test_import_assigns_new_ids(self, manager, store, saved_look):
        exported = await manager.export_looks()

        count = await manager.import_looks(exported)

        looks = await store.get_all(EntityKind.LOOK)
        assert count == 1
        assert len(looks) == 2
        assert len({l.id for l in looks}) == 2

    @pytest.mark.asyncio
    async def test_import_rejects_whole_batch(self, manager, store, saved_look):
        good = (await manager.export_looks())[0]
        missing_image = dict(good, finalImage="")
        no_products = dict(good, products=[])

        with pytest.raises(InvalidInputError) as exc_info:
            await manager.import_looks([good, missing_image, no_products, "junk"])

        message = str(exc_info.value)
        assert "record 1" in message and "record 2" in message and "record 3" in message
        assert await store.get_all(EntityKind.LOOK) == [saved_look]

    @pytest.mark.asyncio
    async def test_import_adds_missing_primary_to_variations(self, manager, store, saved_look):
        record = (await manager.export_looks())[0]
        record.update(finalImage="F", variations=["X", "Y", "X"])

        await manager.import_looks([record])

        imported = [l for l in await store.get_all(EntityKind.LOOK) if l.id != saved_look.id]
        assert imported[0].final_image == "F"
        assert imported[0].variations == ["F", "X", "Y"]

    @pytest.mark.asyncio
    async def test_import_without_variations_keeps_them_empty(self, manager, store, saved_look):
        record = (await manager.export_looks())[0]

        await manager.import_looks([record])

        assert all(l.variations == [] for l in await store.get_all(EntityKind.LOOK))

    @pytest.mark.asyncio
    async def test_import_empty_batch(self, manager, store):
        assert await manager.import_looks([]) == 0
        assert await store.get_all(EntityKind.LOOK) == []

    @pytest.mark.asyncio
    async def test_manager_without_gateway_cannot_edit(self, store, saved_look):
        manager = LookbookManager(store)
        with pytest.raises(InvalidStateError):
            await manager.edit_look(saved_look.id, "anything")
