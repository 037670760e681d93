"""
Lookbook manager — keeps looks and lookboards consistent with each other.

Every operation builds a new copy of the entity, writes it, and only then
returns it. A failed write leaves the caller's copy untouched.

Cascades owned here (the store does none):
  - deleting a look removes its id from every board that lists it
    (emptied boards are kept)
"""

import logging
import secrets
import string
from typing import Any, Iterable, Optional, Sequence

from pydantic import ValidationError

from ..core.errors import (
    ConstraintViolationError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from ..models import now_ms
from ..schemas import Look, LookDraft, Lookboard, LookboardDraft, Visibility
from ..services.image_synthesis import ImageSynthesisGateway
from ..services.images import ImageRef
from ..store import EntityKind, EntityStore
from .variations import VariationSet

logger = logging.getLogger(__name__)

PUBLIC_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_public_id(length: int = 8) -> str:
    """Short random opaque token for share links."""
    return "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(length))


class LookbookManager:

    def __init__(
        self,
        store: EntityStore,
        gateway: Optional[ImageSynthesisGateway] = None,
        public_id_length: int = 8,
        public_id_max_attempts: int = 5,
    ):
        self.store = store
        self.gateway = gateway
        self.public_id_length = public_id_length
        self.public_id_max_attempts = public_id_max_attempts

    # ── Looks ────────────────────────────────────────────────────────

    async def list_looks(self) -> list[Look]:
        """All looks, newest first."""
        looks = await self.store.get_all(EntityKind.LOOK)
        return sorted(looks, key=lambda l: (l.created_at, l.id), reverse=True)

    async def get_look(self, look_id: int) -> Look:
        return await self.store.get(EntityKind.LOOK, look_id)

    async def add_variation(self, look_id: int, image: ImageRef) -> Look:
        """Add an alternate image. Adding a known image is a no-op."""
        look = await self.get_look(look_id)
        variations = VariationSet(look.final_image, look.variations)
        if not variations.add(image):
            return look
        updated = look.model_copy(update={"variations": variations.as_list()})
        await self.store.put(EntityKind.LOOK, updated)
        logger.info("Look #%d: variation added (%d total)", look_id, len(variations))
        return updated

    async def promote_variation(self, look_id: int, image: ImageRef) -> Look:
        """Make a known variation the main image; the old main stays a variation."""
        look = await self.get_look(look_id)
        variations = VariationSet(look.final_image, look.variations)
        if variations.promote(image) is None:
            return look
        updated = look.model_copy(
            update={"final_image": variations.primary, "variations": variations.as_list()}
        )
        await self.store.put(EntityKind.LOOK, updated)
        logger.info("Look #%d: main image changed", look_id)
        return updated

    async def edit_look(
        self,
        look_id: int,
        instruction: str,
        source_image: Optional[ImageRef] = None,
        guide_image: Optional[ImageRef] = None,
    ) -> tuple[Look, ImageRef]:
        """Conversational edit. The result becomes a new variation; the main image stays."""
        if self.gateway is None:
            raise InvalidStateError("No image gateway configured for editing")
        if not instruction.strip() and not guide_image:
            raise InvalidInputError("An edit needs an instruction or a guide image")

        look = await self.get_look(look_id)
        source = source_image or look.final_image
        if not VariationSet(look.final_image, look.variations).is_known(source):
            raise InvalidStateError("The source image is not part of this look")

        edited = await self.gateway.edit(source, instruction.strip(), guide_image)
        updated = await self.add_variation(look_id, edited)
        return updated, edited

    async def delete_look(self, look_id: int) -> list[Lookboard]:
        """Delete a look, then drop its id from every board. Returns the boards changed."""
        await self.store.remove(EntityKind.LOOK, look_id)

        referencing = [
            b for b in await self.store.get_all(EntityKind.LOOKBOARD) if look_id in b.look_ids
        ]
        changed = []
        for position, board in enumerate(referencing):
            updated = board.model_copy(
                update={
                    "look_ids": [i for i in board.look_ids if i != look_id],
                    "updated_at": now_ms(),
                }
            )
            try:
                await self.store.put(EntityKind.LOOKBOARD, updated)
            except Exception:
                logger.error(
                    "Look #%d deleted but still listed on board(s) %s; run delete again to finish",
                    look_id, [b.id for b in referencing[position:]],
                )
                raise
            changed.append(updated)

        logger.info("Deleted look #%d (removed from %d board(s))", look_id, len(changed))
        return changed

    # ── Export / import ──────────────────────────────────────────────

    async def export_looks(self) -> list[dict]:
        """Every look as a plain JSON-shaped record, oldest first."""
        looks = sorted(
            await self.store.get_all(EntityKind.LOOK),
            key=lambda l: (l.created_at, l.id),
        )
        return [look.model_dump(mode="json", by_alias=True) for look in looks]

    async def import_looks(self, records: Sequence[Any]) -> int:
        """Insert exported looks. One invalid record rejects the whole batch."""
        drafts = []
        errors = []
        for position, record in enumerate(records):
            if not isinstance(record, dict):
                errors.append(f"record {position}: not an object")
                continue
            record = {k: v for k, v in record.items() if k != "id"}
            if not record.get("finalImage", record.get("final_image")):
                errors.append(f"record {position}: missing primary image")
                continue
            if not record.get("products"):
                errors.append(f"record {position}: missing products")
                continue
            record.setdefault("createdAt", now_ms())
            try:
                draft = LookDraft.model_validate(record)
            except ValidationError as e:
                errors.append(f"record {position}: {e.error_count()} invalid field(s)")
                continue
            # Same gallery rules as add_variation: no duplicates, primary is a member
            variations = VariationSet(draft.final_image, draft.variations)
            variations.ensure_primary()
            drafts.append(draft.model_copy(update={"variations": variations.as_list()}))

        if errors:
            raise InvalidInputError("Import rejected: " + "; ".join(errors))

        await self.store.bulk_add(EntityKind.LOOK, drafts)
        logger.info("Imported %d look(s)", len(drafts))
        return len(drafts)

    # ── Lookboards ───────────────────────────────────────────────────

    async def list_lookboards(self) -> list[Lookboard]:
        boards = await self.store.get_all(EntityKind.LOOKBOARD)
        return sorted(boards, key=lambda b: (b.created_at, b.id), reverse=True)

    async def create_lookboard(
        self,
        title: str,
        look_ids: Iterable[int],
        note: Optional[str] = None,
        visibility: Visibility = Visibility.PRIVATE,
    ) -> Lookboard:
        """Create a board and its share token in one write."""
        title = (title or "").strip()
        if not title:
            raise InvalidInputError("A lookboard needs a title")

        # Snapshot by value, de-duplicated, selection order kept
        selected = list(dict.fromkeys(look_ids))
        known = {look.id for look in await self.store.get_all(EntityKind.LOOK)}
        unknown = [i for i in selected if i not in known]
        if unknown:
            raise NotFoundError(
                f"Look(s) not found: {', '.join(str(i) for i in unknown)}",
                missing=[str(i) for i in unknown],
            )

        note = note.strip() if note else None
        for attempt in range(1, self.public_id_max_attempts + 1):
            public_id = generate_public_id(self.public_id_length)
            if await self.store.find_by_public_id(public_id) is not None:
                logger.debug("Public id collision on attempt %d", attempt)
                continue
            now = now_ms()
            draft = LookboardDraft(
                public_id=public_id,
                title=title,
                note=note or None,
                visibility=visibility,
                look_ids=selected,
                created_at=now,
                updated_at=now,
            )
            try:
                board = await self.store.add(EntityKind.LOOKBOARD, draft)
            except ConstraintViolationError:
                # Taken between the check and the insert
                logger.debug("Public id taken at commit on attempt %d", attempt)
                continue
            logger.info("Created lookboard #%d (%s) with %d look(s)", board.id, public_id, len(selected))
            return board

        raise ConstraintViolationError(
            f"Could not allocate a unique public id after {self.public_id_max_attempts} attempts"
        )

    async def delete_lookboard(self, board_id: int) -> None:
        """Delete the board only; its looks are untouched."""
        await self.store.remove(EntityKind.LOOKBOARD, board_id)
        logger.info("Deleted lookboard #%d", board_id)

    async def get_public_board(self, public_id: str) -> tuple[Lookboard, list[Look]]:
        """A shared board with its looks in board order. Private boards are not shared."""
        board = await self.store.find_by_public_id(public_id)
        if board is None or board.visibility is not Visibility.PUBLIC:
            raise NotFoundError("Lookboard not found")

        by_id = {look.id: look for look in await self.store.get_all(EntityKind.LOOK)}
        return board, [by_id[i] for i in board.look_ids if i in by_id]
