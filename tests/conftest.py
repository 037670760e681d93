# Test fixtures and configuration
from typing import Optional, Sequence

import pytest
import pytest_asyncio

from lookstudio.core.errors import GenerationFailure
from lookstudio.schemas import (
    Gender,
    LookDraft,
    Model,
    ModelDraft,
    ProductMedia,
    ProductReference,
)
from lookstudio.services.image_synthesis import ImageSynthesisGateway
from lookstudio.store import EntityKind, EntityStore

MEMORY_DB = "sqlite+aiosqlite:///:memory:"


def make_product(sku: str, name: str = "", item_class: str = "N/A",
                 product_class: str = "Clothing") -> ProductReference:
    return ProductReference(
        sku=sku,
        entity_id=sum(map(ord, sku)),
        name=name or f"Product {sku}",
        media=[ProductMedia(src=f"https://cdn.example.com/{sku}.jpg")],
        product_class=product_class,
        class_=item_class,
    )


class FakeCatalog:
    """Catalog backed by a dict. Records every lookup."""

    def __init__(self, products: Sequence[ProductReference]):
        self.products = {p.sku: p for p in products}
        self.lookups: list[str] = []

    async def fetch_product(self, sku: str) -> Optional[ProductReference]:
        self.lookups.append(sku)
        return self.products.get(sku)


class FakeGateway(ImageSynthesisGateway):
    """
    Deterministic gateway: output = "<input>+<sku>", so chaining is visible in
    the image refs. SKUs listed in `fail_skus` raise GenerationFailure; SKUs in
    `crash_skus` raise RuntimeError, like a dropped connection.
    """

    def __init__(self, fail_skus: Sequence[str] = (), crash_skus: Sequence[str] = ()):
        self.fail_skus = set(fail_skus)
        self.crash_skus = set(crash_skus)
        self.calls: list[tuple[str, str, list[str]]] = []
        self.edits: list[tuple[str, str, Optional[str]]] = []
        self.closed = False

    async def synthesize(self, base_image, subject, product, context):
        self.calls.append((base_image, product.sku, [p.sku for p in context]))
        if product.sku in self.crash_skus:
            raise RuntimeError("connection reset")
        if product.sku in self.fail_skus:
            raise GenerationFailure(f"Virtual try-on failed for {product.sku}")
        return f"{base_image}+{product.sku}"

    async def edit(self, base_image, instruction, guide_image=None):
        self.edits.append((base_image, instruction, guide_image))
        return f"{base_image}~edit{len(self.edits)}"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def products():
    return [
        make_product("A", "Cotton T-Shirt", item_class="T Shirts"),
        make_product("B", "Wide Leg Trousers", item_class="Trousers"),
        make_product("C", "Leather Sneakers", item_class="Sneakers", product_class="Shoes"),
    ]


@pytest.fixture
def catalog(products):
    return FakeCatalog(products)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def model_draft():
    return ModelDraft(
        name="Amira",
        image_url="M0",
        gender=Gender.FEMALE,
        ethnicity="Middle Eastern",
        skin_tone="Olive",
    )


@pytest.fixture
def model(model_draft):
    return Model(id=1, **model_draft.model_dump())


@pytest_asyncio.fixture
async def store():
    """Fresh in-memory store per test."""
    store = await EntityStore(MEMORY_DB).open()
    yield store
    await store.close()


def look_draft(products, final_image="F1", created_at=1_000, variations=()):
    return LookDraft(
        base_image="M0",
        final_image=final_image,
        products=list(products),
        variations=list(variations),
        created_at=created_at,
    )


@pytest_asyncio.fixture
async def saved_look(store, products):
    return await store.add(EntityKind.LOOK, look_draft(products[:2]))
