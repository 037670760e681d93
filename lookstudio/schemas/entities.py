"""
Domain entities. Each stored kind comes in two variants:

  *Draft  — no id; what callers hand to EntityStore.add / bulk_add
  plain   — id required; what the store returns and what put() accepts

Field names are snake_case in Python and camelCase on the wire, which keeps
exported JSON compatible with the studio's original record shape.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        protected_namespaces=(),
    )


# ── Catalog ──────────────────────────────────────────────────────────


class ProductMedia(CamelModel):
    src: str


class ProductReference(CamelModel):
    """A catalog product, embedded by value into looks once used."""

    sku: str
    entity_id: Optional[int] = None
    name: str
    brand: str = "N/A"
    url_key: str = ""
    initial_price: Optional[float] = None
    min_price_in_aed: Optional[float] = Field(default=None, alias="minPriceInAED")
    media: list[ProductMedia] = Field(default_factory=list)
    sizes_in_home_delivery_stock: list[str] = Field(default_factory=list)
    size_and_fit: list[str] = Field(default_factory=list)
    division: str = "N/A"
    product_class: str = "N/A"
    class_: str = Field(default="N/A", alias="class")
    sub_class: str = "N/A"
    color: str = "N/A"
    season: str = "N/A"
    designer: str = "N/A"
    department: str = "N/A"
    group: str = "N/A"

    @property
    def primary_image(self) -> Optional[str]:
        return self.media[0].src if self.media else None


# ── Models ───────────────────────────────────────────────────────────


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class ModelDraft(CamelModel):
    name: str
    image_url: str
    gender: Gender
    ethnicity: str = ""
    age_appearance: str = ""
    height: str = ""
    skin_tone: str = ""
    hair_color: str = ""
    hair_style: str = ""
    body_shape: str = ""
    facial_hair: str = ""


class Model(ModelDraft):
    id: int


# ── Looks ────────────────────────────────────────────────────────────


class LookDraft(CamelModel):
    model: Optional[Model] = None
    base_image: str = ""
    final_image: str = Field(min_length=1)
    products: list[ProductReference] = Field(min_length=1)
    variations: list[str] = Field(default_factory=list)
    created_at: int


class Look(LookDraft):
    id: int


# ── Lookboards ───────────────────────────────────────────────────────


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class LookboardDraft(CamelModel):
    public_id: str
    title: str
    note: Optional[str] = None
    visibility: Visibility = Visibility.PRIVATE
    look_ids: list[int] = Field(default_factory=list)
    created_at: int
    updated_at: int


class Lookboard(LookboardDraft):
    id: int
