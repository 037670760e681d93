"""
Styling rules for the try-on prompt.

Classifies catalog products into garment categories and decides, for each new
product, whether it layers over, replaces, or is added to what the model is
already wearing.
"""

from enum import Enum
from typing import Sequence

from ..schemas import Gender, Model, ProductReference


class ProductCategory(str, Enum):
    BASE_TOP = "Base Top"
    LAYERABLE_TOP = "Layerable Top"
    OUTERWEAR = "Outerwear"
    BOTTOMS = "Bottoms"
    FULL_BODY = "Full Body"
    SHOES = "Shoes"
    ACCESSORY = "Accessory"


SHOES_CLASSES = {
    "sneakers", "heels", "flats", "sandals", "boots", "slip on", "lace ups",
    "espadrilles", "pumps", "footwear",
}
FULL_BODY_CLASSES = {
    "dresses", "jumpsuits", "rompers", "all in ones", "abayas", "kaftan", "evening dress",
    "beachwear", "multi piece sets", "sets", "tracksuits", "sleepwear", "loungewear", "dungarees",
}
OUTERWEAR_CLASSES = {"outerwear", "blazers", "jacket", "jackets", "coat", "coats"}
BOTTOMS_CLASSES = {"trousers", "shorts", "skirts", "denim", "jeans"}
LAYERABLE_TOP_CLASSES = {"shirts", "sweatshirts", "knitwear"}
# A sweatshirt can be a base or a layer; base is the safer default
BASE_TOP_CLASSES = {"t shirts", "tops", "polos", "bodysuits", "t-shirt", "t shirt", "sweatshirt"}
ACCESSORY_CLASSES = {
    "jewellery", "small leather goods", "hats", "sunglasses", "belts", "soft accessories",
    "bags", "cross body", "tote bags", "clutches",
}

_GARMENTS = {
    ProductCategory.BASE_TOP,
    ProductCategory.LAYERABLE_TOP,
    ProductCategory.OUTERWEAR,
    ProductCategory.BOTTOMS,
    ProductCategory.FULL_BODY,
}


def categorize(product: ProductReference) -> ProductCategory:
    """Classify a product. Order matters: non-clothing classes win, then name keywords."""
    product_class = product.product_class.lower()
    item_class = product.class_.lower()
    name = product.name.lower()

    if "shoes" in product_class or item_class in SHOES_CLASSES:
        return ProductCategory.SHOES
    if (
        any(k in product_class for k in ("bags", "accessories", "jewellery"))
        or item_class in ACCESSORY_CLASSES
    ):
        return ProductCategory.ACCESSORY

    if item_class in OUTERWEAR_CLASSES or any(k in name for k in ("jacket", "coat", "blazer")):
        return ProductCategory.OUTERWEAR
    if item_class in FULL_BODY_CLASSES or any(
        k in name for k in ("dress", "jumpsuit", "romper", "abaya")
    ):
        return ProductCategory.FULL_BODY
    # "denim shirt" is a top, so the name check runs before the bottoms class check
    if "shirt" in name and "t-shirt" not in name:
        return ProductCategory.LAYERABLE_TOP

    if item_class in BOTTOMS_CLASSES:
        return ProductCategory.BOTTOMS
    if item_class in LAYERABLE_TOP_CLASSES:
        return ProductCategory.LAYERABLE_TOP
    if item_class in BASE_TOP_CLASSES:
        return ProductCategory.BASE_TOP

    if "clothing" in product_class:
        return ProductCategory.BASE_TOP
    return ProductCategory.ACCESSORY


def placement_instruction(
    subject: Model,
    product: ProductReference,
    worn: Sequence[ProductReference],
) -> str:
    """What the image model should do with `product` given what is already `worn`."""
    category = categorize(product)
    worn_categories = [(p, categorize(p)) for p in worn]

    def first_worn(cat: ProductCategory):
        return next((p for p, c in worn_categories if c is cat), None)

    base_clothing = (
        "his skin-tone matching t-shirt and shorts"
        if subject.gender is Gender.MALE
        else "her bodysuit"
    )

    if category is ProductCategory.SHOES:
        return f"REPLACE the model's bare feet with the new shoes: '{product.name}'."
    if category is ProductCategory.ACCESSORY:
        return f"ADD the new accessory, '{product.name}', to the model's look."
    if category in (ProductCategory.OUTERWEAR, ProductCategory.LAYERABLE_TOP):
        return (
            f"ADD the new '{product.name}' over the model's current clothing. The existing clothes "
            "underneath should remain visible if the new item is open (like an open jacket or shirt)."
        )
    if category is ProductCategory.BASE_TOP:
        existing = first_worn(ProductCategory.BASE_TOP)
        if existing:
            return f"REPLACE the existing top ('{existing.name}') with the new top ('{product.name}')."
        return (
            f"DRESS the model in the new top, '{product.name}', "
            f"replacing the upper part of {base_clothing}."
        )
    if category is ProductCategory.BOTTOMS:
        existing = first_worn(ProductCategory.BOTTOMS)
        if existing:
            return (
                f"REPLACE the existing bottoms ('{existing.name}') "
                f"with the new bottoms ('{product.name}')."
            )
        return (
            f"DRESS the model in the new bottoms, '{product.name}', "
            f"replacing the lower part of {base_clothing}."
        )
    # Full body
    if any(c in _GARMENTS for _, c in worn_categories):
        return f"REMOVE all existing clothing and DRESS the model in the new item: '{product.name}'."
    return f"DRESS the model in the new item, '{product.name}', replacing {base_clothing}."
