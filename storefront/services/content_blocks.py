"""Page content block types, their field schemas and the block type registry.

A block is a dict with at least ``id`` and ``type``; the other keys are the
fields described by the schema of its type.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storefront.exceptions.CustomError import ValidationError
from storefront.util.logger import get_logger

logger = get_logger(__name__)

HERO_SLIDER = "hero-slider"
FEATURED_PRODUCTS = "featured-products"
IMAGE_CAROUSEL = "image-carousel"
PRODUCT_CATEGORIES = "product-categories"
TEXT_BLOCK = "text-block"
CALL_TO_ACTION = "call-to-action"

BLOCK_TYPES = {
    "HERO_SLIDER": HERO_SLIDER,
    "FEATURED_PRODUCTS": FEATURED_PRODUCTS,
    "IMAGE_CAROUSEL": IMAGE_CAROUSEL,
    "PRODUCT_CATEGORIES": PRODUCT_CATEGORIES,
    "TEXT_BLOCK": TEXT_BLOCK,
    "CALL_TO_ACTION": CALL_TO_ACTION,
}

FIELD_TYPES = ("text", "textarea", "boolean", "number", "select", "media", "collection")

ALIGNMENTS = ["left", "center", "right"]

BLOCK_SCHEMAS: Dict[str, Dict[str, Any]] = {
    HERO_SLIDER: {
        "title": "Hero slider",
        "fields": {
            "title": {"type": "text", "label": "Main title", "required": True},
            "subtitle": {"type": "text", "label": "Subtitle"},
            "buttonText": {"type": "text", "label": "Button text",
                           "help": "Text shown on the call-to-action button"},
            "buttonLink": {"type": "text", "label": "Button link",
                           "help": "URL the button opens"},
            "showButton": {"type": "boolean", "label": "Show button", "defaultValue": True},
            "showLogo": {"type": "boolean", "label": "Show logo", "defaultValue": True},
            "showSubtitle": {"type": "boolean", "label": "Show subtitle", "defaultValue": True},
            "height": {"type": "select", "label": "Height",
                       "options": ["25vh", "50vh", "75vh", "100vh"], "defaultValue": "50vh"},
            "collectionId": {"type": "collection", "label": "Image collection",
                             "help": "Collection of images for the slider"},
            "mainImage": {"type": "media", "label": "Main image",
                          "help": "Used when no collection is selected"},
            "autoRotate": {"type": "boolean", "label": "Auto rotate", "defaultValue": True},
            "interval": {"type": "number", "label": "Interval (ms)", "defaultValue": 5000,
                         "help": "Time between slides in milliseconds"},
        },
    },
    FEATURED_PRODUCTS: {
        "title": "Featured products",
        "fields": {
            "title": {"type": "text", "label": "Section title"},
            "subtitle": {"type": "text", "label": "Subtitle"},
            "icon": {"type": "text", "label": "Icon (Bootstrap classes)", "defaultValue": "bi-star-fill"},
            "showBg": {"type": "boolean", "label": "Show background"},
            "maxProducts": {"type": "number", "label": "Number of products", "defaultValue": 6},
            "filterByFeatured": {"type": "boolean", "label": "Use featured products", "defaultValue": True},
            "useCollection": {"type": "boolean", "label": "Use image collection", "defaultValue": False},
            "collectionId": {"type": "collection", "label": "Collection (when not using featured products)",
                             "required": False,
                             "help": "Only used when 'Use image collection' is on"},
        },
    },
    IMAGE_CAROUSEL: {
        "title": "Image carousel",
        "fields": {
            "title": {"type": "text", "label": "Section title"},
            "subtitle": {"type": "text", "label": "Subtitle"},
            "icon": {"type": "text", "label": "Icon (Bootstrap classes)", "defaultValue": "bi-images"},
            "showBg": {"type": "boolean", "label": "Show background"},
            "collectionId": {"type": "collection", "label": "Image collection", "required": True,
                             "help": "Collection of images for the carousel"},
        },
    },
    PRODUCT_CATEGORIES: {
        "title": "Product categories",
        "fields": {
            "title": {"type": "text", "label": "Section title"},
            "subtitle": {"type": "text", "label": "Subtitle"},
            "icon": {"type": "text", "label": "Icon (Bootstrap classes)", "defaultValue": "bi-grid-fill"},
            "showBg": {"type": "boolean", "label": "Show background"},
            "useCollection": {"type": "boolean", "label": "Use custom collection", "defaultValue": False},
            "collectionId": {"type": "collection", "label": "Collection (when not using real categories)",
                             "required": False,
                             "help": "Only used when 'Use custom collection' is on"},
        },
    },
    TEXT_BLOCK: {
        "title": "Text block",
        "fields": {
            "title": {"type": "text", "label": "Title"},
            "content": {"type": "textarea", "label": "Content (HTML allowed)"},
            "alignment": {"type": "select", "label": "Alignment", "options": ALIGNMENTS},
            "showBg": {"type": "boolean", "label": "Show background"},
        },
    },
    CALL_TO_ACTION: {
        "title": "Call to action",
        "fields": {
            "title": {"type": "text", "label": "Title"},
            "subtitle": {"type": "text", "label": "Subtitle"},
            "buttonText": {"type": "text", "label": "Button text"},
            "buttonLink": {"type": "text", "label": "Button link"},
            "backgroundImage": {"type": "media", "label": "Background image"},
            "alignment": {"type": "select", "label": "Alignment", "options": ALIGNMENTS},
        },
    },
}

BLOCK_ICONS = {
    HERO_SLIDER: "bi-images",
    FEATURED_PRODUCTS: "bi-star",
    IMAGE_CAROUSEL: "bi-card-image",
    PRODUCT_CATEGORIES: "bi-grid",
    TEXT_BLOCK: "bi-text-paragraph",
    CALL_TO_ACTION: "bi-megaphone",
}

_registry: Dict[str, Dict[str, Any]] = {}


# Registry

def register_block_type(block_type: str, config: Dict[str, Any]):
    """Register (or overwrite) a block type.

    ``config`` holds ``title``, ``icon``, ``schema`` (the fields dict) and
    optionally ``experimental``.
    """
    if block_type in _registry:
        logger.warning(f"Block type '{block_type}' already registered, overwriting")
    if not config.get("schema"):
        logger.warning(f"Block type '{block_type}' has no field schema")

    _registry[block_type] = dict(config)
    logger.debug(f"Registered block type '{block_type}'")


def get_block_config(block_type: str) -> Optional[Dict[str, Any]]:
    return _registry.get(block_type)


def get_all_block_types(include_experimental: bool = False) -> List[Dict[str, Any]]:
    return [
        {"type": block_type, **config}
        for block_type, config in _registry.items()
        if include_experimental or not config.get("experimental")
    ]


def is_block_type_registered(block_type: str) -> bool:
    return block_type in _registry


def unregister_block_type(block_type: str) -> bool:
    return _registry.pop(block_type, None) is not None


def register_builtin_block_types():
    for block_type, schema in BLOCK_SCHEMAS.items():
        register_block_type(block_type, {
            "title": schema["title"],
            "icon": BLOCK_ICONS[block_type],
            "schema": schema["fields"],
        })


# Helpers

def generate_block_id(block_type: str) -> str:
    """``block_<type with - replaced by _>_<8 hex chars>``."""
    safe_type = block_type.replace("-", "_")
    return f"block_{safe_type}_{uuid.uuid4().hex[:8]}"


def get_block_fields(block_type: str) -> Dict[str, Any]:
    config = get_block_config(block_type)
    if config is None:
        raise ValidationError(f"Unknown block type: {block_type}", field="type")
    return config.get("schema") or {}


def create_block(block_type: str, **overrides) -> Dict[str, Any]:
    """New block with the schema defaults of its type, then ``overrides``."""
    fields = get_block_fields(block_type)
    block = {
        name: copy.deepcopy(field["defaultValue"])
        for name, field in fields.items()
        if "defaultValue" in field
    }
    block.update(overrides)
    block["id"] = overrides.get("id") or generate_block_id(block_type)
    block["type"] = block_type
    block.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
    return block


def validate_block(block: Dict[str, Any]) -> Dict[str, Any]:
    """Check a block against its schema.

    Raises:
        ValidationError: missing id/type, unknown type, missing required field,
            or a select value outside its options
    """
    if not block.get("id"):
        raise ValidationError("Block id is required", field="id")

    block_type = block.get("type")
    if not block_type:
        raise ValidationError("Block type is required", field="type")

    for name, field in get_block_fields(block_type).items():
        value = block.get(name)
        if field.get("required") and value in (None, ""):
            raise ValidationError(f"Field '{field.get('label', name)}' is required", field=name)
        if value is None:
            continue
        if field["type"] == "select" and field.get("options") and value not in field["options"]:
            raise ValidationError(
                f"Field '{name}' must be one of: {', '.join(field['options'])}", field=name)
        if field["type"] == "boolean" and not isinstance(value, bool):
            raise ValidationError(f"Field '{name}' must be true or false", field=name)
        if field["type"] == "number" and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValidationError(f"Field '{name}' must be a number", field=name)

    return block


PLACEHOLDER_IMAGE = "/public/images/placeholder.jpg"


def create_default_blocks(page_type: Optional[str]) -> List[Dict[str, Any]]:
    """Starter blocks for a new page: home, about, contact, or a single text block."""
    if page_type == "home":
        return [
            create_block(HERO_SLIDER, title="Welcome to our store",
                         subtitle="Fresh, natural products for a better life",
                         buttonText="Learn more", buttonLink="#", height="100vh",
                         mainImage=PLACEHOLDER_IMAGE),
            create_block(FEATURED_PRODUCTS, title="Featured products",
                         subtitle="Explore our special selection.", showBg=False),
            create_block(IMAGE_CAROUSEL, title="Our farm",
                         subtitle="Discover the beauty of where our products grow.",
                         icon="bi-tree-fill", showBg=True),
            create_block(PRODUCT_CATEGORIES, title="Discover our products",
                         subtitle="High quality organic products.",
                         icon="bi-box-seam", showBg=False),
        ]

    if page_type == "about":
        return [
            create_block(HERO_SLIDER, title="About us", subtitle="Our story and values",
                         showButton=False, mainImage=PLACEHOLDER_IMAGE),
            create_block(TEXT_BLOCK, title="Our story",
                         content="<p>We grow and deliver organic products with care for "
                                 "our customers and the environment.</p>",
                         alignment="left", showBg=False),
            create_block(CALL_TO_ACTION, title="Want to know more?",
                         subtitle="Contact us to learn more about our products",
                         buttonText="Contact", buttonLink="/contact", alignment="center"),
        ]

    if page_type == "contact":
        return [
            create_block(HERO_SLIDER, title="Contact us", subtitle="We are here to help",
                         showButton=False, height="25vh", mainImage=PLACEHOLDER_IMAGE),
            create_block(TEXT_BLOCK, title="Contact information",
                         content="<p>Email: info@example.com</p>",
                         alignment="center", showBg=True),
        ]

    return [
        create_block(TEXT_BLOCK, title="Page title",
                     content="<p>Sample content for this page. Edit it as needed.</p>",
                     alignment="center", showBg=False),
    ]


register_builtin_block_types()
