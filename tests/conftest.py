"""Shared fixtures: a small lighting configuration and catalog.

Catalog overview (ids in natural order):

    P1  recessed downlight   LUM > LUM_CEIL > LUM_CEIL_REC   IP65   8 W   dimmable
    P2  surface downlight    LUM > LUM_CEIL                 IP65  12.5 W  not dimmable  outdoor
    P3  wall washer          LUM                            IP44  15 W    not dimmable  outdoor  no price
    P4  LED driver           DRV                                   30 W   dimmable      24 V
    P5  pendant              LUM                            IP20  (power unparsable)
    P6  mystery item         unclassified
"""

from typing import Any

import pytest

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.domain.entities import Product
from facetsearch.search.snapshot import IndexSnapshot, build_snapshot

GROUP_LUM = "G_LUM"
GROUP_ACC = "G_ACC"
CLASS_DOWN = "C_DOWN"
CLASS_WALL = "C_WALL"
CLASS_PENDANT = "C_PEND"
CLASS_DRIVER = "C_DRV"


def make_config_data() -> dict[str, Any]:
    """Configuration records used across the test suite."""
    return {
        "taxonomy": [
            {"code": "LUM", "level": 1, "name": "Luminaires", "display_order": 10},
            {"code": "DRV", "level": 1, "name": "Drivers", "display_order": 20},
            {"code": "ACC", "level": 1, "name": "Accessories", "display_order": 30},
            {"code": "LUM_CEIL", "parent_code": "LUM", "level": 2, "name": "Ceiling"},
            {"code": "LUM_CEIL_REC", "parent_code": "LUM_CEIL", "level": 3, "name": "Recessed"},
        ],
        "rules": [
            {"name": "drivers", "taxonomy_code": "DRV", "class_ids": [CLASS_DRIVER], "priority": 5},
            {"name": "luminaires", "taxonomy_code": "LUM", "flag_name": "luminaire",
             "group_ids": [GROUP_LUM], "priority": 10},
            {"name": "ceiling", "taxonomy_code": "LUM_CEIL", "flag_name": "ceiling",
             "class_ids": [CLASS_DOWN],
             "attribute_conditions": [{"attribute": "CEILING_MOUNT", "operator": "equals", "value": True}],
             "priority": 30},
            {"name": "recessed", "taxonomy_code": "LUM_CEIL_REC", "class_ids": [CLASS_DOWN],
             "text_pattern": "recessed|built-in", "priority": 60},
            {"name": "outdoor", "flag_name": "outdoor", "text_pattern": "outdoor|exterior",
             "priority": 100},
        ],
        "filters": [
            {"key": "ip", "label": "IP Rating", "kind": "categorical",
             "source_attribute": "IP_RATING", "applicable_taxonomy_codes": ["LUM"],
             "category": "design", "display_order": 10},
            {"key": "power", "label": "Power", "kind": "numeric_range",
             "source_attribute": "POWER", "unit": "W", "category": "electricals",
             "display_order": 20},
            {"key": "dimmable", "label": "Dimmable", "kind": "boolean",
             "source_attribute": "DIMMABLE", "category": "electricals", "display_order": 30},
            {"key": "colour", "label": "Colour", "kind": "categorical",
             "source_attribute": "COLOUR", "applicable_taxonomy_codes": ["LUM_CEIL"],
             "category": "design", "display_order": 40},
            {"key": "voltage", "label": "Voltage", "kind": "numeric_range",
             "source_attribute": "VOLTAGE", "unit": "V", "applicable_taxonomy_codes": ["DRV"],
             "category": "electricals", "display_order": 50},
        ],
    }


def make_products() -> list[Product]:
    """Catalog used across the test suite."""
    return [
        Product(
            id="P1",
            group_code=GROUP_LUM,
            class_code=CLASS_DOWN,
            class_name="Downlight",
            attributes={
                "CEILING_MOUNT": True,
                "IP_RATING": "IP65",
                "POWER": 8,
                "DIMMABLE": True,
                "COLOUR": "White",
            },
            description_short="Recessed Downlight 8W",
            description_long="Indoor recessed ceiling downlight",
            supplier="Acme",
            price="25.00",
        ),
        Product(
            id="P2",
            group_code=GROUP_LUM,
            class_code=CLASS_DOWN,
            class_name="Downlight",
            attributes={
                "CEILING_MOUNT": "yes",
                "IP_RATING": "IP65",
                "POWER": 12.5,
                "DIMMABLE": "No",
                "COLOUR": {"code": "EV000001", "label": "Black"},
            },
            description_short="Surface Downlight 12W",
            description_long="Outdoor surface mounted downlight",
            supplier="Lumex",
            price="40.00",
        ),
        Product(
            id="P3",
            group_code=GROUP_LUM,
            class_code=CLASS_WALL,
            class_name="Wall luminaire",
            attributes={"IP_RATING": "IP44", "POWER": [15, 20], "DIMMABLE": False},
            description_short="Wall Washer",
            description_long="Outdoor wall light",
            supplier="Acme",
            price=None,
        ),
        Product(
            id="P4",
            group_code=GROUP_ACC,
            class_code=CLASS_DRIVER,
            class_name="LED driver",
            attributes={"VOLTAGE": 24, "POWER": 30, "DIMMABLE": True},
            description_short="LED Driver 30W",
            description_long="Constant voltage driver",
            supplier="Lumex",
            price="18.50",
        ),
        Product(
            id="P5",
            group_code=GROUP_LUM,
            class_code=CLASS_PENDANT,
            class_name="Pendant",
            attributes={"IP_RATING": "IP20", "POWER": "abc"},
            description_short="Pendant Light",
            description_long="Decorative pendant",
            supplier="Nordic",
            price="99.00",
        ),
        Product(
            id="P6",
            description_short="Mystery Item",
            supplier="Acme",
            price="5.00",
        ),
    ]


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Raw configuration records."""
    return make_config_data()


@pytest.fixture
def config() -> ConfigSnapshot:
    """Validated configuration snapshot."""
    return ConfigSnapshot.from_dict(make_config_data())


@pytest.fixture
def products() -> list[Product]:
    """Sample catalog."""
    return make_products()


@pytest.fixture
def snapshot(products: list[Product], config: ConfigSnapshot) -> IndexSnapshot:
    """Index snapshot over the sample catalog."""
    return build_snapshot(products, config)
