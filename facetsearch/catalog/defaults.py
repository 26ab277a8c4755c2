"""Embedded default search configuration.

A lighting-catalog configuration in the shape accepted by
``ConfigSnapshot.from_dict``. Technical attribute codes and group/class
ids follow the ETIM classification used by the supplier catalogs.

Used when neither a configuration file nor configuration tables are
available, by the seed script and by the catalog generator.
"""

from typing import Any

# ETIM groups
GROUP_LUMINAIRES = "EG000027"
GROUP_LAMPS = "EG000028"
GROUP_ACCESSORIES = "EG000030"

# ETIM classes
CLASS_DOWNLIGHT = "EC001744"
CLASS_CEILING_WALL = "EC002892"
CLASS_WALL = "EC000481"
CLASS_IN_GROUND = "EC000758"
CLASS_BOLLARD = "EC000301"
CLASS_FLOOR_LAMP = "EC000300"
CLASS_TABLE_LAMP = "EC000302"
CLASS_PENDANT = "EC001743"
CLASS_LED_STRIP = "EC002706"
CLASS_TRACK = "EC000986"
CLASS_DRIVER = "EC002710"
CLASS_TRACK_PROFILE = "EC000101"
CLASS_LED_MODULE = "EC000996"
CLASS_FILAMENT_LAMP = "EC001959"

# ETIM features
FEATURE_VOLTAGE = "EF005127"
FEATURE_DIMMABLE = "EF000137"
FEATURE_PROTECTION_CLASS = "EF000004"
FEATURE_IP_RATING = "EF003118"
FEATURE_COLOUR = "EF000136"
FEATURE_CCT = "EF009346"
FEATURE_CRI = "EF000442"
FEATURE_LUMENS = "EF018714"
FEATURE_POWER = "EF009347"
FEATURE_CEILING_MOUNT = "EF021180"
FEATURE_WALL_MOUNT = "EF000664"
FEATURE_CONSTANT_CURRENT = "EF009471"
FEATURE_CONSTANT_VOLTAGE = "EF009472"


TAXONOMY: list[dict[str, Any]] = [
    {"code": "LUM", "level": 1, "name": "Luminaires", "display_order": 10},
    {"code": "LAMP", "level": 1, "name": "Lamps", "display_order": 20},
    {"code": "ACC", "level": 1, "name": "Accessories", "display_order": 30},
    {"code": "DRV", "level": 1, "name": "Drivers", "display_order": 40},
    {"code": "LUM_CEIL", "parent_code": "LUM", "level": 2, "name": "Ceiling", "display_order": 10},
    {"code": "LUM_WALL", "parent_code": "LUM", "level": 2, "name": "Wall", "display_order": 20},
    {"code": "LUM_FLOOR", "parent_code": "LUM", "level": 2, "name": "Floor", "display_order": 30},
    {"code": "LUM_DECO", "parent_code": "LUM", "level": 2, "name": "Decorative", "display_order": 50},
    {"code": "LUM_SPEC", "parent_code": "LUM", "level": 2, "name": "Special", "display_order": 60},
    {"code": "LUM_CEIL_REC", "parent_code": "LUM_CEIL", "level": 3, "name": "Recessed", "display_order": 10},
    {"code": "LUM_CEIL_SURF", "parent_code": "LUM_CEIL", "level": 3, "name": "Surface-mounted", "display_order": 20},
    {"code": "LUM_FLOOR_REC", "parent_code": "LUM_FLOOR", "level": 3, "name": "Recessed", "display_order": 10},
    {"code": "LUM_FLOOR_SURF", "parent_code": "LUM_FLOOR", "level": 3, "name": "Surface-mounted", "display_order": 20},
    {"code": "LUM_DECO_TABLE", "parent_code": "LUM_DECO", "level": 3, "name": "Table Lamps", "display_order": 10},
    {"code": "LUM_DECO_PEND", "parent_code": "LUM_DECO", "level": 3, "name": "Pendant Lights", "display_order": 20},
    {"code": "LUM_DECO_FLOOR", "parent_code": "LUM_DECO", "level": 3, "name": "Floor Lamps", "display_order": 30},
    {"code": "LUM_SPEC_STRIP", "parent_code": "LUM_SPEC", "level": 3, "name": "LED Strips", "display_order": 10},
    {"code": "LUM_SPEC_TRACK", "parent_code": "LUM_SPEC", "level": 3, "name": "Track Systems", "display_order": 20},
    {"code": "ACC_TRACK", "parent_code": "ACC", "level": 2, "name": "Track Components", "display_order": 10},
    {"code": "DRV_CC", "parent_code": "DRV", "level": 2, "name": "Constant Current", "display_order": 10},
    {"code": "DRV_CV", "parent_code": "DRV", "level": 2, "name": "Constant Voltage", "display_order": 20},
    {"code": "LAMP_FIL", "parent_code": "LAMP", "level": 2, "name": "Filament Lamps", "display_order": 10},
    {"code": "LAMP_MOD", "parent_code": "LAMP", "level": 2, "name": "LED Modules", "display_order": 20},
]


RULES: list[dict[str, Any]] = [
    # Drivers share the accessories group, so they are matched by class only
    {"name": "drivers_root", "taxonomy_code": "DRV", "flag_name": "driver",
     "class_ids": [CLASS_DRIVER], "priority": 5},
    {"name": "luminaires_root", "taxonomy_code": "LUM", "flag_name": "luminaire",
     "group_ids": [GROUP_LUMINAIRES], "priority": 10},
    {"name": "lamps_root", "taxonomy_code": "LAMP", "flag_name": "lamp",
     "group_ids": [GROUP_LAMPS], "priority": 10},
    {"name": "track_profiles", "taxonomy_code": "ACC_TRACK", "flag_name": "accessory",
     "class_ids": [CLASS_TRACK_PROFILE], "priority": 20},
    {"name": "ceiling_luminaires", "taxonomy_code": "LUM_CEIL", "flag_name": "ceiling",
     "class_ids": [CLASS_DOWNLIGHT, CLASS_CEILING_WALL],
     "attribute_conditions": [{"attribute": FEATURE_CEILING_MOUNT, "operator": "equals", "value": True}],
     "priority": 30},
    {"name": "wall_luminaires", "taxonomy_code": "LUM_WALL", "flag_name": "wall",
     "class_ids": [CLASS_CEILING_WALL, CLASS_WALL],
     "attribute_conditions": [{"attribute": FEATURE_WALL_MOUNT, "operator": "equals", "value": True}],
     "priority": 30},
    {"name": "floor_luminaires", "taxonomy_code": "LUM_FLOOR", "flag_name": "floor",
     "class_ids": [CLASS_IN_GROUND, CLASS_BOLLARD], "priority": 30},
    {"name": "ceiling_recessed", "taxonomy_code": "LUM_CEIL_REC", "flag_name": "recessed",
     "class_ids": [CLASS_DOWNLIGHT], "text_pattern": r"recessed|built-in", "priority": 60},
    {"name": "ceiling_surface", "taxonomy_code": "LUM_CEIL_SURF",
     "class_ids": [CLASS_CEILING_WALL],
     "attribute_conditions": [{"attribute": FEATURE_CEILING_MOUNT, "operator": "equals", "value": True}],
     "priority": 60},
    {"name": "floor_recessed", "taxonomy_code": "LUM_FLOOR_REC", "flag_name": "recessed",
     "class_ids": [CLASS_IN_GROUND], "priority": 60},
    {"name": "floor_surface", "taxonomy_code": "LUM_FLOOR_SURF",
     "class_ids": [CLASS_BOLLARD], "priority": 60},
    {"name": "decorative_table", "taxonomy_code": "LUM_DECO_TABLE",
     "class_ids": [CLASS_TABLE_LAMP], "priority": 70},
    {"name": "decorative_pendant", "taxonomy_code": "LUM_DECO_PEND", "flag_name": "pendant",
     "class_ids": [CLASS_PENDANT], "priority": 70},
    {"name": "decorative_floor", "taxonomy_code": "LUM_DECO_FLOOR",
     "class_ids": [CLASS_FLOOR_LAMP], "priority": 70},
    {"name": "special_strips", "taxonomy_code": "LUM_SPEC_STRIP",
     "class_ids": [CLASS_LED_STRIP], "priority": 70},
    {"name": "special_tracks", "taxonomy_code": "LUM_SPEC_TRACK", "flag_name": "track",
     "class_ids": [CLASS_TRACK], "priority": 70},
    {"name": "driver_constant_current", "taxonomy_code": "DRV_CC",
     "class_ids": [CLASS_DRIVER],
     "attribute_conditions": [{"attribute": FEATURE_CONSTANT_CURRENT, "operator": "exists"}],
     "priority": 80},
    {"name": "driver_constant_voltage", "taxonomy_code": "DRV_CV",
     "class_ids": [CLASS_DRIVER],
     "attribute_conditions": [{"attribute": FEATURE_CONSTANT_VOLTAGE, "operator": "exists"}],
     "priority": 80},
    {"name": "filament_lamps", "taxonomy_code": "LAMP_FIL",
     "class_ids": [CLASS_FILAMENT_LAMP], "priority": 80},
    {"name": "led_modules", "taxonomy_code": "LAMP_MOD",
     "class_ids": [CLASS_LED_MODULE], "priority": 80},
    {"name": "high_output", "flag_name": "high_output",
     "attribute_conditions": [{"attribute": FEATURE_LUMENS, "operator": "greater_than", "value": 3000}],
     "priority": 90},
    # Text patterns are the lower-confidence fallback
    {"name": "indoor_detection", "flag_name": "indoor",
     "text_pattern": r"indoor|interior|internal", "priority": 100},
    {"name": "outdoor_detection", "flag_name": "outdoor",
     "text_pattern": r"outdoor|exterior|external|garden", "priority": 100},
    {"name": "submersible_detection", "flag_name": "submersible",
     "text_pattern": r"submersible|waterproof|underwater", "priority": 100},
    {"name": "trimless_detection", "flag_name": "trimless",
     "text_pattern": r"trimless|plaster", "priority": 100},
]


FILTERS: list[dict[str, Any]] = [
    {"key": "voltage", "label": "Voltage", "kind": "numeric_range",
     "source_attribute": FEATURE_VOLTAGE, "category": "electricals", "unit": "V",
     "display_order": 10},
    {"key": "dimmable", "label": "Dimmable", "kind": "boolean",
     "source_attribute": FEATURE_DIMMABLE, "category": "electricals",
     "display_order": 20},
    {"key": "class", "label": "Protection Class", "kind": "categorical",
     "source_attribute": FEATURE_PROTECTION_CLASS, "category": "electricals",
     "applicable_taxonomy_codes": ["LUM", "DRV"], "display_order": 30},
    {"key": "power", "label": "Power (W)", "kind": "numeric_range",
     "source_attribute": FEATURE_POWER, "category": "electricals", "unit": "W",
     "display_order": 35},
    {"key": "ip", "label": "IP Rating", "kind": "categorical",
     "source_attribute": FEATURE_IP_RATING, "category": "design",
     "applicable_taxonomy_codes": ["LUM"], "display_order": 40},
    {"key": "finishing_colour", "label": "Finishing Colour", "kind": "categorical",
     "source_attribute": FEATURE_COLOUR, "category": "design",
     "applicable_taxonomy_codes": ["LUM"], "display_order": 50},
    {"key": "cct", "label": "CCT (K)", "kind": "numeric_range",
     "source_attribute": FEATURE_CCT, "category": "light_engine", "unit": "K",
     "applicable_taxonomy_codes": ["LUM", "LAMP"], "display_order": 60},
    {"key": "cri", "label": "CRI", "kind": "categorical",
     "source_attribute": FEATURE_CRI, "category": "light_engine",
     "applicable_taxonomy_codes": ["LUM", "LAMP"], "display_order": 70},
    {"key": "lumens_output", "label": "Luminous Flux (lm)", "kind": "numeric_range",
     "source_attribute": FEATURE_LUMENS, "category": "light_engine", "unit": "lm",
     "applicable_taxonomy_codes": ["LUM", "LAMP"], "display_order": 80},
]


DEFAULT_CONFIG: dict[str, Any] = {
    "taxonomy": TAXONOMY,
    "rules": RULES,
    "filters": FILTERS,
}
