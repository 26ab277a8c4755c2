"""Lighting catalog generator with deterministic seeding.

Generates realistic lighting products (luminaires, lamps, drivers and
track components) with ETIM-style technical attributes in every encoding
the catalog import produces: scalars, ranges, logical values and
discrete labels. Uses seeded random for reproducibility.
"""

import hashlib
import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterator

from facetsearch.catalog import defaults as d
from facetsearch.domain.entities import Product


# ============================================================================
# Constants
# ============================================================================

# Synthetic supplier names (fictional companies)
SUPPLIERS = [
    "Lumenta",
    "Brightway",
    "Nordlicht",
    "Solara",
    "Candela",
    "Photonix",
    "Arcline",
]

# Price ranges by class (in cents)
PRICE_RANGES: dict[str, tuple[int, int]] = {
    d.CLASS_DOWNLIGHT: (2499, 18999),
    d.CLASS_CEILING_WALL: (3999, 29999),
    d.CLASS_WALL: (2999, 24999),
    d.CLASS_IN_GROUND: (8999, 49999),
    d.CLASS_BOLLARD: (12999, 79999),
    d.CLASS_FLOOR_LAMP: (9999, 89999),
    d.CLASS_TABLE_LAMP: (3999, 39999),
    d.CLASS_PENDANT: (5999, 129999),
    d.CLASS_LED_STRIP: (1999, 14999),
    d.CLASS_TRACK: (4999, 34999),
    d.CLASS_DRIVER: (1499, 12999),
    d.CLASS_TRACK_PROFILE: (999, 7999),
    d.CLASS_LED_MODULE: (1299, 9999),
    d.CLASS_FILAMENT_LAMP: (499, 2999),
}

# Class code -> (group code, class name, name templates)
CLASS_PROFILES: dict[str, tuple[str, str, list[str]]] = {
    d.CLASS_DOWNLIGHT: (d.GROUP_LUMINAIRES, "Downlight", [
        "{adj} Recessed Downlight {power}W",
        "{adj} Trimless Downlight {power}W",
        "{adj} Built-in Spot {power}W",
    ]),
    d.CLASS_CEILING_WALL: (d.GROUP_LUMINAIRES, "Ceiling/wall luminaire", [
        "{adj} Surface Panel {power}W",
        "{adj} Ceiling Light {power}W",
    ]),
    d.CLASS_WALL: (d.GROUP_LUMINAIRES, "Wall luminaire", [
        "{adj} Wall Washer {power}W",
        "{adj} Exterior Wall Light {power}W",
    ]),
    d.CLASS_IN_GROUND: (d.GROUP_LUMINAIRES, "In-ground luminaire", [
        "{adj} In-ground Uplight {power}W",
        "{adj} Submersible Floor Spot {power}W",
    ]),
    d.CLASS_BOLLARD: (d.GROUP_LUMINAIRES, "Bollard", [
        "{adj} Garden Bollard {power}W",
        "{adj} Path Bollard {power}W",
    ]),
    d.CLASS_FLOOR_LAMP: (d.GROUP_LUMINAIRES, "Floor lamp", [
        "{adj} Floor Lamp",
        "{adj} Reading Floor Light",
    ]),
    d.CLASS_TABLE_LAMP: (d.GROUP_LUMINAIRES, "Table lamp", [
        "{adj} Table Lamp",
        "{adj} Desk Light",
    ]),
    d.CLASS_PENDANT: (d.GROUP_LUMINAIRES, "Pendant luminaire", [
        "{adj} Pendant {power}W",
        "{adj} Linear Suspension {power}W",
    ]),
    d.CLASS_LED_STRIP: (d.GROUP_LUMINAIRES, "Light strip", [
        "{adj} LED Strip {power}W/m",
        "{adj} Waterproof LED Tape {power}W/m",
    ]),
    d.CLASS_TRACK: (d.GROUP_LUMINAIRES, "Track spotlight", [
        "{adj} Track Spot {power}W",
        "{adj} Track Projector {power}W",
    ]),
    d.CLASS_DRIVER: (d.GROUP_ACCESSORIES, "LED driver", [
        "{adj} LED Driver {power}W",
        "{adj} Power Supply {power}W",
    ]),
    d.CLASS_TRACK_PROFILE: (d.GROUP_ACCESSORIES, "Track profile", [
        "{adj} 3-Phase Track 2m",
        "{adj} Track Connector",
    ]),
    d.CLASS_LED_MODULE: (d.GROUP_LAMPS, "LED module", [
        "{adj} LED Module {power}W",
        "{adj} COB Engine {power}W",
    ]),
    d.CLASS_FILAMENT_LAMP: (d.GROUP_LAMPS, "LED filament lamp", [
        "{adj} Filament Bulb E27 {power}W",
        "{adj} Vintage Filament Lamp {power}W",
    ]),
}

# Classes describing complete luminaires (light engine attributes apply)
LUMINAIRE_CLASSES = {
    code for code, (group, _, _) in CLASS_PROFILES.items() if group == d.GROUP_LUMINAIRES
}

OUTDOOR_CLASSES = {d.CLASS_IN_GROUND, d.CLASS_BOLLARD, d.CLASS_WALL}

IP_RATINGS = ["IP20", "IP44", "IP54", "IP65", "IP67", "IP68"]
OUTDOOR_IP_RATINGS = ["IP65", "IP67", "IP68"]
COLOURS = ["White", "Black", "Grey", "Aluminium", "Brass", "Anthracite"]
PROTECTION_CLASSES = ["I", "II", "III"]
CCT_VALUES = [2200, 2700, 3000, 3500, 4000, 5000, 6500]
CRI_VALUES = ["80", "90", "95"]
POWER_VALUES = [3, 5, 6, 8, 10, 12.5, 15, 18, 20, 24, 30, 36, 40, 60]
VOLTAGES = [12, 24, 48, 230]

ADJECTIVES = [
    "Aria", "Nova", "Lumo", "Orbit", "Slim", "Halo", "Prism",
    "Vega", "Terra", "Pulse", "Zen", "Edge", "Flux", "Core",
]


# ============================================================================
# Generator Configuration
# ============================================================================


@dataclass
class GeneratorConfig:
    """Configuration for catalog generation.

    Attributes:
        seed: Random seed for reproducibility.
        product_count: Number of products to generate.
        classes: Class codes to draw from (all profiles when empty).
    """

    seed: int = 42
    product_count: int = 500
    classes: list[str] = field(default_factory=list)

    @classmethod
    def small(cls) -> "GeneratorConfig":
        """Create config for small catalog (~100 products)."""
        return cls(seed=42, product_count=100)

    @classmethod
    def full(cls) -> "GeneratorConfig":
        """Create config for full catalog (~10k products)."""
        return cls(seed=42, product_count=10_000)


# ============================================================================
# Catalog Generator
# ============================================================================


class CatalogGenerator:
    """Generates lighting catalogs with deterministic seeding.

    The same configuration always yields the same products, so generated
    catalogs can back tests and rebuild idempotence checks.

    Example usage:
        generator = CatalogGenerator(GeneratorConfig.small())
        for product in generator.generate():
            print(product.description_short)
    """

    def __init__(self, config: GeneratorConfig) -> None:
        """Initialize generator with configuration.

        Args:
            config: Generator configuration.
        """
        self.config = config
        self.rng = random.Random(config.seed)
        self.classes = sorted(config.classes or CLASS_PROFILES)

    def _deterministic_seed(self, *args: str | int) -> int:
        """Create deterministic seed from arguments.

        Args:
            args: Values to include in seed.

        Returns:
            Deterministic integer seed.
        """
        data = "|".join(str(a) for a in args)
        hash_bytes = hashlib.md5(data.encode()).digest()
        return int.from_bytes(hash_bytes[:4], "big")

    def _generate_image_url(self, product_id: str) -> str:
        """Generate placeholder image URL."""
        seed = self._deterministic_seed(product_id)
        return f"https://picsum.photos/seed/{seed}/400/400"

    def _generate_attributes(
        self, rng: random.Random, class_code: str, power: float, outdoor: bool
    ) -> dict[str, Any]:
        """Generate technical attributes for one product.

        Encodings are mixed on purpose: power may arrive as a scalar or as a
        range, dimmability as a bool or a yes/no string, colour as a label
        or a code/label pair.

        Args:
            rng: Per-product random generator.
            class_code: ETIM class of the product.
            power: Nominal power in watts.
            outdoor: Whether the product is meant for outdoor use.

        Returns:
            Attribute code -> raw value.
        """
        attributes: dict[str, Any] = {}

        if rng.random() < 0.3:
            attributes[d.FEATURE_POWER] = {"numeric": power, "range": [power, power * 1.5], "unit": "W"}
        else:
            attributes[d.FEATURE_POWER] = power

        if class_code in (d.CLASS_DRIVER, d.CLASS_LED_STRIP, d.CLASS_LED_MODULE):
            attributes[d.FEATURE_VOLTAGE] = rng.choice(VOLTAGES[:3])
        elif rng.random() < 0.8:
            attributes[d.FEATURE_VOLTAGE] = rng.choice([[220, 240], 230])

        if rng.random() < 0.85:
            dimmable = rng.random() < 0.6
            attributes[d.FEATURE_DIMMABLE] = (
                dimmable if rng.random() < 0.5 else ("Yes" if dimmable else "No")
            )

        if class_code == d.CLASS_DRIVER:
            attributes[d.FEATURE_PROTECTION_CLASS] = rng.choice(PROTECTION_CLASSES[1:])
            mode = d.FEATURE_CONSTANT_CURRENT if rng.random() < 0.5 else d.FEATURE_CONSTANT_VOLTAGE
            attributes[mode] = {"numeric": rng.choice([350, 500, 700, 24]), "boolean": True}
            return attributes

        if class_code == d.CLASS_TRACK_PROFILE:
            attributes.pop(d.FEATURE_DIMMABLE, None)
            attributes[d.FEATURE_COLOUR] = rng.choice(COLOURS[:3])
            return attributes

        attributes[d.FEATURE_CCT] = rng.choice(CCT_VALUES)
        attributes[d.FEATURE_CRI] = rng.choice(CRI_VALUES)
        lumens = int(power * rng.uniform(70, 130))
        attributes[d.FEATURE_LUMENS] = lumens

        if class_code in LUMINAIRE_CLASSES:
            attributes[d.FEATURE_PROTECTION_CLASS] = rng.choice(PROTECTION_CLASSES)
            attributes[d.FEATURE_IP_RATING] = rng.choice(
                OUTDOOR_IP_RATINGS if outdoor else IP_RATINGS
            )
            colour = rng.choice(COLOURS)
            if rng.random() < 0.5:
                attributes[d.FEATURE_COLOUR] = colour
            else:
                attributes[d.FEATURE_COLOUR] = {"code": f"EV{COLOURS.index(colour):06d}", "label": colour}

        if class_code in (d.CLASS_DOWNLIGHT, d.CLASS_CEILING_WALL):
            attributes[d.FEATURE_CEILING_MOUNT] = True
        if class_code in (d.CLASS_CEILING_WALL, d.CLASS_WALL):
            attributes[d.FEATURE_WALL_MOUNT] = rng.random() < 0.7 or class_code == d.CLASS_WALL

        return attributes

    def _generate_product(self, index: int) -> Product:
        """Generate a single product.

        Args:
            index: Product index within the catalog.

        Returns:
            Generated product.
        """
        rng = random.Random(self._deterministic_seed(self.config.seed, index))
        class_code = rng.choice(self.classes)
        group_code, class_name, templates = CLASS_PROFILES[class_code]

        power = rng.choice(POWER_VALUES)
        outdoor = class_code in OUTDOOR_CLASSES and rng.random() < 0.8
        template = rng.choice(templates)
        title = template.format(adj=rng.choice(ADJECTIVES), power=power)
        setting = "outdoor" if outdoor else "indoor"
        supplier = rng.choice(SUPPLIERS)

        low, high = PRICE_RANGES[class_code]
        price = Decimal(rng.randint(low, high)) / 100

        product_id = f"{class_code[2:]}-{index:06d}"
        return Product(
            id=product_id,
            group_code=group_code,
            class_code=class_code,
            class_name=class_name,
            attributes=self._generate_attributes(rng, class_code, power, outdoor),
            description_short=title,
            description_long=(
                f"{title} by {supplier}. {class_name} for {setting} applications."
            ),
            supplier=supplier,
            price=price if rng.random() < 0.95 else None,
            image_url=self._generate_image_url(product_id),
        )

    def generate(self) -> Iterator[Product]:
        """Generate all products.

        Yields:
            Generated products.
        """
        for index in range(self.config.product_count):
            yield self._generate_product(index)

    def generate_all(self) -> list[Product]:
        """Generate all products as a list.

        Returns:
            List of all generated products.
        """
        return list(self.generate())


def generate_catalog(seed: int = 42, product_count: int = 500) -> list[Product]:
    """Generate a catalog with the given seed and size.

    Args:
        seed: Random seed.
        product_count: Number of products.

    Returns:
        List of products.
    """
    return CatalogGenerator(GeneratorConfig(seed=seed, product_count=product_count)).generate_all()
