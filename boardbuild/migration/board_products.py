"""Reshape the flat SKU -> compatible-boards catalog into per-board products.

Each legacy product becomes one Product per compatible board. Heating relays
exist only for circuits with non-zero wattage that the board wires; lighting
relays only for '-L' SKUs on boards that wire the lighting relays. Pins are
copied from the board pinout table, never re-derived.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from boardbuild.errors import NotFoundError
from boardbuild.validation.schema import SchemaValidator
from shared_libs.config_models.components import Product
from shared_libs.config_models.sku_models import LegacyProduct

logger = logging.getLogger(__name__)

PinoutSlots = Mapping[str, Optional[int]]

# Relay pin slots per legacy board (from the board configs the SKU catalog refers to).
BOARD_PINOUTS: Dict[str, Dict[str, Optional[int]]] = {
    "IS-3R-WL-V5": {
        "heater_relay_1": 18,
        "heater_relay_2": 19,
        "heater_relay_3": 20,
        "lights_relay_1": 4,
        "lights_relay_2": 5,
    },
    "IS-3R-WL-V3": {
        "heater_relay_1": 18,
        "heater_relay_2": 19,
        "heater_relay_3": 20,
        "lights_relay_1": 4,
        "lights_relay_2": 5,
    },
    "IS-3R-V2": {
        "heater_relay_1": 18,
        "heater_relay_2": 19,
        "heater_relay_3": 20,
        "lights_relay_1": None,
        "lights_relay_2": None,
    },
    "IS-3R-V1": {
        "heater_relay_1": 18,
        "heater_relay_2": 19,
        "heater_relay_3": 20,
        "lights_relay_1": None,
        "lights_relay_2": None,
    },
    "IS-1R-V2": {
        "heater_relay_1": 18,
        "heater_relay_2": None,
        "heater_relay_3": None,
        "lights_relay_1": None,
        "lights_relay_2": None,
    },
}

# (relay id, pinout slot, lighting type)
LIGHTING_SLOTS = (
    ("lights_1", "lights_relay_1", "led_strip"),
    ("lights_2", "lights_relay_2", "led_ring"),
)


def build_heating_relays(product: LegacyProduct, pinout: PinoutSlots) -> List[Dict[str, Any]]:
    relays: List[Dict[str, Any]] = []
    if product.heating_wattage is None:
        return relays
    for index, wattage in enumerate(product.heating_wattage.by_circuit(), start=1):
        pin = pinout.get(f"heater_relay_{index}")
        if wattage > 0 and pin:
            relays.append({"id": f"heater_{index}", "pin": pin, "wattage": wattage})
    return relays


def build_lighting_relays(product: LegacyProduct, pinout: PinoutSlots) -> List[Dict[str, Any]]:
    if not product.has_lighting:
        return []
    relays: List[Dict[str, Any]] = []
    for relay_id, slot, lighting_type in LIGHTING_SLOTS:
        pin = pinout.get(slot)
        if pin:
            relays.append({"id": relay_id, "pin": pin, "type": lighting_type})
    return relays


class BoardProductBuilder:
    """Builds new-model Products from legacy SKU records and a board pinout table."""

    def __init__(self, pinouts: Optional[Mapping[str, PinoutSlots]] = None, validator: Optional[SchemaValidator] = None):
        self.pinouts = dict(BOARD_PINOUTS if pinouts is None else pinouts)
        self.validator = validator or SchemaValidator()

    def pinout_for(self, board_id: str) -> PinoutSlots:
        pinout = self.pinouts.get(board_id)
        if pinout is None:
            raise NotFoundError("Board pinout", board_id, "no entry in the migration pinout table")
        return pinout

    def build_product(self, product: LegacyProduct, board_id: str) -> Optional[Product]:
        pinout = self.pinout_for(board_id)
        document = {
            "sku": product.sku,
            "variant": product.variant,
            "name": product.product_name,
            "heatingRelays": build_heating_relays(product, pinout),
            "lightingRelays": build_lighting_relays(product, pinout),
        }
        if not document["heatingRelays"] and not document["lightingRelays"]:
            logger.warning(f"Skipping {product.sku} on {board_id}: no heating or lighting circuit is wired")
            return None
        return self.validator.validate_product(document, migrated=True)

    def build(self, products: Sequence[LegacyProduct]) -> Dict[str, List[Product]]:
        board_products: Dict[str, List[Product]] = {}
        for product in products:
            for board_id in product.compatible_boards:
                built = self.build_product(product, board_id)
                # Board appears in the result even if every product on it was skipped
                board_products.setdefault(board_id, [])
                if built is not None:
                    board_products[board_id].append(built)
        logger.info(f"Migrated {len(products)} legacy product(s) onto {len(board_products)} board(s)")
        return board_products


def migrate_to_board_products(
    products: Sequence[LegacyProduct],
    pinouts: Optional[Mapping[str, PinoutSlots]] = None,
) -> Dict[str, List[Product]]:
    return BoardProductBuilder(pinouts).build(products)


def summarize_migration(board_products: Mapping[str, Sequence[Product]], examples: int = 3) -> str:
    lines = ["📋 Generated board product configurations:", ""]
    for board_id, products in board_products.items():
        lines.append(f"🔧 Board: {board_id}")
        lines.append(f"   Products: {len(products)}")
        for product in list(products)[:examples]:
            lines.append(f"   - {product.sku}: {product.variant}")
            lines.append(f"     Heating: {len(product.heating_relays)} circuits")
            lines.append(f"     Lighting: {len(product.lighting_relays)} circuits")
        if len(products) > examples:
            lines.append(f"   ... and {len(products) - examples} more products")
        lines.append("")
    return "\n".join(lines)
