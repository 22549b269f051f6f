# shared_libs/config_models/pin_registry.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .components import (
    ButtonConfig,
    HeatingRelay,
    LedConfig,
    LightingRelay,
    Product,
    SensorKind,
)

BOARD_OWNER = "board"


@dataclass(frozen=True)
class PinConflict:
    pin: int
    products: List[str]
    components: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"pin": self.pin, "products": list(self.products), "components": list(self.components)}


@dataclass(frozen=True)
class PinReport:
    is_valid: bool
    conflicts: List[PinConflict] = field(default_factory=list)
    all_pins: List[int] = field(default_factory=list)

    def conflict_for(self, pin: int) -> Optional[PinConflict]:
        return next((c for c in self.conflicts if c.pin == pin), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "allPins": list(self.all_pins),
        }


class PinConflictError(ValueError):
    """Raised from the board refinement so the report survives pydantic's error wrapping."""

    def __init__(self, report: PinReport):
        self.report = report
        pins = ", ".join(str(c.pin) for c in report.conflicts)
        super().__init__(
            "All GPIO pins must be unique across all products and board components "
            f"(conflicting pins: {pins})"
        )


def sensor_pins(sensor: Any) -> List[Tuple[int, Optional[str]]]:
    """(pin, subpin label) pairs claimed by a sensor, chosen by its kind."""
    if sensor.kind is SensorKind.ANALOG:
        return [(sensor.pin, None)]
    if sensor.kind is SensorKind.UART:
        pins: List[Tuple[int, Optional[str]]] = [(sensor.tx_pin, "tx"), (sensor.rx_pin, "rx")]
        if sensor.out_pin is not None:
            pins.append((sensor.out_pin, "out"))
        return pins
    # I2C sensors sit on the shared bus and claim no pin of their own.
    return []


class PinRegistry:
    """Pin -> claims map for one board scope. Built and discarded within one check."""

    def __init__(self):
        # dict keeps first-claim order, which is the conflict reporting order
        self._claims: Dict[int, List[Tuple[str, str]]] = {}

    def claim(self, pin: int, owner: str, label: str) -> None:
        self._claims.setdefault(pin, []).append((owner, label))

    def claim_heating(self, owner: str, relays: Iterable[HeatingRelay]) -> None:
        for relay in relays:
            self.claim(relay.pin, owner, f"{owner}:heating:{relay.id}")

    def claim_lighting(self, owner: str, relays: Iterable[LightingRelay]) -> None:
        for relay in relays:
            self.claim(relay.pin, owner, f"{owner}:lighting:{relay.id}")

    def claim_sensors(self, owner: str, sensors: Iterable[Any]) -> None:
        for sensor in sensors:
            for pin, subpin in sensor_pins(sensor):
                label = f"{owner}:sensor:{sensor.id}"
                if subpin:
                    label = f"{label}:{subpin}"
                self.claim(pin, owner, label)

    def claim_leds(self, owner: str, leds: Iterable[LedConfig]) -> None:
        for led in leds:
            self.claim(led.pin, owner, f"{owner}:led:{led.id}")

    def claim_buttons(self, owner: str, buttons: Iterable[ButtonConfig]) -> None:
        for button in buttons:
            self.claim(button.pin, owner, f"{owner}:button:{button.id}")

    def claim_product(self, product: Product) -> None:
        self.claim_heating(product.sku, product.heating_relays)
        self.claim_lighting(product.sku, product.lighting_relays)
        self.claim_sensors(product.sku, product.sensors)
        self.claim_leds(product.sku, product.leds)
        self.claim_buttons(product.sku, product.buttons)

    def report(self) -> PinReport:
        conflicts: List[PinConflict] = []
        for pin, claims in self._claims.items():
            if len(claims) > 1:
                owners = list(dict.fromkeys(owner for owner, _ in claims))
                conflicts.append(PinConflict(pin=pin, products=owners, components=[label for _, label in claims]))
        return PinReport(
            is_valid=not conflicts,
            conflicts=conflicts,
            all_pins=sorted(self._claims),
        )


def detect_pin_conflicts(
    products: Sequence[Product],
    *,
    shared_sensors: Optional[Sequence[Any]] = None,
    shared_leds: Optional[Sequence[LedConfig]] = None,
    shared_buttons: Optional[Sequence[ButtonConfig]] = None,
) -> PinReport:
    """
    Walk every pin-bearing component of one board scope and report collisions.

    Shared board peripherals are claimed first under the owner 'board', then
    each product in list order. Any pin claimed more than once is a conflict,
    including reuse between two components of the same product.
    """
    registry = PinRegistry()
    registry.claim_sensors(BOARD_OWNER, shared_sensors or [])
    registry.claim_leds(BOARD_OWNER, shared_leds or [])
    registry.claim_buttons(BOARD_OWNER, shared_buttons or [])
    for product in products:
        registry.claim_product(product)
    return registry.report()
