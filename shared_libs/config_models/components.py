# shared_libs/config_models/components.py

import enum
from typing import Annotated, Any, ClassVar, List, Literal, Optional, Self, Union

from pydantic import Discriminator, Field, StrictStr, Tag, ValidationInfo, field_validator, model_validator

from .common import CatalogRecord, GpioPin, NonNegativeInt, StrictInteger

# Validation context flag that admits the lighting types emitted by the
# SKU-mapping migration ("led_strip", "led_ring").
MIGRATION_CONTEXT_KEY = "allow_migrated_lighting"

LIGHTING_TYPES = ("dimmable", "rgb", "warmth", "regular")
MIGRATED_LIGHTING_TYPES = ("led_strip", "led_ring")


# --- Relays ---
class HeatingRelay(CatalogRecord):
    id: StrictStr = Field(..., description="Relay identifier, e.g. 'heater_1'.")
    pin: GpioPin = Field(..., description="GPIO pin driving the relay.")
    wattage: NonNegativeInt = Field(..., description="Power rating of the heating circuit in watts.")


class LightingRelay(CatalogRecord):
    id: StrictStr = Field(..., description="Relay identifier, e.g. 'lights_1'.")
    pin: GpioPin = Field(..., description="GPIO pin driving the relay.")
    type: StrictStr = Field(..., description="Lighting type: dimmable, rgb, warmth or regular.")

    @field_validator("type")
    @classmethod
    def check_lighting_type(cls, value: str, info: ValidationInfo) -> str:
        allowed = LIGHTING_TYPES
        if info.context and info.context.get(MIGRATION_CONTEXT_KEY):
            allowed = LIGHTING_TYPES + MIGRATED_LIGHTING_TYPES
        if value not in allowed:
            raise ValueError(f"lighting type must be one of {', '.join(allowed)}; got '{value}'")
        return value


# --- Sensors (tagged union on 'kind', derived from 'type') ---
class SensorKind(str, enum.Enum):
    I2C = "i2c"
    UART = "uart"
    ANALOG = "analog"


class I2CSensorConfig(CatalogRecord):
    kind: ClassVar[SensorKind] = SensorKind.I2C
    id: StrictStr
    type: Literal["mlx90614", "bme688", "sht41"]
    address: StrictInteger = Field(..., description="I2C address.")


class UARTSensorConfig(CatalogRecord):
    kind: ClassVar[SensorKind] = SensorKind.UART
    id: StrictStr
    type: Literal["ld2410"]
    uart_port: StrictInteger
    tx_pin: GpioPin
    rx_pin: GpioPin
    out_pin: Optional[GpioPin] = Field(None, description="Digital presence output of the LD2410, if wired.")


class AnalogSensorConfig(CatalogRecord):
    kind: ClassVar[SensorKind] = SensorKind.ANALOG
    id: StrictStr
    type: Literal["lm35"]
    pin: GpioPin = Field(..., description="GPIO used for the analog reading.")


SENSOR_KIND_BY_TYPE = {
    "mlx90614": SensorKind.I2C,
    "bme688": SensorKind.I2C,
    "sht41": SensorKind.I2C,
    "ld2410": SensorKind.UART,
    "lm35": SensorKind.ANALOG,
}


def sensor_kind_of(value: Any) -> Optional[str]:
    sensor_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if not isinstance(sensor_type, str):
        return None
    kind = SENSOR_KIND_BY_TYPE.get(sensor_type)
    return kind.value if kind else None


SensorConfig = Annotated[
    Union[
        Annotated[I2CSensorConfig, Tag(SensorKind.I2C.value)],
        Annotated[UARTSensorConfig, Tag(SensorKind.UART.value)],
        Annotated[AnalogSensorConfig, Tag(SensorKind.ANALOG.value)],
    ],
    Discriminator(
        sensor_kind_of,
        custom_error_type="sensor_type",
        custom_error_message=f"Sensor 'type' must be one of: {', '.join(SENSOR_KIND_BY_TYPE)}",
    ),
]


# --- LEDs and buttons ---
class LedConfig(CatalogRecord):
    id: StrictStr
    pin: GpioPin
    type: Literal["status", "indicator", "ambient"]


class ButtonConfig(CatalogRecord):
    id: StrictStr
    pin: GpioPin
    type: Literal["pairing", "switch", "reset"]


# --- Product ---
class Product(CatalogRecord):
    """A manufacturable SKU variant and the hardware it drives on its board."""
    sku: StrictStr = Field(..., description="Product SKU, e.g. 'IR-HALO-4800'.")
    variant: StrictStr = Field(..., description="Variant description, e.g. '4800W standard'.")
    name: StrictStr = Field(..., description="Product family name, e.g. 'Halo'.")
    heating_relays: List[HeatingRelay] = Field(..., alias="heatingRelays", max_length=3)
    lighting_relays: List[LightingRelay] = Field(..., alias="lightingRelays", max_length=2)
    sensors: List[SensorConfig] = Field(default_factory=list)
    leds: List[LedConfig] = Field(default_factory=list)
    buttons: List[ButtonConfig] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_has_components(self) -> Self:
        if not (self.heating_relays or self.lighting_relays or self.sensors or self.leds or self.buttons):
            raise ValueError("Product must have at least one component (relays, sensors, LEDs, or buttons)")
        return self

    def sensors_of_type(self, sensor_type: str) -> List[Union[I2CSensorConfig, UARTSensorConfig, AnalogSensorConfig]]:
        return [s for s in self.sensors if s.type == sensor_type]
