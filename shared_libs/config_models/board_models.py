# shared_libs/config_models/board_models.py

from typing import Annotated, List, Optional, Self, Union

from pydantic import Discriminator, Field, StrictBool, StrictStr, Tag, model_validator

from .common import CatalogRecord, GpioPin, NonNegativeInt, PositiveInteger
from .components import ButtonConfig, LedConfig, Product, SensorConfig
from .pin_registry import PinConflictError, PinReport, detect_pin_conflicts


class BoardModule(CatalogRecord):
    chip: StrictStr = Field(..., description="Module chip name, e.g. 'ESP32-C6'.")
    flash_size_mb: PositiveInteger = Field(..., description="Flash size in MB (positive integer).")


class I2CBusConfig(CatalogRecord):
    sda: GpioPin
    scl: GpioPin
    port: PositiveInteger


class _BoardIdentity(CatalogRecord):
    board_type: StrictStr = Field(..., alias="boardType")
    board_version: StrictStr = Field(..., alias="boardVersion", description="Hardware revision, e.g. 'V5'.")
    module: BoardModule
    aliases: Optional[List[StrictStr]] = Field(None, description="Alternate identifiers for the same physical board.")

    @property
    def board_id(self) -> str:
        return f"{self.board_type}-{self.board_version}"

    @property
    def identifiers(self) -> List[str]:
        return [self.board_id, *(self.aliases or [])]

    def matches(self, identifier: str) -> bool:
        wanted = identifier.lower()
        return any(candidate.lower() == wanted for candidate in self.identifiers)


class BoardConfig(_BoardIdentity):
    """Current board shape: products are defined directly on the board."""
    i2c: I2CBusConfig
    sensors: Optional[List[SensorConfig]] = Field(None, description="Sensors shared by every product on the board.")
    leds: Optional[List[LedConfig]] = None
    buttons: Optional[List[ButtonConfig]] = None
    products: List[Product] = Field(..., min_length=1)

    @model_validator(mode='after')
    def check_pin_uniqueness(self) -> Self:
        report = self.pin_report()
        if not report.is_valid:
            raise PinConflictError(report)
        return self

    def pin_report(self) -> PinReport:
        return detect_pin_conflicts(
            self.products,
            shared_sensors=self.sensors,
            shared_leds=self.leds,
            shared_buttons=self.buttons,
        )

    def find_product(self, sku: str) -> Optional[Product]:
        wanted = sku.lower()
        return next((p for p in self.products if p.sku.lower() == wanted), None)


# --- Legacy flattened board shape ---
class BoardCapabilities(CatalogRecord):
    has_mlx90614: StrictBool
    has_bme688: StrictBool
    has_sht41: StrictBool
    num_lm35_sensors: NonNegativeInt = 0
    has_ld2410_uart: StrictBool
    has_ld2410_binary: StrictBool
    num_heating_circuits: NonNegativeInt = 0
    num_lighting_circuits: NonNegativeInt = 0
    has_pairing_led: StrictBool = False
    has_sensor_led: StrictBool = False
    has_pairing_button: StrictBool = False
    has_gnd_sw: StrictBool = False


class BoardPinout(CatalogRecord):
    """Named pin slots; a null GPIO slot means the function is not wired on this board."""
    pairing_button_gpio: Optional[GpioPin] = None
    gnd_sw_gpio: Optional[GpioPin] = None
    heater_relay_1: Optional[GpioPin] = None
    heater_relay_2: Optional[GpioPin] = None
    heater_relay_3: Optional[GpioPin] = None
    lights_relay_1: Optional[GpioPin] = None
    lights_relay_2: Optional[GpioPin] = None
    i2c_sda: Optional[GpioPin] = None
    i2c_scl: Optional[GpioPin] = None
    i2c_port: NonNegativeInt = 0
    mlx90614_addr: NonNegativeInt = 0
    bme688_addr: NonNegativeInt = 0
    sht41_addr: NonNegativeInt = 0
    ld2410_tx: Optional[GpioPin] = None
    ld2410_rx: Optional[GpioPin] = None
    ld2410_out: Optional[GpioPin] = None
    ld2410_uart_port: NonNegativeInt = 0
    lm35_remote: Optional[GpioPin] = None
    lm35_main: Optional[GpioPin] = None
    pairing_led: Optional[GpioPin] = None
    sensor_led: Optional[GpioPin] = None


class LegacyBoardConfig(_BoardIdentity):
    capabilities: BoardCapabilities
    pinout: BoardPinout


def board_shape_of(value) -> str:
    if isinstance(value, dict):
        return "current" if ("products" in value or "i2c" in value) else "legacy"
    return "current" if isinstance(value, BoardConfig) else "legacy"


AnyBoardConfig = Annotated[
    Union[
        Annotated[BoardConfig, Tag("current")],
        Annotated[LegacyBoardConfig, Tag("legacy")],
    ],
    Discriminator(board_shape_of),
]
