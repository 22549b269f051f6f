import enum
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from uuid6 import uuid7

from boardbuild.errors import NotFoundError
from boardbuild.validation.schema import SchemaValidator
from shared_libs.config_models.board_models import BoardCapabilities, BoardConfig, LegacyBoardConfig
from shared_libs.config_models.components import Product, SensorKind
from shared_libs.config_models.final_config_models import (
    CONFIG_VERSION,
    FinalConfig,
    LegacyFinalConfig,
    UnitSensorCapabilities,
)
from shared_libs.config_models.sensor_board_models import SENSOR_BOARD_FLAGS, SensorBoard
from shared_libs.config_models.sku_models import HeatingWattage

logger = logging.getLogger(__name__)

Capabilities = Union[BoardCapabilities, UnitSensorCapabilities]


class EnvironmentalSensor(str, enum.Enum):
    BME688 = "bme688"
    SHT41 = "sht41"
    NONE = "none"


class Ld2410Mode(str, enum.Enum):
    BOTH = "both"
    UART = "uart"
    BINARY = "binary"
    NONE = "none"


@dataclass(frozen=True)
class ManualSensorSelection:
    """Sensors entered by hand. BME688 and SHT41 are one three-way choice, never two toggles."""
    has_mlx90614: bool
    environmental: EnvironmentalSensor = EnvironmentalSensor.NONE
    ld2410_mode: Ld2410Mode = Ld2410Mode.NONE

    def flags(self) -> Dict[str, bool]:
        return {
            "has_mlx90614": self.has_mlx90614,
            "has_bme688": self.environmental is EnvironmentalSensor.BME688,
            "has_sht41": self.environmental is EnvironmentalSensor.SHT41,
            "has_ld2410_uart": self.ld2410_mode in (Ld2410Mode.UART, Ld2410Mode.BOTH),
            "has_ld2410_binary": self.ld2410_mode in (Ld2410Mode.BINARY, Ld2410Mode.BOTH),
        }


@dataclass(frozen=True)
class ProvisioningCredentials:
    key: str
    secret: str

    @classmethod
    def generate(cls) -> "ProvisioningCredentials":
        return cls(key=str(uuid7()), secret=secrets.token_urlsafe(32))


def default_environmental(capabilities: Capabilities) -> EnvironmentalSensor:
    if capabilities.has_bme688:
        return EnvironmentalSensor.BME688
    if capabilities.has_sht41:
        return EnvironmentalSensor.SHT41
    return EnvironmentalSensor.NONE


def default_ld2410_mode(capabilities: Capabilities) -> Ld2410Mode:
    if capabilities.has_ld2410_uart and capabilities.has_ld2410_binary:
        return Ld2410Mode.BOTH
    if capabilities.has_ld2410_uart:
        return Ld2410Mode.UART
    if capabilities.has_ld2410_binary:
        return Ld2410Mode.BINARY
    return Ld2410Mode.NONE


def apply_sensor_board(capabilities: Capabilities, sensor_board: SensorBoard) -> Capabilities:
    """Flat overwrite of the sensor flags; returns a new value, the input is untouched."""
    update = {flag: getattr(sensor_board.capabilities, flag) for flag in SENSOR_BOARD_FLAGS}
    return capabilities.model_copy(update=update)


def apply_manual_selection(capabilities: Capabilities, selection: ManualSensorSelection) -> Capabilities:
    return capabilities.model_copy(update=selection.flags())


def product_capabilities(product: Product) -> UnitSensorCapabilities:
    """Sensor flags implied by the sensors a product declares."""
    ld2410 = [s for s in product.sensors if s.kind is SensorKind.UART and s.type == "ld2410"]
    return UnitSensorCapabilities(
        has_mlx90614=bool(product.sensors_of_type("mlx90614")),
        has_bme688=bool(product.sensors_of_type("bme688")),
        has_sht41=bool(product.sensors_of_type("sht41")),
        has_ld2410_uart=bool(ld2410),
        has_ld2410_binary=any(s.out_pin is not None for s in ld2410),
    )


class ConfigurationAssembler:
    """
    Composes the per-unit FinalConfig from an already-validated board.

    A current-shape board yields the embedded i2c + product record; a legacy
    board yields the flattened capabilities + pinout record. Either way the
    result is re-validated before it is returned.
    """

    def __init__(
        self,
        board: Union[BoardConfig, LegacyBoardConfig],
        *,
        config_version: str = CONFIG_VERSION,
        validator: Optional[SchemaValidator] = None,
    ):
        self.board = board
        self.config_version = config_version
        self.validator = validator or SchemaValidator()

    @property
    def is_legacy(self) -> bool:
        return isinstance(self.board, LegacyBoardConfig)

    def supports_lm35(self) -> bool:
        return self.is_legacy and self.board.capabilities.num_lm35_sensors > 0

    def product_for(self, sku: str) -> Product:
        product = self.board.find_product(sku)
        if product is None:
            raise NotFoundError("Product", sku, f"not defined on board {self.board.board_id}")
        return product

    def base_capabilities(self, sku: str) -> Capabilities:
        if self.is_legacy:
            return self.board.capabilities
        return product_capabilities(self.product_for(sku))

    def resolve_capabilities(
        self,
        sku: str,
        sensor_board: Optional[SensorBoard] = None,
        manual: Optional[ManualSensorSelection] = None,
        lm35_count: int = 0,
    ) -> Capabilities:
        capabilities = self.base_capabilities(sku)
        if sensor_board is not None:
            capabilities = apply_sensor_board(capabilities, sensor_board)
            logger.info(f"Applied sensor configuration from {sensor_board.name}")
        if manual is not None:
            capabilities = apply_manual_selection(capabilities, manual)
        if self.is_legacy:
            count = lm35_count if self.supports_lm35() else 0
            capabilities = capabilities.model_copy(update={"num_lm35_sensors": count})
        return capabilities

    def assemble(
        self,
        sku: str,
        batch_date: str,
        *,
        credentials: Optional[ProvisioningCredentials] = None,
        sensor_board: Optional[SensorBoard] = None,
        manual: Optional[ManualSensorSelection] = None,
        lm35_count: int = 0,
        heating_wattage: Optional[HeatingWattage] = None,
    ) -> Union[FinalConfig, LegacyFinalConfig]:
        credentials = credentials or ProvisioningCredentials.generate()
        capabilities = self.resolve_capabilities(sku, sensor_board, manual, lm35_count)

        document: Dict[str, Any] = {
            "configVersion": self.config_version,
            "sku": sku,
            "boardType": self.board.board_type,
            "boardVersion": self.board.board_version,
            "batchDate": batch_date,
            "provisioningKey": credentials.key,
            "provisioningSecret": credentials.secret,
            "module": self.board.module.to_document(),
        }
        if self.is_legacy:
            document["capabilities"] = capabilities.model_dump(mode="json")
            document["pinout"] = self.board.pinout.to_document()
            if heating_wattage is not None:
                document["heatingWattage"] = heating_wattage.to_document()
        else:
            document["i2c"] = self.board.i2c.to_document()
            document["product"] = self.product_for(sku).to_document()
            document["capabilities"] = capabilities.model_dump(mode="json")

        final = self.validator.validate_final_config(document)
        logger.info(f"Assembled configuration for {sku} on {self.board.board_id}")
        return final
