# shared_libs/config_models/sensor_board_models.py

from typing import List, Optional

from pydantic import Field, StrictBool, StrictStr

from .common import CatalogRecord, GpioPin

# Flags a sensor board overwrites on the unit it is fitted to.
SENSOR_BOARD_FLAGS = (
    "has_mlx90614",
    "has_bme688",
    "has_sht41",
    "has_ld2410_uart",
    "has_ld2410_binary",
)


class SensorBoardCapabilities(CatalogRecord):
    has_mlx90614: StrictBool
    has_bme688: StrictBool
    has_sht41: StrictBool
    has_ld2410_uart: StrictBool
    has_ld2410_binary: StrictBool
    has_sensor_led: Optional[StrictBool] = None
    has_gnd_sw_mosfet: Optional[StrictBool] = None
    gnd_sw_gpio: Optional[GpioPin] = None


class SensorBoard(CatalogRecord):
    sku: StrictStr
    name: StrictStr
    compatible_boards: List[StrictStr] = Field(..., alias="compatibleBoards")
    capabilities: SensorBoardCapabilities

    def is_compatible_with(self, identifiers: List[str]) -> bool:
        wanted = {i.lower() for i in identifiers}
        return any(board.lower() in wanted for board in self.compatible_boards)
