# shared_libs/config_models/final_config_models.py

from typing import Annotated, Optional, Union

from pydantic import Discriminator, Field, StrictBool, StrictStr, Tag

from .board_models import BoardCapabilities, BoardModule, BoardPinout, I2CBusConfig
from .common import CatalogRecord
from .components import Product
from .sku_models import HeatingWattage

CONFIG_VERSION = "1.0.0"


class UnitSensorCapabilities(CatalogRecord):
    """Sensor presence flags of one unit built on a current-shape board."""
    has_mlx90614: StrictBool = False
    has_bme688: StrictBool = False
    has_sht41: StrictBool = False
    has_ld2410_uart: StrictBool = False
    has_ld2410_binary: StrictBool = False


class _FinalConfigBase(CatalogRecord):
    config_version: StrictStr = Field(..., alias="configVersion")
    sku: StrictStr
    board_type: StrictStr = Field(..., alias="boardType")
    board_version: StrictStr = Field(..., alias="boardVersion")
    batch_date: StrictStr = Field(..., alias="batchDate", description="Manufacturing batch, MYYYY or MMYYYY.")
    provisioning_key: StrictStr = Field(..., alias="provisioningKey")
    provisioning_secret: StrictStr = Field(..., alias="provisioningSecret")
    module: BoardModule


class FinalConfig(_FinalConfigBase):
    i2c: I2CBusConfig
    product: Product
    capabilities: Optional[UnitSensorCapabilities] = None


class LegacyFinalConfig(_FinalConfigBase):
    capabilities: BoardCapabilities
    pinout: BoardPinout
    heating_wattage: Optional[HeatingWattage] = Field(None, alias="heatingWattage")


def final_config_shape_of(value) -> str:
    if isinstance(value, dict):
        return "current" if ("product" in value or "i2c" in value) else "legacy"
    return "current" if isinstance(value, FinalConfig) else "legacy"


AnyFinalConfig = Annotated[
    Union[
        Annotated[FinalConfig, Tag("current")],
        Annotated[LegacyFinalConfig, Tag("legacy")],
    ],
    Discriminator(final_config_shape_of),
]
