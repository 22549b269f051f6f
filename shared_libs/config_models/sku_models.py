# shared_libs/config_models/sku_models.py

from typing import List, Optional

from pydantic import Field, StrictStr

from .common import CatalogRecord, NonNegativeInt


class HeatingWattage(CatalogRecord):
    circuit1: NonNegativeInt = Field(..., description="Wattage on heating circuit 1 (0 = not fitted).")
    circuit2: NonNegativeInt = Field(..., description="Wattage on heating circuit 2 (0 = not fitted).")
    circuit3: NonNegativeInt = Field(..., description="Wattage on heating circuit 3 (0 = not fitted).")

    def by_circuit(self) -> List[int]:
        return [self.circuit1, self.circuit2, self.circuit3]


class LegacyProduct(CatalogRecord):
    """Flat SKU -> compatible boards record from sku-mappings.json."""
    product_name: StrictStr = Field(..., alias="productName")
    sku: StrictStr
    variant: StrictStr
    compatible_boards: List[StrictStr] = Field(..., alias="compatibleBoards")
    heating_wattage: Optional[HeatingWattage] = Field(None, alias="heatingWattage")

    @property
    def has_lighting(self) -> bool:
        # "-L" in the SKU marks the lighting-enabled variants
        return "-L" in self.sku


class SkuMappings(CatalogRecord):
    products: List[LegacyProduct]

    def product_lines(self) -> List[str]:
        return list(dict.fromkeys(p.product_name for p in self.products))

    def products_in_line(self, product_name: str) -> List[LegacyProduct]:
        return [p for p in self.products if p.product_name == product_name]

    def find(self, sku: str) -> Optional[LegacyProduct]:
        wanted = sku.lower()
        return next((p for p in self.products if p.sku.lower() == wanted), None)
