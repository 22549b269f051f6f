# shared_libs/config_models/common.py

from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, Field

# --- Scalar types shared by every catalog schema ---
# Strict so that "18" or 18.0 in a catalog file is rejected instead of coerced.
PositiveInteger = Annotated[int, Field(strict=True, gt=0)]
GpioPin = PositiveInteger
NonNegativeInt = Annotated[int, Field(strict=True, ge=0)]
StrictInteger = Annotated[int, Field(strict=True)]


class CatalogRecord(BaseModel):
    """
    Base for all catalog and output records.

    Unknown keys are kept (extra="allow") so a field added by a newer catalog
    survives load -> validate -> save untouched. Records are frozen; derive new
    values with model_copy(update=...) instead of mutating a loaded one.
    """
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready dict using the catalog's key names, omitting keys never provided."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
