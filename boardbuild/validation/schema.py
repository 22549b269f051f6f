import enum
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from boardbuild.errors import ConstraintViolationError, StructuralValidationError, find_pin_conflict
from shared_libs.config_models.board_models import AnyBoardConfig, BoardConfig, LegacyBoardConfig
from shared_libs.config_models.components import MIGRATION_CONTEXT_KEY, Product
from shared_libs.config_models.final_config_models import AnyFinalConfig
from shared_libs.config_models.sensor_board_models import SensorBoard
from shared_libs.config_models.sku_models import SkuMappings

logger = logging.getLogger(__name__)


class SchemaTarget(str, enum.Enum):
    BOARD = "board"
    LEGACY_BOARD = "legacy_board"
    ANY_BOARD = "any_board"
    SENSOR_BOARD = "sensor_board"
    PRODUCT = "product"
    SKU_CATALOG = "sku_catalog"
    FINAL_CONFIG = "final_config"


_TARGET_TYPES = {
    SchemaTarget.BOARD: BoardConfig,
    SchemaTarget.LEGACY_BOARD: LegacyBoardConfig,
    SchemaTarget.ANY_BOARD: AnyBoardConfig,
    SchemaTarget.SENSOR_BOARD: SensorBoard,
    SchemaTarget.PRODUCT: Product,
    SchemaTarget.SKU_CATALOG: SkuMappings,
    SchemaTarget.FINAL_CONFIG: AnyFinalConfig,
}


class SchemaValidator:
    """
    Validates untyped JSON values against the catalog and output schemas.

    Returns the typed record on success. A shape/type/enum/range failure raises
    StructuralValidationError listing every issue; a board whose products share
    a GPIO pin raises ConstraintViolationError with the full conflict report.
    The input value is never modified.
    """

    def __init__(self):
        self._adapters: Dict[SchemaTarget, TypeAdapter] = {
            target: TypeAdapter(type_) for target, type_ in _TARGET_TYPES.items()
        }

    def validate(
        self,
        value: Any,
        target: SchemaTarget,
        *,
        source: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        target = SchemaTarget(target)
        try:
            record = self._adapters[target].validate_python(value, context=dict(context) if context else None)
        except ValidationError as e:
            conflict = find_pin_conflict(e)
            if conflict is not None:
                board_id = _board_id_of(value)
                logger.debug(f"Pin refinement failed for {board_id or source}")
                raise ConstraintViolationError(conflict.report, board_id=board_id) from e
            raise StructuralValidationError.from_pydantic(target.value, e, source=source) from e
        logger.debug(f"Validated {target.value}{f' from {source}' if source else ''}")
        return record

    def is_valid(self, value: Any, target: SchemaTarget) -> bool:
        try:
            self.validate(value, target)
        except (StructuralValidationError, ConstraintViolationError):
            return False
        return True

    # Convenience wrappers
    def validate_board(self, value: Any, source: Optional[str] = None):
        return self.validate(value, SchemaTarget.ANY_BOARD, source=source)

    def validate_sensor_board(self, value: Any, source: Optional[str] = None) -> SensorBoard:
        return self.validate(value, SchemaTarget.SENSOR_BOARD, source=source)

    def validate_product(self, value: Any, *, migrated: bool = False) -> Product:
        context = {MIGRATION_CONTEXT_KEY: True} if migrated else None
        return self.validate(value, SchemaTarget.PRODUCT, context=context)

    def validate_sku_catalog(self, value: Any, source: Optional[str] = None) -> SkuMappings:
        return self.validate(value, SchemaTarget.SKU_CATALOG, source=source)

    def validate_final_config(self, value: Any):
        return self.validate(value, SchemaTarget.FINAL_CONFIG)


def _board_id_of(value: Any) -> Optional[str]:
    if isinstance(value, dict) and isinstance(value.get("boardType"), str) and isinstance(value.get("boardVersion"), str):
        return f"{value['boardType']}-{value['boardVersion']}"
    return None
