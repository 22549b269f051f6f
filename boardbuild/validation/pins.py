import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from boardbuild.errors import StructuralValidationError
from boardbuild.validation.schema import SchemaTarget, SchemaValidator
from shared_libs.config_models.components import ButtonConfig, LedConfig, Product, SensorConfig
from shared_libs.config_models.pin_registry import PinReport, detect_pin_conflicts

logger = logging.getLogger(__name__)

_shared_sensors = TypeAdapter(List[SensorConfig])
_shared_leds = TypeAdapter(List[LedConfig])
_shared_buttons = TypeAdapter(List[ButtonConfig])


class PinDiagnostics:
    """
    Reports GPIO conflicts without rejecting the board.

    The board schema refuses any board with a pin collision; this walks the
    same components from a raw document so the full conflict set can be shown
    for a board that would not load.
    """

    def __init__(self, validator: Optional[SchemaValidator] = None):
        self.validator = validator or SchemaValidator()

    def diagnose_document(self, document: Mapping[str, Any]) -> PinReport:
        products = [
            self.validator.validate(raw, SchemaTarget.PRODUCT)
            for raw in document.get("products") or []
        ]
        try:
            sensors = _shared_sensors.validate_python(document.get("sensors") or [])
            leds = _shared_leds.validate_python(document.get("leds") or [])
            buttons = _shared_buttons.validate_python(document.get("buttons") or [])
        except ValidationError as e:
            raise StructuralValidationError.from_pydantic("board peripherals", e) from e
        return detect_pin_conflicts(products, shared_sensors=sensors, shared_leds=leds, shared_buttons=buttons)

    def diagnose_groups(self, products_by_board: Mapping[str, Sequence[Product]]) -> Dict[str, PinReport]:
        """One report per board; boards are independent pin namespaces."""
        reports: Dict[str, PinReport] = {}
        for board_id, products in products_by_board.items():
            reports[board_id] = detect_pin_conflicts(list(products))
            if not reports[board_id].is_valid:
                logger.info(f"Board {board_id}: {len(reports[board_id].conflicts)} pin conflict(s)")
        return reports


def format_pin_report(report: PinReport, title: str = "Pin Usage Report") -> str:
    lines = [f"📌 {title}", "=" * (len(title) + 2)]
    if report.is_valid:
        lines.append("✅ All pins are unique across products")
        lines.append(f"📊 Total unique pins used: {len(report.all_pins)}")
        if report.all_pins:
            lines.append(f"🔢 Pin range: {report.all_pins[0]} - {report.all_pins[-1]}")
    else:
        lines.append("❌ Pin conflicts detected:")
        lines.append("")
        for conflict in report.conflicts:
            lines.append(f"🔴 Pin {conflict.pin} is used by:")
            lines.extend(f"   - {component}" for component in conflict.components)
            lines.append("")
    lines.append("📋 All pins used:")
    lines.append(", ".join(str(pin) for pin in report.all_pins))
    return "\n".join(lines)
