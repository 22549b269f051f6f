from typing import Any, Callable, Dict, Tuple

from boardbuild.errors import BoardConfigError, ConstraintViolationError
from boardbuild.utils.catalog_store import CatalogStore, read_json
from boardbuild.validation.pins import format_pin_report
from boardbuild.validation.schema import SchemaTarget, SchemaValidator

_TARGET_BY_KIND = {
    "sku_catalog": SchemaTarget.SKU_CATALOG,
    "board": SchemaTarget.ANY_BOARD,
    "sensor_board": SchemaTarget.SENSOR_BOARD,
}


class CatalogValidator:
    """Validates every file of a catalog directory and reports each one."""

    def __init__(self, store: CatalogStore, echo: Callable[[str], None] = print):
        self.store = store
        self.validator: SchemaValidator = store.validator
        self.echo = echo

    def validate(self) -> Tuple[bool, Dict[str, Any]]:
        self.echo(f"\n--- Validating Catalog: {self.store.root} ---")
        all_valid = True
        validated: Dict[str, Any] = {}

        documents = self.store.iter_raw_documents()
        if not documents:
            self.echo(f"❌ Error: No catalog files found under '{self.store.root}'")
            return False, validated

        for kind, path in documents:
            target = _TARGET_BY_KIND[kind]
            try:
                record = self.validator.validate(read_json(path), target, source=str(path))
            except ConstraintViolationError as e:
                self.echo(f"❌ Pin uniqueness failed for '{path.name}'!")
                self.echo(format_pin_report(e.report, title=f"Pin Usage Report: {e.board_id or path.stem}"))
                all_valid = False
                continue
            except BoardConfigError as e:
                self.echo(f"❌ Validation Failed for '{path.name}'!")
                self.echo(str(e))
                all_valid = False
                continue

            validated[str(path)] = record
            self.echo(f"✅ {path.name} is a valid {target.value.replace('_', ' ')}.")
            pin_report = getattr(record, "pin_report", None)
            if pin_report is not None:
                report = pin_report()
                self.echo(f"   GPIO pins in use: {', '.join(str(p) for p in report.all_pins)}")

        if all_valid:
            self.echo("\n✅ All Catalog Files Passed.")
        else:
            self.echo("\n❌ Catalog Validation Failed!")
        return all_valid, validated
