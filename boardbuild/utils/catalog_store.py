import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from boardbuild.errors import BoardConfigError, NotFoundError, StructuralValidationError, ValidationIssue
from boardbuild.validation.schema import SchemaValidator
from shared_libs.config_models.sensor_board_models import SensorBoard
from shared_libs.config_models.sku_models import SkuMappings

logger = logging.getLogger(__name__)

BOARDS_DIR = "boards"
SENSOR_BOARDS_DIR = "sensor-boards"
SKU_MAPPINGS_FILE = "sku-mappings.json"


def read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StructuralValidationError(
            "JSON document",
            [ValidationIssue(path=f"line {e.lineno}", message=e.msg, type="json_invalid")],
            source=str(path),
        ) from e


class CatalogStore:
    """
    Reads the flat-file catalogs under one root directory.

    Layout: boards/<boardId>.json, sensor-boards/*.json, sku-mappings.json.
    Every record is validated as it is loaded; nothing is cached between calls.
    """

    def __init__(self, root: Path, validator: Optional[SchemaValidator] = None):
        self.root = Path(root)
        self.validator = validator or SchemaValidator()

    @property
    def boards_dir(self) -> Path:
        return self.root / BOARDS_DIR

    @property
    def sensor_boards_dir(self) -> Path:
        return self.root / SENSOR_BOARDS_DIR

    def load_sku_mappings(self) -> SkuMappings:
        path = self.root / SKU_MAPPINGS_FILE
        if not path.is_file():
            raise NotFoundError("SKU mappings file", str(path))
        return self.validator.validate_sku_catalog(read_json(path), source=str(path))

    def board_files(self) -> List[Path]:
        if not self.boards_dir.is_dir():
            return []
        return sorted(p for p in self.boards_dir.iterdir() if p.suffix.lower() == ".json")

    def find_board_file(self, board_id: str) -> Optional[Path]:
        exact = self.boards_dir / f"{board_id}.json"
        if exact.is_file():
            return exact
        wanted = f"{board_id.lower()}.json"
        return next((p for p in self.board_files() if p.name.lower() == wanted), None)

    def _find_by_alias(self, board_id: str) -> Optional[Path]:
        wanted = board_id.lower()
        for path in self.board_files():
            try:
                data = read_json(path)
            except BoardConfigError:
                continue
            aliases = data.get("aliases") if isinstance(data, dict) else None
            if isinstance(aliases, list) and any(isinstance(a, str) and a.lower() == wanted for a in aliases):
                logger.debug(f"Resolved board alias '{board_id}' to {path.name}")
                return path
        return None

    def resolve_board_file(self, board_id: str) -> Optional[Path]:
        """Board file for an identifier: exact filename, case-insensitive filename, then alias."""
        return self.find_board_file(board_id) or self._find_by_alias(board_id)

    def board_exists(self, board_id: str) -> bool:
        return self.resolve_board_file(board_id) is not None

    def load_board(self, board_id: str):
        path = self.resolve_board_file(board_id)
        if path is None:
            raise NotFoundError("Board configuration", board_id)
        return self.validator.validate_board(read_json(path), source=str(path))

    def load_sensor_boards(self) -> List[SensorBoard]:
        """All valid sensor boards; invalid files are skipped with a warning."""
        boards: List[SensorBoard] = []
        if not self.sensor_boards_dir.is_dir():
            return boards
        for path in sorted(self.sensor_boards_dir.iterdir()):
            if path.suffix.lower() != ".json":
                continue
            try:
                boards.append(self.validator.validate_sensor_board(read_json(path), source=str(path)))
            except StructuralValidationError as e:
                logger.warning(f"⚠️  Skipping invalid sensor board {path.name}: {e}")
        return boards

    def compatible_sensor_boards(self, board_id: str, aliases: Optional[List[str]] = None) -> List[SensorBoard]:
        identifiers = [board_id, *(aliases or [])]
        return [sb for sb in self.load_sensor_boards() if sb.is_compatible_with(identifiers)]

    def iter_raw_documents(self) -> List[Tuple[str, Path]]:
        """(kind, path) for every catalog file, in validation order."""
        documents: List[Tuple[str, Path]] = []
        sku_path = self.root / SKU_MAPPINGS_FILE
        if sku_path.is_file():
            documents.append(("sku_catalog", sku_path))
        documents.extend(("board", p) for p in self.board_files())
        if self.sensor_boards_dir.is_dir():
            documents.extend(
                ("sensor_board", p) for p in sorted(self.sensor_boards_dir.iterdir()) if p.suffix.lower() == ".json"
            )
        return documents
