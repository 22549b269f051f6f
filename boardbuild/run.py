import logging
from pathlib import Path
from typing import Optional

import yaml

from boardbuild.utils.catalog_store import CatalogStore
from boardbuild.validation.catalog import CatalogValidator
from shared_libs.config_models.settings import GeneratorSettings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / "config_sources" / "generator_settings.yaml"


def load_generator_settings(settings_path: Optional[Path] = None) -> GeneratorSettings:
    """Read generator settings from YAML. A missing file means defaults; relative paths resolve against the file."""
    path = Path(settings_path) if settings_path is not None else DEFAULT_SETTINGS_PATH
    if not path.is_file():
        logger.debug(f"No settings file at {path}; using defaults")
        return GeneratorSettings()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    settings = GeneratorSettings.model_validate(raw)
    base = path.parent
    updates = {}
    if not settings.catalog_dir.is_absolute():
        updates["catalog_dir"] = (base / settings.catalog_dir).resolve()
    if not settings.output_dir.is_absolute():
        updates["output_dir"] = (base / settings.output_dir).resolve()
    return settings.model_copy(update=updates)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    settings = load_generator_settings()
    ok, _ = CatalogValidator(CatalogStore(settings.catalog_dir)).validate()
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
