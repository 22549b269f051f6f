from pathlib import Path

from pydantic import BaseModel, Field

from .final_config_models import CONFIG_VERSION


class GeneratorSettings(BaseModel):
    """Tool settings, read from config_sources/generator_settings.yaml."""
    catalog_dir: Path = Field(Path("catalog"), description="Directory holding boards/, sensor-boards/ and sku-mappings.json.")
    output_dir: Path = Field(Path("."), description="Where generated config files are saved.")
    config_version: str = Field(CONFIG_VERSION, description="configVersion stamped into every generated record.")
    upload_command: str = Field("upload-config", description="Serial console command the JSON is passed to.")
    force_flag: bool = Field(True, description="Append '--force' to the upload command.")
    model_config = {"extra": "forbid"}
