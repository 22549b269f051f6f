"""Interactive generation run: product line -> SKU -> board -> batch -> sensors -> save."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence, Tuple, TypeVar, Union

from boardbuild.generators.final_config import (
    ConfigurationAssembler,
    EnvironmentalSensor,
    Ld2410Mode,
    ManualSensorSelection,
    default_environmental,
    default_ld2410_mode,
)
from boardbuild.generators.output import render_upload_command, write_final_config
from boardbuild.utils.batch import BATCH_DATE_HELP, batch_date_error, default_batch_date
from boardbuild.utils.catalog_store import CatalogStore
from shared_libs.config_models.final_config_models import FinalConfig, LegacyFinalConfig
from shared_libs.config_models.sensor_board_models import SensorBoard
from shared_libs.config_models.settings import GeneratorSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")
Choice = Tuple[str, T]


class Prompter(Protocol):
    """The three prompt operations the generator needs. Implementations raise CancellationSignal on abort."""

    def select(self, message: str, choices: Sequence[Choice], default: Optional[T] = None) -> T: ...

    def confirm(self, message: str, default: bool = True) -> bool: ...

    def text(self, message: str, default: Optional[str] = None, validate: Optional[Callable[[str], Optional[str]]] = None) -> str: ...


@dataclass(frozen=True)
class GenerationResult:
    config: Union[FinalConfig, LegacyFinalConfig]
    command: str
    saved_to: Optional[Tuple[Path, Path]] = None


ENVIRONMENTAL_CHOICES = [
    ("BME688 (temp/humidity/pressure/gas)", EnvironmentalSensor.BME688),
    ("SHT41 (temp/humidity)", EnvironmentalSensor.SHT41),
    ("None", EnvironmentalSensor.NONE),
]

LD2410_CHOICES = [
    ("UART + Binary (full control)", Ld2410Mode.BOTH),
    ("UART only", Ld2410Mode.UART),
    ("Binary only", Ld2410Mode.BINARY),
    ("Not connected", Ld2410Mode.NONE),
]

LM35_CHOICES = [("None", 0), ("1 sensor", 1), ("2 sensors", 2)]


class GenerationSession:
    def __init__(
        self,
        store: CatalogStore,
        prompter: Prompter,
        settings: Optional[GeneratorSettings] = None,
        echo: Callable[[str], None] = print,
    ):
        self.store = store
        self.prompter = prompter
        self.settings = settings or GeneratorSettings()
        self.echo = echo

    def _select_sensor_board(self, board_id: str, board) -> Optional[SensorBoard]:
        # board_id is the name the SKU catalog used; it may be an alias
        compatible = self.store.compatible_sensor_boards(board_id, board.identifiers)
        if not compatible:
            self.echo(f"\n⚠️  No predefined sensor boards available for {board_id}. Switching to manual configuration.\n")
            return None
        return self.prompter.select(
            "Select sensor board:",
            [(f"{sb.name} ({sb.sku})", sb) for sb in compatible],
        )

    def _manual_selection(self, assembler: ConfigurationAssembler, sku: str) -> ManualSensorSelection:
        base = assembler.base_capabilities(sku)
        has_mlx = self.prompter.confirm("MLX90614 IR temperature sensor connected?", default=True)
        environmental = self.prompter.select(
            "Which environmental sensor is connected?", ENVIRONMENTAL_CHOICES, default=default_environmental(base)
        )
        ld2410_mode = self.prompter.select(
            "LD2410 presence sensor connection:", LD2410_CHOICES, default=default_ld2410_mode(base)
        )
        return ManualSensorSelection(has_mlx90614=has_mlx, environmental=environmental, ld2410_mode=ld2410_mode)

    def run(self) -> GenerationResult:
        self.echo("🔧 Board Configuration Generator\n")
        sku_mappings = self.store.load_sku_mappings()

        product_line = self.prompter.select(
            "Select product line:", [(name, name) for name in sku_mappings.product_lines()]
        )
        sku = self.prompter.select(
            f"Select {product_line} variant:",
            [(f"{p.variant} ({p.sku})", p.sku) for p in sku_mappings.products_in_line(product_line)],
        )
        legacy_product = sku_mappings.find(sku)

        board_id = self.prompter.select(
            "Select board configuration:", [(b, b) for b in legacy_product.compatible_boards]
        )
        board = self.store.load_board(board_id)
        assembler = ConfigurationAssembler(board, config_version=self.settings.config_version)
        self.echo(f"\n📋 Board: {board.board_type} {board.board_version}")

        batch_date = self.prompter.text(
            f"Enter manufacturing batch date ({BATCH_DATE_HELP}):",
            default=default_batch_date(),
            validate=batch_date_error,
        )
        self.echo(f"   Batch: {batch_date}")
        self.echo("   Configuring sensors for deployment...\n")

        method = self.prompter.select(
            "How would you like to configure sensors?",
            [("Use sensor board SKU", "sku"), ("Manual configuration", "manual")],
        )
        sensor_board = None
        if method == "sku":
            sensor_board = self._select_sensor_board(board_id, board)
            if sensor_board is not None:
                self.echo(f"\n✅ Applied sensor configuration from {sensor_board.name}")
        manual = self._manual_selection(assembler, sku) if sensor_board is None else None

        lm35_count = 0
        if assembler.supports_lm35():
            lm35_count = self.prompter.select(
                "How many LM35 analog temperature sensors are connected?", LM35_CHOICES, default=0
            )

        config = assembler.assemble(
            sku,
            batch_date,
            sensor_board=sensor_board,
            manual=manual,
            lm35_count=lm35_count,
            heating_wattage=legacy_product.heating_wattage if assembler.is_legacy else None,
        )
        command = render_upload_command(
            config, command=self.settings.upload_command, force=self.settings.force_flag
        )
        self.echo("\n✅ Configuration generated:\n")
        self.echo(command)

        saved_to = None
        if self.prompter.confirm("\nSave configuration to file?", default=True):
            saved_to = write_final_config(
                config,
                self.settings.output_dir,
                command=self.settings.upload_command,
                force=self.settings.force_flag,
            )
            self.echo(f"\n💾 Saved to: {saved_to[1]}")
        self.echo("\n✨ Done!")
        return GenerationResult(config=config, command=command, saved_to=saved_to)
