import copy
import json
from datetime import datetime, timezone

import pytest

from boardbuild.errors import NotFoundError, StructuralValidationError
from boardbuild.generators.final_config import (
    ConfigurationAssembler,
    EnvironmentalSensor,
    Ld2410Mode,
    ManualSensorSelection,
    ProvisioningCredentials,
    apply_sensor_board,
    default_environmental,
    default_ld2410_mode,
)
from boardbuild.generators.output import output_stem, render_upload_command, write_final_config
from boardbuild.validation.schema import SchemaTarget, SchemaValidator
from shared_libs.config_models.final_config_models import FinalConfig, LegacyFinalConfig
from shared_libs.config_models.sku_models import HeatingWattage

from conftest import make_board, make_legacy_board, make_product, make_sensor_board

validator = SchemaValidator()
CREDENTIALS = ProvisioningCredentials(key="0190a1b2-c3d4-7e5f-8a9b-0c1d2e3f4a5b", secret="s3cr3t")
NOW = datetime(2025, 10, 7, 14, 3, 9, 512000, tzinfo=timezone.utc)


@pytest.fixture
def current_board():
    product = make_product(
        "IR-HALO-4800-L",
        lighting_pins=(4, 5),
        sensors=[
            {"id": "mlx90614", "type": "mlx90614", "address": 90},
            {"id": "ld2410", "type": "ld2410", "uart_port": 1, "tx_pin": 2, "rx_pin": 3},
        ],
    )
    return validator.validate_board(make_board(products=[product]))


@pytest.fixture
def legacy_board():
    return validator.validate_board(make_legacy_board(num_lm35_sensors=2))


def test_current_board_embeds_product_and_bus(current_board):
    config = ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", "102025", credentials=CREDENTIALS)

    assert isinstance(config, FinalConfig)
    document = config.to_document()
    assert document["configVersion"] == "1.0.0"
    assert document["boardType"] == "IS-3R-WL"
    assert document["boardVersion"] == "V5"
    assert document["batchDate"] == "102025"
    assert document["provisioningKey"] == CREDENTIALS.key
    assert document["i2c"] == {"sda": 21, "scl": 22, "port": 1}
    assert document["product"] == current_board.products[0].to_document()
    assert document["capabilities"] == {
        "has_mlx90614": True,
        "has_bme688": False,
        "has_sht41": False,
        "has_ld2410_uart": True,
        "has_ld2410_binary": False,
    }


def test_product_lookup_is_case_insensitive(current_board):
    config = ConfigurationAssembler(current_board).assemble("ir-halo-4800-l", "12025", credentials=CREDENTIALS)
    assert config.product.sku == "IR-HALO-4800-L"


def test_unknown_sku_raises_not_found(current_board):
    with pytest.raises(NotFoundError):
        ConfigurationAssembler(current_board).assemble("IR-NOPE", "12025")


def test_sensor_board_overwrites_flags(current_board):
    sensor_board = validator.validate_sensor_board(
        make_sensor_board(has_mlx90614=False, has_ld2410_uart=False, has_ld2410_binary=False)
    )
    config = ConfigurationAssembler(current_board).assemble(
        "IR-HALO-4800-L", "12025", credentials=CREDENTIALS, sensor_board=sensor_board
    )
    caps = config.capabilities
    assert (caps.has_mlx90614, caps.has_bme688, caps.has_sht41) == (False, True, False)
    assert not caps.has_ld2410_uart


def test_apply_sensor_board_leaves_input_untouched(legacy_board):
    sensor_board = validator.validate_sensor_board(make_sensor_board())
    updated = apply_sensor_board(legacy_board.capabilities, sensor_board)

    assert updated.has_bme688 and not updated.has_sht41
    assert legacy_board.capabilities.has_sht41 and not legacy_board.capabilities.has_bme688
    assert updated.num_heating_circuits == legacy_board.capabilities.num_heating_circuits


def test_manual_selection_environmental_is_one_choice():
    flags = ManualSensorSelection(
        has_mlx90614=False, environmental=EnvironmentalSensor.SHT41, ld2410_mode=Ld2410Mode.BOTH
    ).flags()
    assert flags == {
        "has_mlx90614": False,
        "has_bme688": False,
        "has_sht41": True,
        "has_ld2410_uart": True,
        "has_ld2410_binary": True,
    }


def test_manual_defaults_come_from_capabilities(legacy_board):
    caps = legacy_board.capabilities
    assert default_environmental(caps) is EnvironmentalSensor.SHT41
    assert default_ld2410_mode(caps) is Ld2410Mode.BOTH
    assert default_ld2410_mode(caps.model_copy(update={"has_ld2410_uart": False})) is Ld2410Mode.BINARY


def test_legacy_board_output(legacy_board):
    assembler = ConfigurationAssembler(legacy_board)
    config = assembler.assemble(
        "IR-HALO-4800",
        "32025",
        credentials=CREDENTIALS,
        manual=ManualSensorSelection(has_mlx90614=True, environmental=EnvironmentalSensor.BME688),
        lm35_count=1,
        heating_wattage=HeatingWattage(circuit1=1600, circuit2=0, circuit3=1600),
    )

    assert isinstance(config, LegacyFinalConfig)
    document = config.to_document()
    assert document["pinout"]["heater_relay_1"] == 18
    assert document["capabilities"]["has_bme688"] is True
    assert document["capabilities"]["has_sht41"] is False
    assert document["capabilities"]["num_lm35_sensors"] == 1
    assert document["heatingWattage"] == {"circuit1": 1600, "circuit2": 0, "circuit3": 1600}
    assert "product" not in document


def test_lm35_count_ignored_without_lm35_support():
    board = validator.validate_board(make_legacy_board(num_lm35_sensors=0))
    assembler = ConfigurationAssembler(board)
    assert not assembler.supports_lm35()
    config = assembler.assemble("IR-HALO-4800", "32025", credentials=CREDENTIALS, lm35_count=2)
    assert config.capabilities.num_lm35_sensors == 0


def test_generated_credentials_are_unique():
    first, second = ProvisioningCredentials.generate(), ProvisioningCredentials.generate()
    assert first.key != second.key
    assert first.secret != second.secret
    assert len(first.key) == 36


def test_invalid_batch_type_is_rejected_by_output_schema(current_board):
    with pytest.raises(StructuralValidationError):
        ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", 102025, credentials=CREDENTIALS)


def test_upload_command_is_compact_single_line(current_board):
    config = ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", "12025", credentials=CREDENTIALS)
    command = render_upload_command(config)

    assert command.startswith('upload-config {"configVersion":"1.0.0",')
    assert command.endswith("} --force")
    assert "\n" not in command
    assert json.loads(command[len("upload-config "):-len(" --force")]) == config.to_document()
    assert not render_upload_command(config, force=False).endswith("--force")


def test_output_stem_is_filesystem_safe():
    assert output_stem(NOW) == "config-2025-10-07T14-03-09-512Z"


def test_write_final_config(tmp_path, current_board):
    config = ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", "12025", credentials=CREDENTIALS)
    json_path, text_path = write_final_config(config, tmp_path / "out", now=NOW)

    assert json_path.name == "config-2025-10-07T14-03-09-512Z.json"
    assert text_path.name == "config-2025-10-07T14-03-09-512Z.txt"
    assert json.loads(json_path.read_text(encoding="utf-8")) == config.to_document()
    assert text_path.read_text(encoding="utf-8") == render_upload_command(config)


def test_revalidating_assembled_configs_is_stable(current_board, legacy_board):
    configs = [
        ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", "12025", credentials=CREDENTIALS),
        ConfigurationAssembler(legacy_board).assemble(
            "IR-HALO-4800",
            "12025",
            credentials=CREDENTIALS,
            lm35_count=2,
            heating_wattage=HeatingWattage(circuit1=1600, circuit2=1600, circuit3=1600),
        ),
    ]
    for config in configs:
        document = config.to_document()
        snapshot = copy.deepcopy(document)

        again = validator.validate(document, SchemaTarget.FINAL_CONFIG)

        assert type(again) is type(config)
        assert again == config
        assert again.to_document() == snapshot
        assert document == snapshot


def test_write_final_config_writes_nothing_when_rendering_fails(tmp_path, current_board, monkeypatch):
    config = ConfigurationAssembler(current_board).assemble("IR-HALO-4800-L", "12025", credentials=CREDENTIALS)

    def broken_render(*args, **kwargs):
        raise ValueError("cannot render")

    monkeypatch.setattr("boardbuild.generators.output.render_upload_command", broken_render)
    with pytest.raises(ValueError):
        write_final_config(config, tmp_path / "out", now=NOW)
    assert not (tmp_path / "out").exists()
