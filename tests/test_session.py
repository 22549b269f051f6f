import json

import pytest

from boardbuild.errors import CancellationSignal
from boardbuild.generators.final_config import EnvironmentalSensor, Ld2410Mode
from boardbuild.session import GenerationSession
from boardbuild.utils.catalog_store import CatalogStore
from shared_libs.config_models.final_config_models import FinalConfig, LegacyFinalConfig
from shared_libs.config_models.settings import GeneratorSettings

CANCEL = object()


class ScriptedPrompter:
    """Answers prompts from a script; selections are matched by value."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, message):
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        answer = self.answers.pop(0)
        if answer is CANCEL:
            raise CancellationSignal("cancelled")
        return answer

    def select(self, message, choices, default=None):
        answer = self._next(message)
        if callable(answer):
            return answer(choices, default)
        values = [value for _, value in choices]
        assert answer in values, f"{answer!r} not offered for {message!r}: {values}"
        return answer

    def confirm(self, message, default=True):
        return self._next(message)

    def text(self, message, default=None, validate=None):
        answer = self._next(message)
        if answer is None:
            answer = default
        assert validate is None or validate(answer) is None
        return answer


def pick_sku(sku):
    return lambda choices, default: next(value for _, value in choices if getattr(value, "sku", None) == sku)


def use_default(choices, default):
    return default


@pytest.fixture
def settings(sample_catalog, tmp_path):
    return GeneratorSettings(catalog_dir=sample_catalog, output_dir=tmp_path / "generated")


def run_session(settings, *answers):
    prompter = ScriptedPrompter(*answers)
    lines = []
    session = GenerationSession(CatalogStore(settings.catalog_dir), prompter, settings, echo=lines.append)
    return session.run(), prompter, lines


def test_current_board_with_sensor_board(settings):
    result, prompter, lines = run_session(
        settings,
        "Halo",
        "IR-HALO-4800-L",
        "IS-3R-WL-V5",
        "102025",
        "sku",
        pick_sku("SB-ENV-BME688"),
        True,
    )

    config = result.config
    assert isinstance(config, FinalConfig)
    assert config.batch_date == "102025"
    assert config.capabilities.has_bme688 and not config.capabilities.has_sht41
    assert prompter.answers == []

    json_path, text_path = result.saved_to
    assert json_path.parent == settings.output_dir
    assert json.loads(json_path.read_text(encoding="utf-8"))["sku"] == "IR-HALO-4800-L"
    assert text_path.read_text(encoding="utf-8") == result.command
    assert result.command in lines
    assert "✅ Applied sensor configuration from Environmental Sensor Board (BME688)" in "\n".join(lines)


def test_legacy_board_manual_sensors_with_lm35(settings):
    result, prompter, _ = run_session(
        settings,
        "Halo",
        "IR-HALO-3200",
        "IS-3R-V2",
        None,
        "manual",
        False,
        use_default,
        Ld2410Mode.BINARY,
        2,
        False,
    )

    config = result.config
    assert isinstance(config, LegacyFinalConfig)
    caps = config.capabilities
    assert not caps.has_mlx90614
    assert caps.has_sht41 and not caps.has_bme688
    assert caps.has_ld2410_binary and not caps.has_ld2410_uart
    assert caps.num_lm35_sensors == 2
    assert config.heating_wattage.by_circuit() == [1600, 0, 1600]
    assert result.saved_to is None
    assert prompter.asked[-2] == "How many LM35 analog temperature sensors are connected?"


def test_no_compatible_sensor_board_falls_back_to_manual(settings):
    for path in (settings.catalog_dir / "sensor-boards").iterdir():
        path.unlink()

    result, prompter, lines = run_session(
        settings,
        "Halo",
        "IR-HALO-4800-L",
        "IS-3R-WL-V5",
        "12025",
        "sku",
        True,
        EnvironmentalSensor.NONE,
        Ld2410Mode.NONE,
        False,
    )

    assert "Switching to manual configuration" in "\n".join(lines)
    caps = result.config.capabilities
    assert caps.has_mlx90614
    assert not (caps.has_bme688 or caps.has_sht41 or caps.has_ld2410_uart or caps.has_ld2410_binary)


def test_cancel_propagates_and_writes_nothing(settings):
    with pytest.raises(CancellationSignal):
        run_session(settings, "Halo", "IR-HALO-4800-L", CANCEL)
    assert not settings.output_dir.exists()


def test_board_chosen_by_alias_still_matches_canonical_sensor_boards(settings):
    path = settings.catalog_dir / "sku-mappings.json"
    mappings = json.loads(path.read_text(encoding="utf-8"))
    for product in mappings["products"]:
        if product["sku"] == "IR-HALO-4800-L":
            product["compatibleBoards"] = ["HMBL-V3.0-092025"]
    path.write_text(json.dumps(mappings), encoding="utf-8")

    offered = []

    def pick_sht41(choices, default):
        offered.extend(value.sku for _, value in choices)
        return next(value for _, value in choices if value.sku == "SB-IR-SHT41")

    result, _, _ = run_session(
        settings,
        "Halo",
        "IR-HALO-4800-L",
        "HMBL-V3.0-092025",
        "12025",
        "sku",
        pick_sht41,
        False,
    )

    # SB-IR-SHT41 lists only the canonical IS-3R-WL-V5 id
    assert offered == ["SB-ENV-BME688", "SB-IR-SHT41"]
    assert result.config.board_version == "V5"
    assert result.config.capabilities.has_sht41
