import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent


def make_product(
    sku: str = "IR-HALO-4800",
    heater_pins: tuple = (18, 19, 20),
    lighting_pins: tuple = (),
    **extra: Any,
) -> Dict[str, Any]:
    product: Dict[str, Any] = {
        "sku": sku,
        "variant": "4800W standard",
        "name": "Halo",
        "heatingRelays": [
            {"id": f"heater_{i}", "pin": pin, "wattage": 1600} for i, pin in enumerate(heater_pins, start=1)
        ],
        "lightingRelays": [
            {"id": f"lights_{i}", "pin": pin, "type": "dimmable"} for i, pin in enumerate(lighting_pins, start=1)
        ],
    }
    product.update(extra)
    return product


def make_board(products: Optional[List[Dict[str, Any]]] = None, **extra: Any) -> Dict[str, Any]:
    board: Dict[str, Any] = {
        "boardType": "IS-3R-WL",
        "boardVersion": "V5",
        "module": {"chip": "ESP32-C6", "flash_size_mb": 8},
        "aliases": ["HMBL-V3.0-092025"],
        "i2c": {"sda": 21, "scl": 22, "port": 1},
        "products": products if products is not None else [make_product()],
    }
    board.update(extra)
    return board


def make_legacy_board(**capability_overrides: Any) -> Dict[str, Any]:
    capabilities = {
        "has_mlx90614": True,
        "has_bme688": False,
        "has_sht41": True,
        "num_lm35_sensors": 0,
        "has_ld2410_uart": True,
        "has_ld2410_binary": True,
        "num_heating_circuits": 3,
        "num_lighting_circuits": 2,
        "has_pairing_led": True,
        "has_sensor_led": False,
        "has_pairing_button": True,
        "has_gnd_sw": False,
    }
    capabilities.update(capability_overrides)
    return {
        "boardType": "IS-3R-WL",
        "boardVersion": "V3",
        "module": {"chip": "ESP32-C6", "flash_size_mb": 8},
        "capabilities": capabilities,
        "pinout": {
            "pairing_button_gpio": 6,
            "gnd_sw_gpio": None,
            "heater_relay_1": 18,
            "heater_relay_2": 19,
            "heater_relay_3": 20,
            "lights_relay_1": 4,
            "lights_relay_2": 5,
            "i2c_sda": 21,
            "i2c_scl": 22,
            "i2c_port": 0,
            "mlx90614_addr": 90,
            "bme688_addr": 0,
            "sht41_addr": 68,
            "ld2410_tx": 2,
            "ld2410_rx": 3,
            "ld2410_out": 23,
            "ld2410_uart_port": 1,
            "lm35_remote": None,
            "lm35_main": None,
            "pairing_led": 11,
            "sensor_led": None,
        },
    }


def make_sensor_board(sku: str = "SB-ENV-BME688", compatible: Optional[List[str]] = None, **flags: Any) -> Dict[str, Any]:
    capabilities = {
        "has_mlx90614": True,
        "has_bme688": True,
        "has_sht41": False,
        "has_ld2410_uart": False,
        "has_ld2410_binary": True,
    }
    capabilities.update(flags)
    return {
        "sku": sku,
        "name": f"Sensor board {sku}",
        "compatibleBoards": compatible if compatible is not None else ["IS-3R-WL-V5"],
        "capabilities": capabilities,
    }


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


@pytest.fixture
def sample_catalog(tmp_path: Path) -> Path:
    """A writable copy of the catalog shipped with the project."""
    target = tmp_path / "catalog"
    shutil.copytree(PROJECT_ROOT / "catalog", target)
    return target
