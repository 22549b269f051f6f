"""Pydantic schemas for the board configuration catalogs.

Modules:
- common: base record (unknown keys preserved) and strict scalar types
- components: relays, tagged-union sensors, LEDs, buttons and Product
- pin_registry: GPIO pin claims and conflict reports for one board scope
- board_models: current and legacy board shapes
- sku_models: legacy SKU-mapping catalog
- sensor_board_models: attachable sensor boards
- final_config_models: per-unit manufacturing output
- settings: generator tool settings
"""

__all__ = [
	"common",
	"components",
	"pin_registry",
	"board_models",
	"sku_models",
	"sensor_board_models",
	"final_config_models",
	"settings",
]
