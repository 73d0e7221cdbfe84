import yaml
from dataclasses import fields
from typing import Dict, Any

from .models import AddressMap, CpuInitialState, SystemConfig

_ADDRESS_MAP_KEYS = {f.name for f in fields(AddressMap)}


class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data)

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping.")
        cartridge = data.get("cartridge")
        if not cartridge:
            raise ValueError("Configuration must specify 'cartridge'.")

        # Parse Address Map overrides
        overrides = {}
        for key, value in (data.get("address_map") or {}).items():
            if key not in _ADDRESS_MAP_KEYS:
                raise ValueError(f"Unknown address map entry: {key}")
            if isinstance(value, (list, tuple)):
                overrides[key] = tuple(self._parse_int(v) for v in value)
            else:
                overrides[key] = self._parse_int(value)
        address_map = AddressMap(**overrides)

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0)),
            registers={
                name.lower(): self._parse_int(value)
                for name, value in (initial_state_data.get("registers") or {}).items()
            }
        )

        return SystemConfig(
            cartridge=str(cartridge),
            boot_rom=data.get("boot_rom"),
            address_map=address_map,
            initial_state=initial_state
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
