import yaml
from typing import Dict, Any
from retro_evm.common.errors import ConfigError
from retro_evm.arch.evm.state import MAX_MEMORY_SIZE
from .models import SystemConfig, MachineConfig, TraceConfig, LoggingConfig, ImageConfig

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"{path}: {e.strerror or e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e
        return self.parse_config(data or {})

    def parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("config root must be a mapping")

        machine_data = data.get("machine", {}) or {}
        machine = MachineConfig(
            memory_size=self._parse_int(machine_data.get("memory_size", MAX_MEMORY_SIZE)),
            initial_pc=self._parse_int(machine_data.get("initial_pc", 0)),
        )

        trace_data = data.get("trace", {}) or {}
        trace = TraceConfig(
            enabled=bool(trace_data.get("enabled", False)),
            pause=bool(trace_data.get("pause", True)),
        )

        logging_data = data.get("logging", {}) or {}
        log_config = LoggingConfig(level=str(logging_data.get("level", "WARNING")).upper())

        image_data = data.get("image", {}) or {}
        image = ImageConfig(load=image_data.get("load"), save=image_data.get("save"))

        return SystemConfig(
            architecture=data.get("architecture", "EVM"),
            machine=machine,
            trace=trace,
            logging=log_config,
            image=image,
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")
