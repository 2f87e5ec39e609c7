"""
Configuration for pyCAT.

Settings live in a hierarchical JSON file (``~/.pycat/config.json`` by
default) that is human-readable and can be edited by hand:

    {
        "version": "1.0",
        "distribution": {"strict": false},
        "instrument": {"kv": 0.5235987755982988, "channel_table": "coulter_300/1"}
    }

Values missing from the file fall back to :attr:`CatConfig.DEFAULT_STATE`.
The instrument transform only needs the scalar shape factor, which is exposed
as :attr:`CatConfig.kv`, so a config object can be passed wherever a shape
factor is expected.
"""

from __future__ import annotations

import json
import logging
import math
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

from pycat.core.channels import CHANNEL_TABLE_VERSION
from pycat.core.distribution import Distribution

log = logging.getLogger(__name__)


def get_default_config_file() -> Path:
    """Path of the default configuration file, ~/.pycat/config.json."""
    return Path.home() / '.pycat' / 'config.json'


class CatConfig:
    """
    Settings shared by distributions and the instrument transform.

    Sections:
        distribution:
            strict         default validation policy for new distributions
                           (raise instead of warn)
        instrument:
            kv             volumetric shape factor (π/6 for spheres)
            channel_table  version of the channel table the settings were
                           written for
    """

    DEFAULT_STATE = {
        "version": "1.0",
        "distribution": {
            "strict": False,
        },
        "instrument": {
            "kv": math.pi / 6.0,
            "channel_table": CHANNEL_TABLE_VERSION,
        },
    }

    def __init__(self, config_file: Optional[Path] = None):
        """
        Args:
            config_file: Path to the JSON file.  If None, uses the default
                location.  A missing file leaves the defaults in place.
        """
        self.config_file = Path(config_file) if config_file else get_default_config_file()
        self.state = deepcopy(self.DEFAULT_STATE)
        self.load()

    def load(self) -> bool:
        """
        Load settings from the config file.

        Returns:
            True if the file was read, False if defaults are used.
        """
        if not self.config_file.exists():
            log.info("Config file not found: %s; using defaults", self.config_file)
            return False

        try:
            with open(self.config_file, 'r') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Error loading config file %s: %s; using defaults", self.config_file, e)
            return False

        if not isinstance(loaded, dict):
            log.warning("Config file %s does not hold a JSON object; using defaults",
                        self.config_file)
            return False

        # Merge so that sections added since the file was written are present
        self.state = self._merge_state(self.DEFAULT_STATE, loaded)

        table = self.get('instrument', 'channel_table')
        if table != CHANNEL_TABLE_VERSION:
            log.warning(
                "Config was written for channel table %r, this version ships %r",
                table, CHANNEL_TABLE_VERSION,
            )
        log.info("Loaded config from: %s", self.config_file)
        return True

    def save(self) -> bool:
        """
        Write the current settings to the config file.

        Returns:
            True if successful, False otherwise.
        """
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                json.dump(self.state, f, indent=2)
        except OSError as e:
            log.warning("Error saving config file %s: %s", self.config_file, e)
            return False

        log.info("Saved config to: %s", self.config_file)
        return True

    def get(self, section: str, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Get a whole section or one key in it.

        Args:
            section: Section name (e.g. "instrument")
            key: Optional key within the section
            default: Returned when the key is absent
        """
        section_state = self.state.get(section, {})
        if key is None:
            return section_state
        return section_state.get(key, default)

    def set(self, section: str, key: str, value: Any):
        if section not in self.state:
            self.state[section] = {}
        self.state[section][key] = value

    def update(self, section: str, values: Dict[str, Any]):
        """Update several keys of one section."""
        if section not in self.state:
            self.state[section] = {}
        self.state[section].update(values)

    def reset(self, section: Optional[str] = None):
        """
        Reset settings to defaults.

        Args:
            section: Section to reset. If None, resets everything.
        """
        if section is None:
            self.state = deepcopy(self.DEFAULT_STATE)
        elif section in self.DEFAULT_STATE:
            self.state[section] = deepcopy(self.DEFAULT_STATE[section])

    # ── Typed accessors ───────────────────────────────────────────────────────

    @property
    def kv(self) -> float:
        """Volumetric shape factor used by the instrument transform."""
        return float(self.get('instrument', 'kv', self.DEFAULT_STATE['instrument']['kv']))

    @kv.setter
    def kv(self, value: float):
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Shape factor must be finite and positive, got {value}")
        self.set('instrument', 'kv', value)

    @property
    def strict(self) -> bool:
        return bool(self.get('distribution', 'strict', False))

    @strict.setter
    def strict(self, value: bool):
        self.set('distribution', 'strict', bool(value))

    def new_distribution(self, y=None, density=None, boundaries=None) -> Distribution:
        """Distribution using the configured validation policy."""
        return Distribution(y, density, boundaries, strict=self.strict)

    def _merge_state(self, default: Dict, loaded: Dict) -> Dict:
        """
        Merge loaded settings over the defaults, recursing into sections.

        Keys present only in the defaults are kept; loaded values win.
        """
        merged = deepcopy(default)

        for key, value in loaded.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_state(merged[key], value)
            else:
                merged[key] = value

        return merged
