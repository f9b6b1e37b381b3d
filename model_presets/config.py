import os
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

APP_NAME = "model-presets"

# Key under which this extension's settings live inside the host settings file.
MODULE_KEY = "modelsPresets"

logger = logging.getLogger(__name__)

# XDG Paths - Explicit XDG resolution so ~/.config/ is used even on macOS
CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME
DATA_DIR = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")) / APP_NAME
SETTINGS_FILE = Path(os.getenv("MODEL_PRESETS_SETTINGS_FILE", CONFIG_DIR / "settings.json"))
PRESETS_DIR = Path(os.getenv("MODEL_PRESETS_DIR", DATA_DIR / "presets"))


class Settings(BaseModel):
    """Extension settings, persisted with camelCase keys.

    Missing keys are back-filled from the field defaults on validation;
    keys that are present keep their values.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = Field(default=True)
    fallback_preset: str = Field(default="Default")
    # Lower = stricter. 0.0 accepts only perfect matches, 1.0 accepts anything.
    match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    last_mappings: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def fill_from_env(cls, data: Any) -> Any:
        """Env vars override all file-based values (highest precedence layer)."""
        if not isinstance(data, dict):
            return data
        env_map = {
            "enabled": "MODEL_PRESETS_ENABLED",
            "fallbackPreset": "MODEL_PRESETS_FALLBACK",
            "matchThreshold": "MODEL_PRESETS_THRESHOLD",
        }
        for field, env_var in env_map.items():
            val = os.getenv(env_var)
            if val:
                data.pop(_snake(field), None)
                data[field] = val
        return data

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def _snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def merge_defaults(data: dict[str, Any]) -> Settings:
    """Validate a raw settings dict, falling back to defaults key by key.

    Keys that fail validation are dropped (and so take their default) with a
    warning; every other present key is kept as-is.
    """
    data = dict(data)
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        bad_keys = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning(f"Invalid settings values for {sorted(map(str, bad_keys))}, using defaults: {e}")
        for key in bad_keys:
            data.pop(key, None)
            data.pop(_snake(str(key)), None)
        return Settings.model_validate(data)


class SettingsStore:
    """JSON settings file shared with the host.

    The extension owns only ``MODULE_KEY``; every other top-level key in the
    file is preserved when saving.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else SETTINGS_FILE

    def _read_blob(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            try:
                blob = json.load(f)
            except Exception as e:
                print(f"Error loading {self.path.name}: {e}. Using defaults.")
                return None
        if not isinstance(blob, dict):
            print(f"Error loading {self.path.name}: expected a JSON object. Using defaults.")
            return None
        return blob

    def load(self) -> Settings:
        blob = self._read_blob() or {}
        section = blob.get(MODULE_KEY)
        if not isinstance(section, dict):
            section = {}
        return merge_defaults(section)

    def save(self, settings: Settings) -> None:
        """Write settings back under MODULE_KEY, keeping the host's keys."""
        blob = self._read_blob() or {}
        blob[MODULE_KEY] = settings.to_json_dict()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            f.write(json.dumps(blob, indent=2))
        logger.debug(f"Saved settings to {self.path}")


def load_config() -> Settings:
    return SettingsStore().load()
