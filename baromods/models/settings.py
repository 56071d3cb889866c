import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

import msgspec
from loguru import logger

from baromods.utils.app_info import AppInfo
from baromods.utils.constants import (
    STEAM_GET_PUBLISHED_FILE_DETAILS_URL,
    STEAM_MAX_ITEMS_PER_REQUEST,
)
from baromods.utils.steam.webapi.retry import RetryConfig


class Settings:
    """User settings, persisted as settings.json in the application storage folder."""

    def __init__(self, settings_file: Path | None = None) -> None:
        self._settings_file = settings_file or AppInfo().app_settings_file
        self._debug_file = self._settings_file.parent / "DEBUG"

        # Barotrauma game home, holding LocalMods/, ModLists/ and config_player.xml
        self.game_home: str = ""

        # Steam WebAPI
        self.workshop_endpoint: str = STEAM_GET_PUBLISHED_FILE_DETAILS_URL
        self.batch_size: int = STEAM_MAX_ITEMS_PER_REQUEST
        self.retry: RetryConfig = RetryConfig()

        # Presence of the DEBUG marker file next to settings.json
        self.debug_logging_enabled: bool = False

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def load(self) -> None:
        self.debug_logging_enabled = self._debug_file.is_file()

        try:
            with open(self._settings_file, "r", encoding="utf-8") as file:
                data = json.load(file)
        except FileNotFoundError:
            logger.info(
                f"No settings file at {self._settings_file}, using default settings"
            )
            return
        except (JSONDecodeError, OSError) as e:
            logger.error(
                f"Unable to read settings file {self._settings_file}, using default settings: {e}"
            )
            return

        if not isinstance(data, dict):
            logger.error(
                f"Settings file {self._settings_file} does not hold an object, using default settings"
            )
            return
        self._from_dict(data)

    def save(self) -> None:
        if self.debug_logging_enabled:
            self._debug_file.touch(exist_ok=True)
        else:
            self._debug_file.unlink(missing_ok=True)

        self._settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._settings_file, "w", encoding="utf-8") as file:
            json.dump(self._to_dict(), file, indent=4)
        logger.debug(f"Saved settings to {self._settings_file}")

    def _from_dict(self, data: Dict[str, Any]) -> None:
        special_attributes = ["retry"]

        for key, value in data.items():
            if key in special_attributes:
                continue
            if key.startswith("_") or key not in self.__dict__:
                continue
            expected_type = type(getattr(self, key))
            try:
                setattr(self, key, msgspec.convert(value, expected_type))
            except msgspec.ValidationError as e:
                logger.warning(f"Invalid value for setting {key}, using default: {e}")

        if "retry" in data:
            try:
                self.retry = msgspec.convert(data["retry"], RetryConfig)
            except msgspec.ValidationError as e:
                logger.warning(f"Invalid retry settings, using defaults: {e}")
                self.retry = RetryConfig()

    def _to_dict(self) -> Dict[str, Any]:
        special_attributes = ["retry", "debug_logging_enabled"]

        data: Dict[str, Any] = {}
        for key, value in self.__dict__.items():
            if key.startswith("_") or key in special_attributes:
                continue
            data[key] = value

        data["retry"] = msgspec.to_builtins(self.retry)
        return data
