from pathlib import Path
from typing import Generator

import pytest
from loguru import logger

from baromods.utils.app_info import AppInfo

GAME_HOME = Path("tests/data/mod_examples/Barotrauma")


@pytest.fixture(autouse=True)
def isolated_app_dirs(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """
    Point the per-user data and log folders at a temporary directory
    and drop any loguru sink a test installed.
    """
    app_root = tmp_path_factory.mktemp("appdirs")
    monkeypatch.setenv("XDG_DATA_HOME", str(app_root / "data"))
    monkeypatch.setenv("XDG_STATE_HOME", str(app_root / "state"))
    monkeypatch.setattr(AppInfo, "_instance", None)
    yield app_root
    logger.remove()


@pytest.fixture
def game_home() -> Path:
    return GAME_HOME
