from pathlib import Path

from baromods.utils.app_info import AppInfo


def test_app_info_is_a_singleton() -> None:
    assert AppInfo() is AppInfo()


def test_app_info_folders(isolated_app_dirs: Path) -> None:
    app_info = AppInfo()

    assert app_info.app_name == "BaroMods"
    assert app_info.app_storage_folder.is_dir()
    assert app_info.user_log_folder.is_dir()
    assert isolated_app_dirs in app_info.app_storage_folder.parents
    assert app_info.app_settings_file == app_info.app_storage_folder / "settings.json"
    assert app_info.debug_file == app_info.app_storage_folder / "DEBUG"


def test_app_version_is_a_string() -> None:
    assert isinstance(AppInfo().app_version, str)
