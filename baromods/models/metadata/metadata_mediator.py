from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from threading import RLock

from loguru import logger

from baromods.models.metadata.metadata_factory import (
    create_mod_from_dir,
    read_mod_list,
    read_player_config,
)
from baromods.models.metadata.metadata_structure import (
    EnabledModEntry,
    GameHome,
    LoadOrderProfile,
    ModDescriptor,
)
from baromods.utils.constants import STEAM_MAX_ITEMS_PER_REQUEST
from baromods.utils.exception import (
    BaroModsError,
    HashIOError,
    ModNotFoundError,
    ParseError,
)
from baromods.utils.files import hash_directory
from baromods.utils.generic import directories
from baromods.utils.metadata import retrieve_mod_metadata
from baromods.utils.steam.webapi.wrapper import WorkshopClient


def _parse_mod_dir(mod_dir: Path) -> ModDescriptor | None:
    try:
        return create_mod_from_dir(mod_dir)
    except (ParseError, OSError) as e:
        logger.debug(f"Skipping {mod_dir}, not a valid mod: {e}")
        return None


def discover_mods(
    mods_path: Path, max_workers: int | None = None
) -> list[ModDescriptor]:
    """
    Parse every immediate subdirectory of mods_path as a mod.

    Directories that do not hold a valid filelist.xml are left out.
    The result is sorted by workshop id, then by directory.
    """
    if not mods_path.is_dir():
        logger.warning(f"Local mods path does not exist: {mods_path}")
        return []

    mod_dirs = directories(mods_path)
    logger.debug(f"Parsing {len(mod_dirs)} candidate mod directories in {mods_path}")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        parsed = list(executor.map(_parse_mod_dir, mod_dirs))

    mods = [mod for mod in parsed if mod is not None]
    mods.sort(key=lambda mod: (mod.steam_workshop_id, mod.home_dir or ""))
    logger.info(f"Discovered {len(mods)} mods in {mods_path}")
    return mods


class ModManager:
    """
    Owns the mods of one game home.

    The mod collection is only ever replaced as a whole: readers get a copy
    of either the previous or the new collection, never a mix of both.
    """

    def __init__(
        self,
        game_home: GameHome | Path | str,
        client: WorkshopClient | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.game_home = (
            game_home if isinstance(game_home, GameHome) else GameHome(game_home)
        )
        self.client = client or WorkshopClient()
        self.max_workers = max_workers

        self._lock = RLock()
        self._mods: list[ModDescriptor] = []
        self._loaded = False

    def _swap(self, mods: list[ModDescriptor]) -> None:
        with self._lock:
            self._mods = list(mods)
            self._loaded = True

    def _snapshot(self) -> list[ModDescriptor]:
        with self._lock:
            return list(self._mods)

    def refresh(self) -> list[ModDescriptor]:
        """Rediscover the installed mods, dropping any previous enrichment."""
        mods = discover_mods(self.game_home.mod_dir, max_workers=self.max_workers)
        self._swap(mods)
        return list(mods)

    def list_mods(self) -> list[ModDescriptor]:
        """Return the installed mods sorted by workshop id, discovering them on first use."""
        with self._lock:
            loaded = self._loaded
        if not loaded:
            return self.refresh()
        return self._snapshot()

    def get_mod(self, name: str) -> ModDescriptor:
        for mod in self.list_mods():
            if mod.name == name:
                return mod
        raise ModNotFoundError(name)

    def enrich(
        self, batch_size: int = STEAM_MAX_ITEMS_PER_REQUEST
    ) -> list[ModDescriptor]:
        """
        Merge Steam Workshop metadata into the installed mods.

        On failure the current collection is kept as it was.

        :param batch_size: ids per request, 0 for a single request
        """
        mods = self.list_mods()
        enriched = retrieve_mod_metadata(mods, self.client, batch_size)
        self._swap(enriched)
        return list(enriched)

    def hash_mod(self, name: str) -> str:
        """
        Compute the content hash of an installed mod's directory.

        :raises ModNotFoundError: if no installed mod has that name
        """
        mod = self.get_mod(name)
        if mod.home_path is None:
            raise HashIOError(
                name, FileNotFoundError(f"Mod '{name}' has no home directory")
            )
        logger.info(f"Hashing mod '{name}' in {mod.home_path}")
        return hash_directory(mod.home_path, max_workers=self.max_workers)

    def list_profiles(self) -> list[LoadOrderProfile]:
        """
        Read the saved load order profiles (ModLists/*.xml), sorted by file name.
        Unreadable profiles are skipped.
        """
        mod_list_dir = self.game_home.mod_list_dir
        if not mod_list_dir.is_dir():
            logger.info(f"No mod list folder at {mod_list_dir}")
            return []

        profiles = []
        for path in sorted(mod_list_dir.glob("*.xml")):
            try:
                profiles.append(read_mod_list(path))
            except (ParseError, OSError) as e:
                logger.warning(f"Skipping mod list {path}: {e}")
        return profiles

    def list_enabled_mods(self) -> list[EnabledModEntry]:
        """
        Return the LocalMods packages enabled in config_player.xml, in load order.

        :raises BaroModsError: if the player config cannot be read
        """
        config_path = self.game_home.player_config_file
        try:
            config = read_player_config(config_path)
        except OSError as e:
            raise BaroModsError(
                f"Unable to read player config {config_path}: {e}"
            ) from e
        return config.enabled_mods

    def enabled_mod_descriptors(self) -> list[ModDescriptor]:
        """
        Return the installed mods enabled in config_player.xml, in load order.
        Enabled packages that are not installed are left out.
        """
        installed = {
            mod.home_path.name: mod for mod in self.list_mods() if mod.home_path
        }
        enabled = []
        for entry in self.list_enabled_mods():
            mod = installed.get(str(entry.id))
            if mod is None:
                logger.warning(f"Enabled mod {entry.path} is not installed")
                continue
            enabled.append(mod)
        return enabled
