from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated

import msgspec

from baromods.utils.constants import (
    LOCAL_MODS_DIR,
    MOD_LISTS_DIR,
    PLAYER_CONFIG_FILE,
    STEAM_RESULT_OK,
)

# Steam PublishedFileIds and SteamIDs are unsigned 64-bit integers
UInt64 = Annotated[int, msgspec.Meta(ge=0, le=2**64 - 1)]


class ModDescriptor(msgspec.Struct, rename="camel"):
    """A mod parsed from its content package (filelist.xml).

    The workshop id is the join and sort key of a mod collection.

    Attributes:
        name (str): Display name of the mod.
        mod_version (str): Version string declared by the mod.
        core_package (bool): Whether the package replaces the game core content.
        steam_workshop_id (int): PublishedFileId of the mod, 0 when unpublished.
        game_version (str): Game version the mod was built against.
        expected_hash (str): Hash the game expects for the package content.
        home_dir (str | None): Directory holding the filelist.xml, when parsed from disk.
        file_groups (dict[str, list[str]]): Tag name to the ordered file paths declared under it.

    The remaining attributes come from the Steam Workshop and stay None until a merge fills them.
    """

    name: str
    mod_version: str
    core_package: bool
    steam_workshop_id: UInt64
    game_version: str
    expected_hash: str
    home_dir: str | None = None
    file_groups: dict[str, list[str]] = msgspec.field(default_factory=dict)

    size: int | None = None
    last_modified: int | None = None
    description: str | None = None
    preview_image: str | None = None
    subscribers: int | None = None
    likes: int | None = None
    creator: int | None = None
    tags: list[str] = msgspec.field(default_factory=list)

    def get_files(self, tag: str) -> list[str] | None:
        return self.file_groups.get(tag)

    def has_tag(self, tag: str) -> bool:
        return tag in self.file_groups

    def tag_names(self) -> list[str]:
        return list(self.file_groups)

    @property
    def home_path(self) -> Path | None:
        if self.home_dir is None:
            return None
        return Path(self.home_dir)

    def to_json(self) -> bytes:
        return msgspec.json.encode(self)


@dataclass
class LoadOrderProfile:
    """A saved mod list (ModLists/<profile>.xml).

    Attributes:
        profile_name (str): Name of the profile.
        base_package (str): Tag name of the base package, e.g. "Vanilla".
        mods (list[str]): Display names of the enabled local mods, in load order.
    """

    profile_name: str
    base_package: str
    mods: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class EnabledModEntry:
    """A regular package enabled in config_player.xml that lives under LocalMods.

    Attributes:
        path (str): Package path as written in the config, e.g. "LocalMods/123/filelist.xml".
        id (int): Folder name of the package, typically its workshop id.
    """

    path: str
    id: int


@dataclass
class PlayerConfig:
    """The parts of config_player.xml describing the enabled content packages."""

    core_package: str
    enabled_mods: list[EnabledModEntry] = field(default_factory=list)

    def enabled_ids(self) -> list[int]:
        return [entry.id for entry in self.enabled_mods]


class GameHome:
    """Paths of a Barotrauma game home directory."""

    def __init__(self, home_dir: Path | str) -> None:
        self.home_dir = Path(home_dir)

    @property
    def mod_dir(self) -> Path:
        return self.home_dir / LOCAL_MODS_DIR

    @property
    def mod_list_dir(self) -> Path:
        return self.home_dir / MOD_LISTS_DIR

    @property
    def player_config_file(self) -> Path:
        return self.home_dir / PLAYER_CONFIG_FILE

    def __repr__(self) -> str:
        return f"GameHome({str(self.home_dir)!r})"


class WorkshopTag(msgspec.Struct):
    tag: str


class WorkshopItem(msgspec.Struct, omit_defaults=True):
    """A Steam Workshop item as returned by ISteamRemoteStorage/GetPublishedFileDetails.

    Items the API could not resolve only carry their id and a result code,
    every other field is optional.
    """

    publishedfileid: UInt64
    result: int = STEAM_RESULT_OK
    creator: UInt64 = 0
    creator_app_id: int = 0
    consumer_app_id: int = 0
    filename: str = ""
    file_size: UInt64 = 0
    file_url: str = ""
    hcontent_file: str = ""
    preview_url: str = ""
    hcontent_preview: str = ""
    title: str = ""
    description: str = ""
    time_created: int = 0
    time_updated: int = 0
    visibility: int = 0
    banned: int = 0
    ban_reason: str = ""
    subscriptions: int = 0
    favorited: int = 0
    lifetime_subscriptions: int = 0
    lifetime_favorited: int = 0
    views: int = 0
    tags: list[WorkshopTag] = msgspec.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result == STEAM_RESULT_OK

    @property
    def preview_image(self) -> str:
        return self.preview_url.strip()

    def is_banned(self) -> bool:
        return self.banned == 1

    def tag_names(self) -> list[str]:
        return [t.tag for t in self.tags]


class PublishedFileDetailsResponse(msgspec.Struct):
    result: int
    resultcount: int = 0
    publishedfiledetails: list[WorkshopItem] = msgspec.field(default_factory=list)


class PublishedFileDetailsEnvelope(msgspec.Struct):
    response: PublishedFileDetailsResponse
