from typing import Final

APP_NAME: Final = "BaroMods"

# Layout of a Barotrauma game home
LOCAL_MODS_DIR: Final = "LocalMods"
MOD_LISTS_DIR: Final = "ModLists"
PLAYER_CONFIG_FILE: Final = "config_player.xml"
MOD_FILELIST_FILE: Final = "filelist.xml"

# Content package (filelist.xml) vocabulary
CONTENT_PACKAGE_ROOT_TAG: Final = "contentpackage"
CONTENT_PACKAGE_FILE_ATTRIBUTE: Final = "file"
CONTENT_PACKAGE_REQUIRED_ATTRIBUTES: Final = (
    "name",
    "modversion",
    "corepackage",
    "steamworkshopid",
    "gameversion",
    "expectedhash",
)

# Load order profile (ModLists/*.xml) vocabulary
MOD_LIST_ROOT_TAG: Final = "mods"
MOD_LIST_LOCAL_TAG: Final = "Local"
MOD_LIST_NAME_ATTRIBUTE: Final = "name"

# Steam WebAPI
STEAM_GET_PUBLISHED_FILE_DETAILS_URL: Final = (
    "https://api.steampowered.com/ISteamRemoteStorage/GetPublishedFileDetails/v1/"
)
STEAM_RESULT_OK: Final = 1
# Maximum amount of ids GetPublishedFileDetails answers in one request
STEAM_MAX_ITEMS_PER_REQUEST: Final = 100
STEAM_REQUEST_TIMEOUT: Final = 30

# Directory hashing
HASH_CHUNK_SIZE: Final = 8192
HASH_PATH_SEPARATOR: Final = b"\x00"
