import xml.etree.ElementTree as ET
from pathlib import Path

from loguru import logger

from baromods.models.metadata.metadata_structure import (
    EnabledModEntry,
    LoadOrderProfile,
    ModDescriptor,
    PlayerConfig,
)
from baromods.utils.constants import (
    CONTENT_PACKAGE_FILE_ATTRIBUTE,
    CONTENT_PACKAGE_REQUIRED_ATTRIBUTES,
    CONTENT_PACKAGE_ROOT_TAG,
    LOCAL_MODS_DIR,
    MOD_FILELIST_FILE,
    MOD_LIST_LOCAL_TAG,
    MOD_LIST_NAME_ATTRIBUTE,
    MOD_LIST_ROOT_TAG,
)
from baromods.utils.exception import InvalidFieldError, MissingFieldError, ParseError
from baromods.utils.xml import XmlSource, element_to_bytes, iter_elements, write_xml

_TRUE_VALUES = frozenset({"true", "1"})
_FALSE_VALUES = frozenset({"false", "0"})
_U64_MAX = 2**64 - 1


def parse_bool(value: str, field: str) -> bool:
    """
    Parse a boolean attribute. Accepts true/false/1/0 in any case,
    ignoring surrounding whitespace.

    :raises InvalidFieldError: for any other spelling
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidFieldError(field, value, "true/false/1/0")


def parse_workshop_id(value: str, field: str) -> int:
    """
    Parse a Steam Workshop id attribute. An empty value means the mod
    is not published and maps to 0.

    :raises InvalidFieldError: if the value is not an unsigned 64-bit decimal integer
    """
    stripped = value.strip().strip('"').strip()
    if not stripped:
        return 0
    if not stripped.isascii() or not stripped.isdigit():
        raise InvalidFieldError(field, value, "an unsigned integer")
    workshop_id = int(stripped)
    if workshop_id > _U64_MAX:
        raise InvalidFieldError(field, value, "an unsigned 64-bit integer")
    return workshop_id


def create_mod_from_xml(
    source: XmlSource, home_dir: Path | str | None = None
) -> ModDescriptor:
    """
    Parse a content package document into a ModDescriptor.

    Every child of the root contributes its file attribute to the file group
    named after its tag, in document order. Tags are not restricted to a known set.

    :param source: filelist.xml content or path
    :param home_dir: directory to record as the mod home
    :raises ParseError: if the document is malformed or a required field is missing or invalid
    """
    attributes: dict[str, str] | None = None
    file_groups: dict[str, list[str]] = {}

    for depth, elem in iter_elements(source):
        if depth == 0:
            if elem.tag != CONTENT_PACKAGE_ROOT_TAG:
                raise ParseError(
                    f"Expected <{CONTENT_PACKAGE_ROOT_TAG}> root element, found <{elem.tag}>"
                )
            attributes = dict(elem.attrib)
        elif depth == 1:
            file = elem.get(CONTENT_PACKAGE_FILE_ATTRIBUTE)
            if file is None:
                raise MissingFieldError(
                    CONTENT_PACKAGE_FILE_ATTRIBUTE, f"<{elem.tag}> element"
                )
            file_groups.setdefault(elem.tag, []).append(file)

    if attributes is None:
        raise ParseError("Empty content package document")

    for name in CONTENT_PACKAGE_REQUIRED_ATTRIBUTES:
        if name not in attributes:
            raise MissingFieldError(name, f"<{CONTENT_PACKAGE_ROOT_TAG}>")

    return ModDescriptor(
        name=attributes["name"],
        mod_version=attributes["modversion"],
        core_package=parse_bool(attributes["corepackage"], "corepackage"),
        steam_workshop_id=parse_workshop_id(
            attributes["steamworkshopid"], "steamworkshopid"
        ),
        game_version=attributes["gameversion"],
        expected_hash=attributes["expectedhash"],
        home_dir=str(home_dir) if home_dir is not None else None,
        file_groups=file_groups,
    )


def create_mod_from_path(path: Path | str) -> ModDescriptor:
    """
    Parse a filelist.xml file, recording its enclosing directory as the mod home.

    :raises ParseError: if the document is invalid
    :raises OSError: if the file cannot be read
    """
    path = Path(path)
    return create_mod_from_xml(path, home_dir=path.parent)


def create_mod_from_dir(mod_dir: Path | str) -> ModDescriptor:
    """Parse the filelist.xml of a mod directory."""
    return create_mod_from_path(Path(mod_dir) / MOD_FILELIST_FILE)


def read_mod_list(source: XmlSource) -> LoadOrderProfile:
    """
    Read a load order profile (ModLists/<profile>.xml).

    The root <mods> element names the profile, the first child that is not
    a <Local> element is the base package, and every <Local> element adds one
    enabled mod in document order.

    :raises ParseError: if the document is malformed, or misses the profile name or base package
    """
    profile_name: str | None = None
    base_package: str | None = None
    mods: list[str] = []

    for depth, elem in iter_elements(source):
        if depth == 0:
            if elem.tag != MOD_LIST_ROOT_TAG:
                raise ParseError(
                    f"Expected <{MOD_LIST_ROOT_TAG}> root element, found <{elem.tag}>"
                )
            profile_name = elem.get(MOD_LIST_NAME_ATTRIBUTE)
        elif depth == 1:
            if elem.tag == MOD_LIST_LOCAL_TAG:
                name = elem.get(MOD_LIST_NAME_ATTRIBUTE)
                if name is None:
                    logger.debug("Skipping <Local> entry without a name")
                    continue
                mods.append(name)
            elif base_package is None:
                base_package = elem.tag

    if profile_name is None:
        raise MissingFieldError(MOD_LIST_NAME_ATTRIBUTE, f"<{MOD_LIST_ROOT_TAG}>")
    if base_package is None:
        raise MissingFieldError("base package", f"<{MOD_LIST_ROOT_TAG}>")

    return LoadOrderProfile(
        profile_name=profile_name, base_package=base_package, mods=mods
    )


def mod_list_to_element(profile: LoadOrderProfile) -> ET.Element:
    root = ET.Element(
        MOD_LIST_ROOT_TAG, {MOD_LIST_NAME_ATTRIBUTE: profile.profile_name}
    )
    ET.SubElement(root, profile.base_package)
    for name in profile.mods:
        ET.SubElement(root, MOD_LIST_LOCAL_TAG, {MOD_LIST_NAME_ATTRIBUTE: name})
    return root


def mod_list_to_bytes(profile: LoadOrderProfile) -> bytes:
    """Serialize a load order profile as an indented UTF-8 XML document."""
    return element_to_bytes(mod_list_to_element(profile))


def write_mod_list(profile: LoadOrderProfile, path: Path | str) -> None:
    """
    Save a load order profile. Raises OSError if the file cannot be written.
    """
    logger.info(
        f"Saving mod list '{profile.profile_name}' with {len(profile.mods)} mods to {path}"
    )
    write_xml(mod_list_to_element(profile), path)


def read_player_config(source: XmlSource) -> PlayerConfig:
    """
    Read the enabled content packages out of config_player.xml.

    Only regular packages installed under LocalMods/<id>/ are reported;
    workshop and vanilla packages are skipped.

    :raises ParseError: if the document is malformed or has no core package
    """
    core_package: str | None = None
    enabled: list[EnabledModEntry] = []
    in_regular_packages = False
    regular_depth = -1

    for depth, elem in iter_elements(source):
        if in_regular_packages and depth <= regular_depth:
            in_regular_packages = False

        if depth == 1 and elem.tag == "corepackage" and core_package is None:
            core_package = elem.get("path")
        elif elem.tag == "regularpackages":
            in_regular_packages = True
            regular_depth = depth
        elif (
            in_regular_packages
            and depth == regular_depth + 1
            and elem.tag == "package"
        ):
            entry = _enabled_mod_entry(elem.get("path"))
            if entry is not None:
                enabled.append(entry)

    if core_package is None:
        raise MissingFieldError("corepackage", "player config")

    return PlayerConfig(core_package=core_package, enabled_mods=enabled)


def _enabled_mod_entry(path: str | None) -> EnabledModEntry | None:
    if path is None or not path.startswith(f"{LOCAL_MODS_DIR}/"):
        return None
    parts = path.split("/")
    if len(parts) < 2 or not parts[1].isascii() or not parts[1].isdigit():
        logger.debug(f"Skipping enabled package with a non numeric folder: {path}")
        return None
    return EnabledModEntry(path=path, id=int(parts[1]))
