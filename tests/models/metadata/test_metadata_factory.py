from pathlib import Path

import pytest

from baromods.models.metadata.metadata_factory import (
    create_mod_from_dir,
    create_mod_from_path,
    create_mod_from_xml,
    mod_list_to_bytes,
    parse_bool,
    parse_workshop_id,
    read_mod_list,
    read_player_config,
    write_mod_list,
)
from baromods.models.metadata.metadata_structure import LoadOrderProfile
from baromods.utils.exception import InvalidFieldError, MissingFieldError, ParseError

LOCAL_MODS_PATH = Path("tests/data/mod_examples/Barotrauma/LocalMods")
MOD_LISTS_PATH = Path("tests/data/mod_examples/Barotrauma/ModLists")
PLAYER_CONFIG_PATH = Path("tests/data/mod_examples/Barotrauma/config_player.xml")


def make_filelist(children: str = "", **overrides: str) -> str:
    attributes = {
        "name": "X",
        "modversion": "1",
        "corepackage": "False",
        "steamworkshopid": "42",
        "gameversion": "1.0",
        "expectedhash": "AA",
    }
    attributes.update(overrides)
    rendered = " ".join(f'{key}="{value}"' for key, value in attributes.items())
    return f"<contentpackage {rendered}>{children}</contentpackage>"


def test_create_mod_from_xml_groups_files_by_tag() -> None:
    mod = create_mod_from_xml(
        make_filelist('<Item file="a.xml"/><Item file="b.xml"/>')
    )

    assert mod.name == "X"
    assert mod.mod_version == "1"
    assert mod.core_package is False
    assert mod.steam_workshop_id == 42
    assert mod.game_version == "1.0"
    assert mod.expected_hash == "AA"
    assert mod.home_dir is None
    assert mod.file_groups == {"Item": ["a.xml", "b.xml"]}


def test_create_mod_from_xml_accepts_bytes() -> None:
    mod = create_mod_from_xml(make_filelist('<Text file="en.xml"/>').encode("utf-8"))
    assert mod.get_files("Text") == ["en.xml"]


def test_create_mod_from_xml_keeps_document_order_within_tags() -> None:
    mod = create_mod_from_xml(
        make_filelist(
            '<Text file="1.xml"/><Item file="i.xml"/><Text file="2.xml"/>'
            '<Other file="o.png"/><Text file="3.xml"/>'
        )
    )

    assert mod.file_groups == {
        "Text": ["1.xml", "2.xml", "3.xml"],
        "Item": ["i.xml"],
        "Other": ["o.png"],
    }
    assert mod.tag_names() == ["Text", "Item", "Other"]


def test_create_mod_from_xml_without_children() -> None:
    mod = create_mod_from_xml(make_filelist())
    assert mod.file_groups == {}
    assert mod.has_tag("Item") is False


def test_create_mod_from_xml_ignores_nested_elements() -> None:
    mod = create_mod_from_xml(
        make_filelist('<Item file="a.xml"><Nested file="ignored.xml"/></Item>')
    )
    assert mod.file_groups == {"Item": ["a.xml"]}


@pytest.mark.parametrize(
    "attribute",
    [
        "name",
        "modversion",
        "corepackage",
        "steamworkshopid",
        "gameversion",
        "expectedhash",
    ],
)
def test_create_mod_from_xml_missing_required_attribute(attribute: str) -> None:
    document = make_filelist().replace(f'{attribute}="', 'unrelated="', 1)

    with pytest.raises(MissingFieldError) as exc_info:
        create_mod_from_xml(document)

    assert exc_info.value.field == attribute
    assert attribute in str(exc_info.value)


def test_create_mod_from_xml_child_without_file() -> None:
    with pytest.raises(ParseError) as exc_info:
        create_mod_from_xml(make_filelist('<Item path="a.xml"/>'))
    assert exc_info.value.field == "file"


def test_create_mod_from_xml_malformed_document() -> None:
    with pytest.raises(ParseError):
        create_mod_from_xml('<contentpackage name="X"><Item file="a.xml">')


def test_create_mod_from_xml_wrong_root() -> None:
    with pytest.raises(ParseError):
        create_mod_from_xml('<mods name="AG"><Vanilla/></mods>')


@pytest.mark.parametrize(
    "value,expected",
    [
        ("True", True),
        ("true", True),
        ("TRUE", True),
        ("1", True),
        (" false ", False),
        ("False", False),
        ("0", False),
    ],
)
def test_parse_bool(value: str, expected: bool) -> None:
    assert parse_bool(value, "corepackage") is expected


@pytest.mark.parametrize("value", ["yes", "no", "", "2", "tru"])
def test_parse_bool_invalid(value: str) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        parse_bool(value, "corepackage")
    assert exc_info.value.field == "corepackage"


def test_create_mod_from_xml_invalid_boolean() -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        create_mod_from_xml(make_filelist(corepackage="maybe"))
    assert exc_info.value.field == "corepackage"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2518816103", 2518816103),
        ('"2518816103"', 2518816103),
        (" 7 ", 7),
        ("", 0),
        ("18446744073709551615", 2**64 - 1),
    ],
)
def test_parse_workshop_id(value: str, expected: int) -> None:
    assert parse_workshop_id(value, "steamworkshopid") == expected


@pytest.mark.parametrize(
    "value", ["-1", "abc", "12a", "1.5", "18446744073709551616", "١٢٣"]
)
def test_parse_workshop_id_invalid(value: str) -> None:
    with pytest.raises(InvalidFieldError):
        parse_workshop_id(value, "steamworkshopid")


def test_create_mod_from_xml_empty_workshop_id() -> None:
    mod = create_mod_from_xml(make_filelist(steamworkshopid=""))
    assert mod.steam_workshop_id == 0


def test_create_mod_from_path_records_home_dir() -> None:
    path = LOCAL_MODS_PATH / "2518816103" / "filelist.xml"
    mod = create_mod_from_path(path)

    assert mod.name == "BaroTraumatic"
    assert mod.mod_version == "1.2.81"
    assert mod.steam_workshop_id == 2518816103
    assert mod.expected_hash == "9A54ACF2E7EBC95726A72AE966EF5F8D"
    assert mod.home_path == path.parent
    assert len(mod.tag_names()) == 10
    assert mod.get_files("Text") == [
        "%ModDir%/Text/English.xml",
        "%ModDir%/Text/Russian.xml",
        "%ModDir%/Text/LatinamericanSpanish.xml",
        "%ModDir%/Text/SimplifiedChinese.xml",
    ]
    assert mod.get_files("RandomEvents") == [
        "%ModDir%/Events/randomcampaignevents.xml",
        "%ModDir%/Events/randommissionevents.xml",
    ]
    assert mod.get_files("Missing") is None


def test_create_mod_from_dir() -> None:
    mod = create_mod_from_dir(LOCAL_MODS_PATH / "3012187347")
    assert mod.name == "EK Dockyard"
    assert mod.home_dir == str(LOCAL_MODS_PATH / "3012187347")


def test_create_mod_from_dir_without_filelist() -> None:
    with pytest.raises(OSError):
        create_mod_from_dir(LOCAL_MODS_PATH / "NotAMod")


def test_read_mod_list() -> None:
    profile = read_mod_list(MOD_LISTS_PATH / "AG.xml")

    assert profile == LoadOrderProfile(
        profile_name="AG",
        base_package="Vanilla",
        mods=["BaroTraumatic", "EK Dockyard"],
    )


def test_read_mod_list_base_package_is_first_non_local_tag() -> None:
    profile = read_mod_list(
        '<mods name="P"><Local name="A"/><Custom/><Vanilla/><Local name="B"/></mods>'
    )
    assert profile.base_package == "Custom"
    assert profile.mods == ["A", "B"]


def test_read_mod_list_missing_name() -> None:
    with pytest.raises(MissingFieldError) as exc_info:
        read_mod_list("<mods><Vanilla/></mods>")
    assert exc_info.value.field == "name"


def test_read_mod_list_missing_base_package() -> None:
    with pytest.raises(MissingFieldError) as exc_info:
        read_mod_list('<mods name="P"><Local name="A"/></mods>')
    assert exc_info.value.field == "base package"


def test_read_mod_list_truncated_document() -> None:
    with pytest.raises(ParseError):
        read_mod_list(MOD_LISTS_PATH / "Broken.xml")


@pytest.mark.parametrize(
    "profile",
    [
        LoadOrderProfile(profile_name="Empty", base_package="Vanilla", mods=[]),
        LoadOrderProfile(
            profile_name="AG", base_package="Vanilla", mods=["ModA", "ModB", "ModA"]
        ),
        LoadOrderProfile(
            profile_name="中文配置", base_package="Vanilla", mods=["EK 重製版", "Ünïcödé"]
        ),
        LoadOrderProfile(
            profile_name='Quotes "&" <brackets>',
            base_package="Vanilla",
            mods=["Line\nbreak", "  spaced  "],
        ),
    ],
)
def test_mod_list_round_trip(profile: LoadOrderProfile) -> None:
    assert read_mod_list(mod_list_to_bytes(profile)) == profile


def test_mod_list_to_bytes_layout() -> None:
    profile = LoadOrderProfile(profile_name="AG", base_package="Vanilla", mods=["A"])
    assert mod_list_to_bytes(profile) == (
        b"<?xml version='1.0' encoding='utf-8'?>\n"
        b'<mods name="AG">\n'
        b"  <Vanilla />\n"
        b'  <Local name="A" />\n'
        b"</mods>\n"
    )


def test_write_mod_list(tmp_path: Path) -> None:
    profile = read_mod_list(MOD_LISTS_PATH / "AG.xml")
    output = tmp_path / "AG.xml"

    write_mod_list(profile, output)

    assert read_mod_list(output) == profile


def test_read_player_config() -> None:
    config = read_player_config(PLAYER_CONFIG_PATH)

    assert config.core_package == "Content/ContentPackages/Vanilla.xml"
    assert config.enabled_ids() == [3012187347, 3008781099, 2518816103]
    assert config.enabled_mods[0].path == "LocalMods/3012187347/filelist.xml"
    assert all(entry.path.startswith("LocalMods/") for entry in config.enabled_mods)


def test_read_player_config_without_packages() -> None:
    config = read_player_config(
        '<config><corepackage path="Content/ContentPackages/Vanilla.xml"/></config>'
    )
    assert config.enabled_mods == []


def test_read_player_config_skips_non_numeric_folders() -> None:
    config = read_player_config(
        "<config>"
        '<corepackage path="Vanilla.xml"/>'
        "<contentpackages><regularpackages>"
        '<package path="LocalMods/MyMod/filelist.xml"/>'
        '<package path="LocalMods/15/filelist.xml"/>'
        "</regularpackages></contentpackages>"
        '<package path="LocalMods/99/filelist.xml"/>'
        "</config>"
    )
    assert config.enabled_ids() == [15]


def test_read_player_config_missing_core_package() -> None:
    with pytest.raises(MissingFieldError):
        read_player_config("<config><contentpackages/></config>")
