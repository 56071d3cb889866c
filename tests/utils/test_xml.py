import io
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from baromods.utils.exception import ParseError
from baromods.utils.xml import element_to_bytes, iter_elements, write_xml

DOCUMENT = '<root a="1"><child b="2"><grandchild/></child><child/></root>'


def test_iter_elements_depths() -> None:
    seen = [(depth, elem.tag) for depth, elem in iter_elements(DOCUMENT)]
    assert seen == [(0, "root"), (1, "child"), (2, "grandchild"), (1, "child")]


def test_iter_elements_attributes_are_available() -> None:
    attributes = [dict(elem.attrib) for _, elem in iter_elements(DOCUMENT)]
    assert attributes[0] == {"a": "1"}
    assert attributes[1] == {"b": "2"}


@pytest.mark.parametrize(
    "source",
    [DOCUMENT, DOCUMENT.encode("utf-8"), io.BytesIO(DOCUMENT.encode("utf-8"))],
)
def test_iter_elements_sources(source: object) -> None:
    assert len(list(iter_elements(source))) == 4  # type: ignore[arg-type]


def test_iter_elements_path(tmp_path: Path) -> None:
    path = tmp_path / "doc.xml"
    path.write_text(DOCUMENT, encoding="utf-8")
    assert len(list(iter_elements(path))) == 4


@pytest.mark.parametrize("document", ["", "<root>", "<root></other>", "not xml"])
def test_iter_elements_malformed(document: str) -> None:
    with pytest.raises(ParseError):
        list(iter_elements(document))


def test_write_xml(tmp_path: Path) -> None:
    root = ET.Element("mods", {"name": "Ünïcödé"})
    ET.SubElement(root, "Vanilla")
    path = tmp_path / "out.xml"

    write_xml(root, path)

    assert path.read_bytes() == element_to_bytes(root)
    assert path.read_bytes().startswith(b"<?xml version='1.0' encoding='utf-8'?>")
    assert "Ünïcödé".encode("utf-8") in path.read_bytes()
