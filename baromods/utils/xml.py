import io
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from os import PathLike
from pathlib import Path
from typing import IO, Generator, Iterator

from loguru import logger

from baromods.utils.exception import ParseError

XmlSource = bytes | str | PathLike[str] | IO[bytes]


@contextmanager
def _open_source(source: XmlSource) -> Iterator[IO[bytes]]:
    """
    Open an XML source as a binary stream.

    Raw ``bytes`` and ``str`` are treated as document content, path-likes as files.
    """
    if isinstance(source, bytes):
        yield io.BytesIO(source)
    elif isinstance(source, str):
        yield io.BytesIO(source.encode("utf-8"))
    elif isinstance(source, PathLike):
        with open(source, "rb") as f:
            yield f
    else:
        yield source


def iter_elements(source: XmlSource) -> Generator[tuple[int, ET.Element], None, None]:
    """
    Stream the elements of an XML document in document order.

    Yields ``(depth, element)`` on each start tag, the root being depth 0.
    Attributes are complete when an element is yielded, its children and text are not.
    Elements are cleared once closed so that large documents stay cheap.

    :param source: document bytes, document text, a path or a binary stream
    :raises ParseError: if the document is not well-formed XML
    """
    depth = 0
    with _open_source(source) as stream:
        try:
            for event, elem in ET.iterparse(stream, events=("start", "end")):
                if event == "start":
                    yield depth, elem
                    depth += 1
                else:
                    depth -= 1
                    elem.clear()
        except ET.ParseError as e:
            logger.debug(f"Malformed XML document: {e}")
            raise ParseError(f"Malformed XML: {e}") from e


def element_to_bytes(root: ET.Element, indent: str = "  ") -> bytes:
    """
    Serialize an element tree to UTF-8 bytes with an XML declaration,
    pretty printed with the given indent.
    """
    ET.indent(root, space=indent)
    buffer = io.BytesIO()
    ET.ElementTree(root).write(buffer, encoding="utf-8", xml_declaration=True)
    buffer.write(b"\n")
    return buffer.getvalue()


def write_xml(root: ET.Element, path: Path | str) -> None:
    """
    Write an element tree to an XML file. Raises OSError if the file cannot be written.

    :param root: root element to write
    :param path: Path to write the XML file to.
    """
    logger.debug(f"Writing XML document to {path}")
    data = element_to_bytes(root)
    with open(path, "wb") as f:
        f.write(data)
