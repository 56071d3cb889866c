import hashlib
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from baromods.utils.constants import HASH_CHUNK_SIZE, HASH_PATH_SEPARATOR
from baromods.utils.exception import EncodingError, HashIOError


def _raise_walk_error(error: OSError) -> None:
    raise HashIOError(error.filename or "", error)


def list_relative_files(directory: Path) -> list[tuple[bytes, Path]]:
    """
    List every regular file below a directory, recursively.

    :param directory: root of the walk
    :return: (UTF-8 relative path with "/" separators, file path) pairs, sorted by relative path
    :raises HashIOError: if a directory cannot be listed
    :raises EncodingError: if a relative path is not valid UTF-8
    """
    files: list[tuple[bytes, Path]] = []
    for root, _, filenames in os.walk(directory, onerror=_raise_walk_error):
        for filename in filenames:
            full_path = Path(root) / filename
            relative = full_path.relative_to(directory).as_posix()
            try:
                encoded = relative.encode("utf-8")
            except UnicodeEncodeError as e:
                raise EncodingError(relative) from e
            files.append((encoded, full_path))
    files.sort(key=lambda pair: pair[0])
    return files


def hash_file(relative_path: bytes, file_path: Path) -> bytes:
    """
    Digest one file as its relative path, a NUL separator and its content.

    :raises HashIOError: if the file cannot be read
    """
    digest = hashlib.sha256()
    digest.update(relative_path)
    digest.update(HASH_PATH_SEPARATOR)
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(HASH_CHUNK_SIZE):
                digest.update(chunk)
    except OSError as e:
        raise HashIOError(file_path, e) from e
    return digest.digest()


def hash_directory(directory: Path | str, max_workers: int | None = None) -> str:
    """
    Compute a content-addressed hash of a directory.

    The result only depends on the set of (relative path, content) pairs below
    the directory, so copies of a mod hash identically wherever they live and
    whatever order their files were written in. Two empty directories hash the same.

    Each file is digested in parallel, then the per-file digests are folded into
    the final digest in relative path order.

    :param directory: directory to hash
    :param max_workers: thread pool size, defaults to the executor default
    :return: hex digest
    :raises HashIOError: on any filesystem error, no partial hash is returned
    :raises EncodingError: if a relative path is not valid UTF-8
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise HashIOError(
            directory, NotADirectoryError(f"Not a directory: {directory}")
        )

    files = list_relative_files(directory)
    logger.debug(f"Hashing {len(files)} files in {directory}")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map yields in submission order, which keeps the fold sorted
        digests = list(executor.map(lambda pair: hash_file(*pair), files))

    outer = hashlib.sha256()
    for (relative_path, _), inner in zip(files, digests):
        outer.update(relative_path)
        outer.update(HASH_PATH_SEPARATOR)
        outer.update(inner)

    result = outer.hexdigest()
    logger.debug(f"Hash of {directory}: {result}")
    return result
