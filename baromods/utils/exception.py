from pathlib import Path


class BaroModsError(Exception):
    """
    Base class of every error raised by the mod metadata pipeline
    """

    pass


class ParseError(BaroModsError):
    """
    Raised when a content package or a mod list document is malformed
    or misses a required field
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MissingFieldError(ParseError):
    def __init__(self, field: str, source: str = "document") -> None:
        super().__init__(f"Missing required field '{field}' in {source}", field)


class InvalidFieldError(ParseError):
    def __init__(self, field: str, value: str, expected: str) -> None:
        super().__init__(
            f"Invalid value '{value}' for field '{field}', expected {expected}",
            field,
        )
        self.value = value


class HashIOError(BaroModsError):
    """
    Raised when a file cannot be listed or read while hashing a directory
    """

    def __init__(self, path: Path | str, cause: OSError) -> None:
        super().__init__(f"I/O error while hashing {path}: {cause}")
        self.path = Path(path)
        self.cause = cause


class EncodingError(BaroModsError):
    """
    Raised when a relative path cannot be represented as UTF-8
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Path is not valid UTF-8: {path!r}")
        self.path = path


class NetworkError(BaroModsError):
    """
    Raised when the Steam WebAPI cannot be reached
    """

    pass


class ApiError(BaroModsError):
    """
    Raised when the Steam WebAPI answers with a failure result code,
    or with fewer results than requested
    """

    def __init__(self, result_code: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Steam WebAPI call failed with result code {result_code}"
        )
        self.result_code = result_code


class MergeAmbiguityError(BaroModsError):
    """
    Raised when local mods share a workshop id, which makes an id keyed join ambiguous
    """

    def __init__(self, workshop_id: int, names: list[str]) -> None:
        super().__init__(
            f"Workshop id {workshop_id} is shared by several local mods: {', '.join(names)}"
        )
        self.workshop_id = workshop_id
        self.names = names


class GameHomeNotSetError(BaroModsError):
    pass


class ModNotFoundError(BaroModsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No installed mod named '{name}'")
        self.name = name
