from pathlib import Path
from typing import Any

from .errors import SourceUnreadable


class ConfigSource:
    """Where configuration text comes from. Read again on every parse pass."""

    name: str = "<config>"

    def read(self, encoding: str | None = None) -> str:
        """
        Return the full text of the configuration, or raise SourceUnreadable.

        ``encoding`` overrides the source's own decoding for this read.
        """
        raise NotImplementedError()


class FileConfigSource(ConfigSource):
    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.name = str(self.path)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        p.text(f"FileConfigSource(path={self.path})")

    def read(self, encoding: str | None = None) -> str:
        encoding = encoding or self.encoding
        try:
            return self.path.read_text(encoding=encoding)
        except UnicodeDecodeError as e:
            raise SourceUnreadable(self.name, f"not valid {encoding}: {e}") from e
        except OSError as e:
            raise SourceUnreadable(self.name, e.strerror or str(e)) from e


class TextConfigSource(ConfigSource):
    """In-memory text; ``text`` can be reassigned between passes."""

    def __init__(self, text: str, name: str = "<text>") -> None:
        self.text = text
        self.name = name

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        p.text(f"TextConfigSource(name={self.name!r})")

    def read(self, encoding: str | None = None) -> str:
        return self.text
