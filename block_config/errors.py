class ConfigError(Exception):
    """Base class for every error raised while loading a configuration."""


class SourceUnreadable(ConfigError):
    """The configuration source could not be read or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class ConfigParseError(ConfigError):
    """
    A pass was aborted because of a malformed line or literal.

    Carries the line number (1-based) and the source name when known so the
    message points at the offending line.
    """

    def __init__(
        self, message: str, lineno: int | None = None, source: str | None = None
    ) -> None:
        self.message = message
        self.lineno = lineno
        self.source = source
        super().__init__(message)

    def locate(self, lineno: int, source: str | None = None) -> "ConfigParseError":
        if self.lineno is None:
            self.lineno = lineno
        if self.source is None:
            self.source = source
        return self

    def __str__(self) -> str:
        if self.lineno is None:
            return self.message
        return f"{self.source or '<config>'}:{self.lineno}: {self.message}"


class ConfigSyntaxError(ConfigParseError, ValueError):
    """Unrecognized line shape or malformed literal."""


class ConfigTypeError(ConfigParseError, TypeError):
    """Range literal with incompatible operand types."""


class ConfigStateError(ConfigParseError):
    """Assignment before any block header."""
