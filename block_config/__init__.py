from .base import BlockId, ConfigSnapshot, ConfigStore, Value
from .config import Configuration
from .diff import ChangeRecord, change_event_name, diff_snapshots
from .errors import (
    ConfigError,
    ConfigStateError,
    ConfigSyntaxError,
    ConfigTypeError,
    SourceUnreadable,
)
from .events import EventBus, EventSink
from .impl.git import GitConfigSource, create_git_config_source
from .impl.memory import MemoryConfigStore, create_memory_config_store
from .settings import ParserSettings
from .source import ConfigSource, FileConfigSource, TextConfigSource

__all__ = [
    "BlockId",
    "ConfigSnapshot",
    "ConfigStore",
    "Value",
    "Configuration",
    "ChangeRecord",
    "change_event_name",
    "diff_snapshots",
    "ConfigError",
    "ConfigStateError",
    "ConfigSyntaxError",
    "ConfigTypeError",
    "SourceUnreadable",
    "EventBus",
    "EventSink",
    "GitConfigSource",
    "create_git_config_source",
    "MemoryConfigStore",
    "create_memory_config_store",
    "ParserSettings",
    "ConfigSource",
    "FileConfigSource",
    "TextConfigSource",
]
