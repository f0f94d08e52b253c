import logging
import threading
from pathlib import Path
from typing import Any

from .base import BlockRef, ConfigStore, Value
from .diff import ChangeRecord, change_event_name, diff_snapshots, dispatch_changes
from .errors import ConfigError
from .events import EventBus, EventSink, Listener
from .impl.memory import MemoryConfigStore
from .parser import parse_text
from .settings import ParserSettings
from .source import ConfigSource, FileConfigSource

logger = logging.getLogger(__name__)


class Configuration:
    """
    Block configuration loaded from a source, with change notifications.

    ``parse_config()`` reads the source, replaces the store contents and fires
    ``change:<block>:<key>`` for every key present before or after the pass.
    A pass that fails leaves the store untouched and fires nothing.

    A store can be passed in to share the parsed values with other
    collaborators; the configuration writes to it on each successful pass.
    """

    def __init__(
        self,
        source: str | Path | ConfigSource,
        store: ConfigStore | None = None,
        events: EventSink | None = None,
        settings: ParserSettings | None = None,
    ) -> None:
        self.settings = settings or ParserSettings()
        if isinstance(source, ConfigSource):
            self.source = source
        else:
            self.source = FileConfigSource(
                source, encoding=self.settings.encoding or "utf-8"
            )
        self.store = store if store is not None else MemoryConfigStore()
        self.events = events if events is not None else EventBus()
        self._lock = threading.RLock()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Configuration(...)")
        else:
            with p.group(4, "Configuration(", ")"):
                p.breakable()
                p.text(f"source={self.source.name!r},")
                p.breakable()
                p.text("store=")
                p.pretty(self.store)
                p.text(",")
                p.breakable()

    def get(self, block: BlockRef, key: str) -> Value | None:
        return self.store.get(block, key)

    def names_of_block(self, block_type: str) -> list[str]:
        return self.store.names_of_block(block_type)

    def keys_of_block(self, block: BlockRef) -> list[str]:
        return self.store.keys_of_block(block)

    def on_change(
        self, block: BlockRef, key: str, callback: Listener, **options: Any
    ) -> str:
        """
        Call ``callback(old, new)`` whenever a pass sees ``key`` in ``block``.

        Options are handed to the event sink as they are. Returns the event
        name the callback was registered for.
        """
        event_name = change_event_name(block, key)
        self.events.register(event_name, callback, **options)
        return event_name

    def parse_config(self) -> list[ChangeRecord]:
        """
        Re-read and re-parse the source, then fire change events.

        Returns the change records in the order they were dispatched. Raises
        a ConfigError subclass if the source cannot be read or parsed.
        """
        with self._lock:
            old = self.store.snapshot()
            try:
                new = parse_text(
                    self.source.read(self.settings.encoding),
                    source=self.source.name,
                    duplicate_blocks=self.settings.duplicate_blocks,
                )
            except ConfigError as e:
                logger.warning("Configuration pass aborted: %s", e)
                raise

            self.store.commit(new)
            records = diff_snapshots(old, new)
            logger.info(
                "Parsed %s: %d block(s), %d key(s) seen, %d changed",
                self.source.name,
                len(new),
                len(records),
                sum(1 for record in records if record.changed),
            )
            dispatch_changes(records, self.events)
            return records

    rehash = parse_config
