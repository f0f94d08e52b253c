import logging
from dataclasses import dataclass

from .base import BlockId, BlockRef, ConfigSnapshot, Value, copy_value
from .events import EventSink
from .values import values_equal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeRecord:
    """
    One ``(block, key)`` pair seen in either of two snapshots.

    ``old`` is None when the key was added, ``new`` is None when it was
    removed. Unchanged keys produce a record too, with equal values.
    """

    block_id: BlockId
    key: str
    old: Value | None
    new: Value | None

    @property
    def changed(self) -> bool:
        return not values_equal(self.old, self.new)

    @property
    def added(self) -> bool:
        return self.old is None

    @property
    def removed(self) -> bool:
        return self.new is None

    @property
    def event_name(self) -> str:
        return change_event_name(self.block_id, self.key)


def change_event_name(block: BlockRef, key: str) -> str:
    """
    Event name for changes of one key.

    ``change:<type>:<key>`` for unnamed blocks and
    ``change:<type>/<name>:<key>`` for named ones.
    """
    block_id = BlockId.coerce(block)
    return f"change:{block_id}:{key}"


def _record(
    block_id: BlockId, key: str, old: Value | None, new: Value | None
) -> ChangeRecord:
    # Records never share lists with a snapshot
    return ChangeRecord(block_id, key, copy_value(old), copy_value(new))


def diff_snapshots(old: ConfigSnapshot, new: ConfigSnapshot) -> list[ChangeRecord]:
    """
    Compare two snapshots over the union of their ``(block, key)`` pairs.

    Records follow the new snapshot's block order, then its key order. Keys
    that only exist in the old snapshot come right after the surviving keys
    of their block; blocks that only exist in the old snapshot come last.
    """
    records: list[ChangeRecord] = []

    for block_id, block in new.data.items():
        old_block = old.data.get(block_id, {})
        for key, value in block.items():
            records.append(_record(block_id, key, old_block.get(key), value))
        for key, value in old_block.items():
            if key not in block:
                records.append(_record(block_id, key, value, None))

    for block_id, old_block in old.data.items():
        if block_id in new.data:
            continue
        for key, value in old_block.items():
            records.append(_record(block_id, key, value, None))

    return records


def dispatch_changes(records: list[ChangeRecord], sink: EventSink) -> None:
    """Fire one event per record, in order, with ``(old, new)`` as arguments."""
    for record in records:
        logger.debug(
            "%s: %r -> %r", record.event_name, record.old, record.new
        )
        sink.fire(record.event_name, copy_value(record.old), copy_value(record.new))
