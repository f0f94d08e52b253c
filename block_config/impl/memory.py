from typing import Any

from block_config.base import BlockId, BlockRef, ConfigSnapshot, ConfigStore, Value


class MemoryConfigStore(ConfigStore):
    """
    Store keeping the committed snapshot in memory.

    Committing swaps a single reference, so readers always see either the
    previous snapshot or the new one as a whole. Snapshots go in and out as
    copies, so nothing outside the store can change its contents.
    """

    def __init__(self, snapshot: ConfigSnapshot | None = None) -> None:
        self.base = ConfigSnapshot(snapshot.data if snapshot else None)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryConfigStore(...)")
        else:
            with p.group(4, "MemoryConfigStore(", ")"):
                p.breakable()
                p.text("base=")
                p.pretty(self.base)
                p.text(",")
                p.breakable()

    def get(self, block: BlockRef, key: str) -> Value | None:
        return self.base.get(BlockId.coerce(block), key)

    def keys_of_block(self, block: BlockRef) -> list[str]:
        return self.base.keys_of_block(BlockId.coerce(block))

    def names_of_block(self, block_type: str) -> list[str]:
        return self.base.names_of_block(block_type)

    def snapshot(self) -> ConfigSnapshot:
        return ConfigSnapshot(self.base.data)

    def commit(self, snapshot: ConfigSnapshot) -> None:
        self.base = ConfigSnapshot(snapshot.data)

    def is_empty(self) -> bool:
        return len(self.base) == 0


def create_memory_config_store(
    snapshot: ConfigSnapshot | None = None,
) -> MemoryConfigStore:
    return MemoryConfigStore(snapshot)
