from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

Scalar = Union[str, int, float]
Value = Union[str, int, float, list[Scalar]]
Block = dict[str, Value]
SnapshotData = dict["BlockId", Block]
BlockRef = Union[str, Sequence[str | None], "BlockId"]


@dataclass(frozen=True)
class BlockId:
    """
    Identifier of a block: its type and, for named blocks, its name.

    An unnamed block is the only instance of its type, and never equals a
    named block of the same type.
    """

    type: str
    name: str | None = None

    @classmethod
    def coerce(cls, block: BlockRef) -> "BlockId":
        """
        Accept a ``BlockId``, a bare type string, or a ``(type, name)`` pair.

        A pair with a None name means the unnamed block; an empty type or
        name is rejected.
        """
        if isinstance(block, BlockId):
            return block
        if isinstance(block, str):
            block_type, name = block, None
        elif isinstance(block, Sequence) and len(block) == 2:
            block_type, name = block
        else:
            raise TypeError(f"Cannot use {block!r} as a block identifier")

        if not isinstance(block_type, str) or not block_type:
            raise ValueError(
                f"Block type must be a non-empty string, got {block_type!r}"
            )
        if name is not None and (not isinstance(name, str) or not name):
            raise ValueError(
                f"Block name must be a non-empty string or None, got {name!r}"
            )
        return cls(block_type, name)

    def __str__(self) -> str:
        if self.name is None:
            return self.type
        return f"{self.type}/{self.name}"


def copy_value(value: Value | None) -> Value | None:
    if isinstance(value, list):
        return list(value)
    return value


class ConfigSnapshot:
    """
    Immutable snapshot of parsed configuration blocks at a specific point in time.

    Blocks keep the order in which they were first defined, and keys keep
    their first-definition order inside each block.
    """

    def __init__(self, data: SnapshotData | None = None) -> None:
        self.data: SnapshotData = {
            block_id: {key: copy_value(value) for key, value in block.items()}
            for block_id, block in (data or {}).items()
        }

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("ConfigSnapshot(...)")
        else:
            with p.group(4, "ConfigSnapshot(", ")"):
                for block_id, block in self.data.items():
                    p.breakable()
                    p.text(f"{block_id}={block},")
                p.breakable()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigSnapshot):
            return NotImplemented
        return self.data == other.data

    def __len__(self) -> int:
        return len(self.data)

    def block_ids(self) -> list[BlockId]:
        return list(self.data)

    def get(self, block_id: BlockId, key: str) -> Value | None:
        block = self.data.get(block_id)
        if block is None:
            return None
        value = block.get(key)
        return copy_value(value) if value is not None else None

    def keys_of_block(self, block_id: BlockId) -> list[str]:
        return list(self.data.get(block_id, {}))

    def names_of_block(self, block_type: str) -> list[str]:
        return [
            block_id.name
            for block_id in self.data
            if block_id.type == block_type and block_id.name
        ]


class ConfigStore:
    """
    Store of parsed configuration blocks.

    A store holds exactly one committed snapshot. Readers only see whole
    snapshots: ``commit`` replaces the previous contents in one step.
    """

    def get(self, block: BlockRef, key: str) -> Value | None:
        """Retrieve a value, or None if the block or key is absent."""
        raise NotImplementedError()

    def keys_of_block(self, block: BlockRef) -> list[str]:
        """Keys of a block in first-definition order."""
        raise NotImplementedError()

    def names_of_block(self, block_type: str) -> list[str]:
        """Names of all named blocks of a type, in definition order."""
        raise NotImplementedError()

    def snapshot(self) -> ConfigSnapshot:
        """Return an immutable copy of the current contents."""
        raise NotImplementedError()

    def commit(self, snapshot: ConfigSnapshot) -> None:
        """Replace the whole contents of the store with a snapshot."""
        raise NotImplementedError()

    def is_empty(self) -> bool:
        """Check if nothing has been committed yet (or the last commit was empty)."""
        raise NotImplementedError()
