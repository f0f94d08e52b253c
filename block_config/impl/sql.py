import json
from typing import Any, Callable

from sqlalchemy import ForeignKey, Text, delete, insert, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.types import TypeDecorator

from block_config.base import (
    BlockId,
    BlockRef,
    ConfigSnapshot,
    ConfigStore,
    SnapshotData,
    Value,
)


class JSONText(TypeDecorator):
    """
    JSON kept as plain text.

    A JSON column gets NUMERIC affinity on SQLite, which turns ``1.0`` into
    ``1``; text is stored and returned untouched.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value: str | None, dialect: Any) -> Any:
        if value is None:
            return None
        return json.loads(value)


class Base(DeclarativeBase):
    pass


class BlockModel(Base):
    __tablename__ = "config_blocks"
    id: Mapped[int] = mapped_column(primary_key=True)
    position: Mapped[int] = mapped_column(index=True)
    type: Mapped[str] = mapped_column(index=True)
    name: Mapped[str | None] = mapped_column(nullable=True)


class EntryModel(Base):
    __tablename__ = "config_entries"
    block_id: Mapped[int] = mapped_column(
        ForeignKey("config_blocks.id"), primary_key=True
    )
    key: Mapped[str] = mapped_column(primary_key=True)
    position: Mapped[int] = mapped_column()
    value: Mapped[Any] = mapped_column(JSONText, nullable=False)


def _block_clause(block_id: BlockId) -> list:
    if block_id.name is None:
        return [BlockModel.type == block_id.type, BlockModel.name.is_(None)]
    return [BlockModel.type == block_id.type, BlockModel.name == block_id.name]


class SqlConfigStore(ConfigStore):
    """
    Store persisting the committed snapshot in a database.

    Several processes pointed at the same database share one parsed
    configuration. A commit rewrites every row inside one transaction, so
    readers in other sessions never see a mix of two passes.
    """

    def __init__(self, session_maker: Callable[[], Session]) -> None:
        self.session_maker = session_maker
        self.session = session_maker()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("SqlConfigStore(...)")
        else:
            with p.group(4, "SqlConfigStore(", ")"):
                p.breakable()
                p.text(f"bind={self.session.get_bind().url},")
                p.breakable()

    def get(self, block: BlockRef, key: str) -> Value | None:
        stmt = (
            select(EntryModel.value)
            .join(BlockModel, EntryModel.block_id == BlockModel.id)
            .where(*_block_clause(BlockId.coerce(block)), EntryModel.key == key)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def keys_of_block(self, block: BlockRef) -> list[str]:
        stmt = (
            select(EntryModel.key)
            .join(BlockModel, EntryModel.block_id == BlockModel.id)
            .where(*_block_clause(BlockId.coerce(block)))
            .order_by(EntryModel.position)
        )
        return list(self.session.execute(stmt).scalars())

    def names_of_block(self, block_type: str) -> list[str]:
        stmt = (
            select(BlockModel.name)
            .where(BlockModel.type == block_type, BlockModel.name.is_not(None))
            .order_by(BlockModel.position)
        )
        return [name for name in self.session.execute(stmt).scalars() if name]

    def snapshot(self) -> ConfigSnapshot:
        data: SnapshotData = {}
        blocks: dict[int, BlockId] = {}

        # Plain column rows, so nothing stale is served from the identity map
        rows = select(BlockModel.id, BlockModel.type, BlockModel.name).order_by(
            BlockModel.position
        )
        for row in self.session.execute(rows):
            block_id = BlockId(row.type, row.name)
            blocks[row.id] = block_id
            data[block_id] = {}

        entries = select(EntryModel.block_id, EntryModel.key, EntryModel.value).order_by(
            EntryModel.block_id, EntryModel.position
        )
        for entry in self.session.execute(entries):
            data[blocks[entry.block_id]][entry.key] = entry.value

        return ConfigSnapshot(data)

    def commit(self, snapshot: ConfigSnapshot) -> None:
        try:
            self.session.execute(delete(EntryModel))
            self.session.execute(delete(BlockModel))

            for position, (block_id, block) in enumerate(snapshot.data.items()):
                row = BlockModel(
                    position=position, type=block_id.type, name=block_id.name
                )
                self.session.add(row)
                self.session.flush()

                if block:
                    self.session.execute(
                        insert(EntryModel),
                        [
                            {
                                "block_id": row.id,
                                "key": key,
                                "position": key_position,
                                "value": value,
                            }
                            for key_position, (key, value) in enumerate(block.items())
                        ],
                    )

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def is_empty(self) -> bool:
        return self.session.execute(select(BlockModel.id)).first() is None

    def close(self) -> None:
        self.session.close()


def create_sql_config_store(session_maker: Callable[[], Session]) -> SqlConfigStore:
    return SqlConfigStore(session_maker)
