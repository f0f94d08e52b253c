import logging
from typing import Iterable

from .base import Block, BlockId, ConfigSnapshot, SnapshotData
from .errors import ConfigParseError, ConfigStateError
from .settings import DuplicateBlockPolicy
from .tokenizer import Token, TokenKind, tokenize
from .values import evaluate

logger = logging.getLogger(__name__)


class BlockParser:
    """
    Builds the blocks of one parse pass from a token stream.

    Nothing is shared with earlier passes: every pass starts from an empty
    set of blocks, so blocks missing from the file disappear.
    """

    def __init__(self, duplicate_blocks: DuplicateBlockPolicy = "merge") -> None:
        self.duplicate_blocks = duplicate_blocks
        self.blocks: SnapshotData = {}
        self.current: Block | None = None

    def open_block(self, token: Token) -> None:
        block_id = BlockId(token.block_type, token.block_name)
        if block_id in self.blocks:
            if self.duplicate_blocks == "replace":
                logger.debug(
                    "Line %d: block %s reopened, discarding earlier keys",
                    token.lineno,
                    block_id,
                )
                self.blocks[block_id].clear()
            else:
                logger.debug("Line %d: block %s reopened", token.lineno, block_id)
        else:
            self.blocks[block_id] = {}
        self.current = self.blocks[block_id]

    def assign(self, token: Token) -> None:
        if self.current is None:
            raise ConfigStateError(
                f"assignment outside any block: {token.key!r}", token.lineno
            )
        try:
            value = evaluate(token.expr)
        except ConfigParseError as e:
            e.locate(token.lineno)
            raise
        self.current[token.key] = value

    def feed(self, tokens: Iterable[Token]) -> "BlockParser":
        for token in tokens:
            if token.kind is TokenKind.HEADER:
                self.open_block(token)
            else:
                self.assign(token)
        return self

    def freeze(self) -> ConfigSnapshot:
        return ConfigSnapshot(self.blocks)


def parse_text(
    text: str,
    source: str | None = None,
    duplicate_blocks: DuplicateBlockPolicy = "merge",
) -> ConfigSnapshot:
    """Parse a whole configuration text into a snapshot, or raise ConfigParseError."""
    try:
        return BlockParser(duplicate_blocks).feed(tokenize(text)).freeze()
    except ConfigParseError as e:
        e.source = e.source or source
        raise
