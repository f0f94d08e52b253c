from dataclasses import dataclass
from typing import Literal

DuplicateBlockPolicy = Literal["merge", "replace"]


@dataclass(frozen=True)
class ParserSettings:
    """
    Knobs for reading and parsing a configuration source.

    encoding:
        Decoding used for every source that reads bytes. None keeps the
        source's own encoding (UTF-8 unless the source says otherwise).

    duplicate_blocks:
        "merge" reopens a block whose header appears again in the same file,
        so later keys are added to (or overwrite) the earlier ones.
        "replace" discards what the earlier header collected.
    """

    encoding: str | None = None
    duplicate_blocks: DuplicateBlockPolicy = "merge"

    def __post_init__(self) -> None:
        if self.duplicate_blocks not in ("merge", "replace"):
            raise ValueError(
                f"duplicate_blocks must be 'merge' or 'replace', "
                f"got {self.duplicate_blocks!r}"
            )
