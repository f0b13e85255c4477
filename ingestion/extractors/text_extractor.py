"""
Line-oriented text file source
"""

from itertools import islice
from pathlib import Path
from typing import Iterator, List, Optional
from ingestion.base import InputSource
from schemas.struct import InputStruct
import logging

logger = logging.getLogger(__name__)


class TextFileSource(InputSource):
    """
    Read records from text files, one record per line.

    Supports:
    - A single file or every regular file of a directory
    - Resuming an item from a line offset
    - Per-struct charset via ``config["charset"]``
    """

    def __init__(self, struct: InputStruct):
        super().__init__(struct)
        self.path = Path(struct.path)
        self.charset = struct.config.get("charset", "utf-8")

    def list_items(self) -> List[str]:
        if self.path.is_file():
            return [str(self.path)]
        if not self.path.is_dir():
            logger.warning(f"Input path not found: {self.path}")
            return []
        return sorted(
            str(p) for p in self.path.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    def item_size(self, name: str) -> Optional[int]:
        with open(name, "r", encoding=self.charset) as f:
            return sum(1 for _ in f)

    def read(self, name: str, offset: int = 0) -> Iterator[str]:
        logger.info(f"Reading {name} from line {offset}")
        with open(name, "r", encoding=self.charset) as f:
            for line in islice(f, offset, None):
                yield line.rstrip("\r\n")
