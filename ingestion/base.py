"""
Abstract base class for input sources
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional

from models.base import ElementCategory
from schemas.struct import InputStruct


class InputSource(ABC):
    """
    Abstract base class for all input sources.

    A source is split into named items (e.g. the files backing it). Each item
    is read as a sequence of records, and an offset counts how many records
    of that item have been consumed.
    """

    def __init__(self, struct: InputStruct):
        self.struct = struct

    @property
    def category(self) -> ElementCategory:
        return self.struct.category

    @abstractmethod
    def list_items(self) -> List[str]:
        """Names of the items of this source, in loading order"""
        pass

    @abstractmethod
    def item_size(self, name: str) -> Optional[int]:
        """Number of records in an item, or None when unknown up front"""
        pass

    @abstractmethod
    def read(self, name: str, offset: int = 0) -> Iterator[Any]:
        """
        Iterate over the records of an item.

        Args:
            name: Item name as returned by list_items()
            offset: Number of leading records to skip
        """
        pass

    def __str__(self) -> str:
        return str(self.struct)
