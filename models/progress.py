"""
Load progress records used to resume an interrupted job
"""

import threading
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr, TypeAdapter, validator

from core.exceptions import InvalidProgressStateError, InvalidSourceReferenceError
from models.base import ElementCategory


class InputItemProgress(BaseModel):
    """
    Cursor into one item of an input source.

    The offset counts consumed records and never moves backwards. When the
    item's total size is known the offset may not run past it.
    """

    offset: int = Field(0, ge=0)
    loaded: bool = False
    name: Optional[str] = None
    total: Optional[int] = Field(None, ge=0)

    @validator("total")
    def total_covers_offset(cls, v, values):
        """Offset can never exceed a known item size"""
        if v is not None and values.get("offset", 0) > v:
            raise ValueError(f"offset {values['offset']} exceeds item size {v}")
        return v

    @property
    def is_complete(self) -> bool:
        return self.total is not None and self.offset >= self.total

    def advance_to(self, offset: int) -> None:
        """Move the cursor forward; regressions and overruns are rejected"""
        if offset < self.offset:
            raise InvalidProgressStateError(
                "Item offset cannot move backwards",
                context={"item": self.name, "offset": self.offset, "requested": offset}
            )
        if self.total is not None and offset > self.total:
            raise InvalidProgressStateError(
                "Item offset cannot exceed item size",
                context={"item": self.name, "total": self.total, "requested": offset}
            )
        self.offset = offset

    def increase(self, count: int) -> None:
        if count < 0:
            raise InvalidProgressStateError(
                "Item offset increment must be non-negative",
                context={"item": self.name, "count": count}
            )
        self.advance_to(self.offset + count)


class InputProgress(BaseModel):
    """
    Progress of one input source.

    Holds the items that were fully consumed plus at most one item that is
    being loaded. An entry is owned by the single worker loading its source;
    the per-entry lock only serialises that owner against readers such as
    checkpoint serialisation.
    """

    loaded_items: List[InputItemProgress] = Field(default_factory=list, alias="loadedItems")
    loading_item: Optional[InputItemProgress] = Field(None, alias="loadingItem")

    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    class Config:
        populate_by_name = True

    @validator("loaded_items")
    def loaded_items_are_loaded(cls, v):
        if any(not item.loaded for item in v):
            raise ValueError("every loaded item must have loaded=true")
        return v

    @validator("loading_item")
    def loading_item_is_pending(cls, v):
        if v is not None and v.loaded:
            raise ValueError("the loading item must have loaded=false")
        return v

    def add_loading_item(self, item: InputItemProgress) -> InputItemProgress:
        with self._lock:
            if self.loading_item is not None:
                raise InvalidProgressStateError(
                    "Another item is already being loaded",
                    context={"loading": self.loading_item.name, "requested": item.name}
                )
            if item.loaded:
                raise InvalidProgressStateError(
                    "Cannot load an item that is already loaded",
                    context={"item": item.name}
                )
            self.loading_item = item
            return item

    def add_loaded_item(self, item: InputItemProgress) -> None:
        with self._lock:
            item.loaded = True
            self.loaded_items.append(item)

    def mark_loaded(self, fully_consume: bool) -> bool:
        """
        Move the loading item into the loaded items.

        With ``fully_consume`` the item is completed regardless of its offset,
        and the call is a no-op when nothing is loading. Without it the item is
        only completed once its offset has reached its known size.

        Returns:
            True if an item was moved to the loaded items
        """
        with self._lock:
            item = self.loading_item
            if item is None:
                if fully_consume:
                    return False
                raise InvalidProgressStateError("No item is being loaded")
            if not fully_consume and not item.is_complete:
                return False
            item.loaded = True
            self.loaded_items.append(item)
            self.loading_item = None
            return True

    def consumed_count(self) -> int:
        with self._lock:
            total = sum(item.offset for item in self.loaded_items)
            if self.loading_item is not None:
                total += self.loading_item.offset
            return total

    def match_loaded_item(self, name: str) -> Optional[InputItemProgress]:
        with self._lock:
            for item in self.loaded_items:
                if item.name == name:
                    return item
            return None

    def match_loading_item(self, name: str) -> Optional[InputItemProgress]:
        with self._lock:
            if self.loading_item is not None and self.loading_item.name == name:
                return self.loading_item
            return None

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return self.model_dump(by_alias=True, exclude_none=True)


_SNAPSHOT_ADAPTER = TypeAdapter(Dict[ElementCategory, Dict[str, InputProgress]])


class ProgressSnapshot:
    """
    Full checkpoint state of a run: one progress table per element category.

    Tables accept concurrent inserts of distinct keys from different worker
    threads. A single entry must only be mutated by the worker owning it.
    """

    def __init__(self, tables: Optional[Dict[ElementCategory, Dict[str, InputProgress]]] = None):
        self._lock = threading.Lock()
        self._tables: Dict[ElementCategory, Dict[str, InputProgress]] = {
            category: dict((tables or {}).get(category, {}))
            for category in ElementCategory
        }

    def category(self, category: ElementCategory) -> Dict[str, InputProgress]:
        return self._tables[category]

    def get(self, category: ElementCategory, key: str) -> Optional[InputProgress]:
        return self._tables[category].get(key)

    def get_or_create(self, category: ElementCategory, key: str) -> InputProgress:
        with self._lock:
            table = self._tables[category]
            progress = table.get(key)
            if progress is None:
                progress = InputProgress()
                table[key] = progress
            return progress

    def put(self, category: ElementCategory, key: str, progress: InputProgress) -> None:
        with self._lock:
            self._tables[category][key] = progress

    def items(self, category: ElementCategory) -> List[Tuple[str, InputProgress]]:
        with self._lock:
            return list(self._tables[category].items())

    def total_consumed(self, category: ElementCategory) -> int:
        return sum(progress.consumed_count() for _, progress in self.items(category))

    def mark_loaded(self, struct, mark_all: bool) -> bool:
        """
        Complete the loading item of the source described by ``struct``.

        Raises:
            InvalidSourceReferenceError: If the source never reported progress
        """
        key = struct.unique_key_for_file()
        progress = self.get(struct.category, key)
        if progress is None:
            raise InvalidSourceReferenceError(
                f"Invalid struct '{struct.label}'",
                context={"source_key": key, "category": struct.category.value}
            )
        return progress.mark_loaded(mark_all)

    def is_empty(self) -> bool:
        return all(not self.items(category) for category in ElementCategory)

    def __iter__(self) -> Iterator[Tuple[ElementCategory, str, InputProgress]]:
        for category in ElementCategory:
            for key, progress in self.items(category):
                yield category, key, progress

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            category.value: {key: progress.to_dict() for key, progress in self.items(category)}
            for category in ElementCategory
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProgressSnapshot":
        """
        Build a snapshot from its serialised form.

        Raises:
            pydantic.ValidationError: If the data does not match the checkpoint shape
        """
        return cls(_SNAPSHOT_ADAPTER.validate_python(data))
