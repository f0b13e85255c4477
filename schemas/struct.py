"""
Identity of a configured input source
"""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, Field

from models.base import ElementCategory


def _digest(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


class InputStruct(BaseModel):
    """
    One input mapped to one element label.

    The unique key derived from the mapping config and the backing path is
    the stable source key used by progress snapshots and failure logs.
    """

    category: ElementCategory
    label: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)

    def unique_key(self) -> str:
        config = json.dumps(self.config, sort_keys=True, default=str)
        return f"{self.category.value}-{self.label}-{_digest(config)}"

    def unique_key_for_file(self) -> str:
        return f"{self.unique_key()}-{_digest(self.path)}"

    def __str__(self) -> str:
        return f"{self.category.value}:{self.label}({self.path})"
