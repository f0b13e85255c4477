"""
Pydantic schema for run options with validation
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, validator

from core.config import settings
from core.exceptions import ConfigInvalidError

JSON_SUFFIX = ".json"
HTTP_PREFIX = "http://"


class LoadOptions(BaseModel):
    """
    Options of one loading run, as parsed from the command line.

    Ensures:
    - The struct description file is a readable .json file
    - A graph is named
    - The target host carries a scheme
    - Failed records are only reloaded in incremental mode
    """

    file: str
    graph: str = settings.TARGET_GRAPH
    host: str = settings.TARGET_HOST
    incremental_mode: bool = False
    reload_failure: bool = False
    work_dir: Optional[str] = settings.WORK_DIR
    batch_size: int = Field(settings.LOAD_BATCH_SIZE, ge=1)
    num_workers: int = Field(settings.LOAD_WORKERS, ge=1)

    @validator("file")
    def check_struct_file(cls, v):
        """The struct description file must exist, end with .json and be readable"""
        if not v or not v.strip():
            raise ValueError("The struct description file must be specified")
        if not v.endswith(JSON_SUFFIX):
            raise ValueError(
                f"The struct description file name must be end with {JSON_SUFFIX}"
            )
        path = Path(v)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise ValueError(f"Struct file must be readable: '{path.absolute()}'")
        return v

    @validator("reload_failure")
    def check_reload_failure(cls, v, values):
        if v and not values.get("incremental_mode"):
            raise ValueError("Option reload_failure is only allowed to set in incremental mode")
        return v

    @validator("graph")
    def check_graph(cls, v):
        if not v or not v.strip():
            raise ValueError("Must specified a graph")
        return v.strip()

    @validator("host")
    def normalize_host(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Must specified a host")
        if "://" not in v:
            v = HTTP_PREFIX + v
        return v

    @classmethod
    def parse(cls, **kwargs) -> "LoadOptions":
        """
        Validate raw option values.

        Raises:
            ConfigInvalidError: If any option is missing or malformed
        """
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigInvalidError(
                "Invalid load options",
                context={"errors": [error["msg"] for error in e.errors()]},
                original_exception=e
            )

    def checkpoint_dir(self) -> Path:
        """Directory holding the checkpoints and failure logs of this job"""
        descriptor = Path(self.file)
        root = Path(self.work_dir) if self.work_dir else descriptor.parent
        return root / descriptor.stem
