"""
Pytest configuration and fixtures
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from core.clock import FixedClock
from ingestion.checkpoint import CheckpointStore
from ingestion.storage import InMemoryFileSystem
from models.base import ElementCategory
from schemas.options import LoadOptions
from schemas.struct import InputStruct


@pytest.fixture
def struct_file(tmp_path):
    """Readable struct description file"""
    path = tmp_path / "struct.json"
    path.write_text('{"vertices": [], "edges": []}')
    return path


@pytest.fixture
def work_dir(tmp_path):
    return tmp_path / "work"


@pytest.fixture
def options(struct_file, work_dir):
    """Non-incremental options rooted in the test's temp directory"""
    return LoadOptions.parse(
        file=str(struct_file),
        graph="hugegraph",
        host="127.0.0.1:8080",
        work_dir=str(work_dir),
        batch_size=2,
        num_workers=2,
    )


@pytest.fixture
def incremental_options(options):
    return options.model_copy(update={"incremental_mode": True})


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_store():
    return CheckpointStore(InMemoryFileSystem())


@pytest.fixture
def client_holder():
    return Mock()


@pytest.fixture
def vertex_struct():
    return InputStruct(
        category=ElementCategory.VERTEX,
        label="person",
        path="/data/person.txt",
        config={"charset": "utf-8"},
    )


@pytest.fixture
def edge_struct():
    return InputStruct(
        category=ElementCategory.EDGE,
        label="knows",
        path="/data/knows.txt",
    )
