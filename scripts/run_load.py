"""
Script to load the sources of a struct description file into the target store
"""

import json
import sys
import os
import logging
import signal

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import LoadException
from core.logging import setup_logging
from ingestion.client import client_holder
from ingestion.context import JobContext
from ingestion.extractors.text_extractor import TextFileSource
from ingestion.runner import LoadRunner
from models.base import ElementCategory
from schemas.options import LoadOptions
from schemas.struct import InputStruct

logger = logging.getLogger(__name__)

BATCH_PATHS = {
    ElementCategory.VERTEX: "vertices",
    ElementCategory.EDGE: "edges",
}


def read_structs(path):
    """Read {"vertices": [...], "edges": [...]} struct descriptions"""
    with open(path, "r", encoding="utf-8") as f:
        description = json.load(f)
    structs = []
    for category in ElementCategory:
        for entry in description.get(BATCH_PATHS[category], []):
            structs.append(InputStruct(category=category, **entry))
    return structs


def make_sink(options):
    """Post each batch of JSON-lines records to the graph batch API"""

    def submit(struct, batch):
        client = client_holder.get(options)
        elements = [json.loads(line) for line in batch if line.strip()]
        response = client.post(
            f"/graphs/{options.graph}/graph/{BATCH_PATHS[struct.category]}/batch",
            json=elements,
        )
        response.raise_for_status()

    return submit


def run_load(struct_file, incremental_mode, reload_failure=False):
    options = LoadOptions.parse(
        file=struct_file,
        graph=settings.TARGET_GRAPH,
        host=settings.TARGET_HOST,
        incremental_mode=incremental_mode,
        reload_failure=reload_failure,
    )
    context = JobContext(options)
    signal.signal(signal.SIGINT, lambda *_: context.request_stop())
    signal.signal(signal.SIGTERM, lambda *_: context.request_stop())

    sources = [TextFileSource(struct) for struct in read_structs(options.file)]
    if not sources:
        logger.warning("No input sources configured. Skipping load.")
        context.close()
        return

    totals = LoadRunner(context, make_sink(options)).run(sources)
    logger.info(f"Loaded vertices={totals['vertex']}, edges={totals['edge']}")


if __name__ == "__main__":
    setup_logging()
    if len(sys.argv) < 2:
        print("usage: run_load.py <struct.json> [--incremental [--reload-failure]]")
        sys.exit(1)
    try:
        flags = sys.argv[2:]
        run_load(sys.argv[1], "--incremental" in flags, "--reload-failure" in flags)
    except LoadException as e:
        logger.error(f"Load failed: {e}")
        sys.exit(1)
