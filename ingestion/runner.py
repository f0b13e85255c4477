# ============================================================================
# File: ingestion/runner.py
# Description: Resumable loader orchestrator
# ============================================================================
"""
Load Runner - Drives input sources through a sink with resumable progress.

This module provides:
- Vertex sources loaded before edge sources
- One worker thread per source, owning that source's progress entry
- Resume from the progress of the latest checkpoint
- Partial failure support (failed batches go to the source's failure log)
- Optional reload of the records the previous run logged as failed
- Cooperative stop between batches
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List
import logging

from ingestion.base import InputSource
from ingestion.context import JobContext
from models.base import ElementCategory
from models.progress import InputItemProgress, InputProgress
from schemas.struct import InputStruct

logger = logging.getLogger(__name__)

Sink = Callable[[InputStruct, List[Any]], None]


class LoadRunner:
    """
    Loading orchestrator

    Responsibilities:
    - Skip items already loaded by a previous run
    - Resume the item that was in flight when the previous run ended
    - Record progress into the context's new snapshot
    - Keep a failing source from aborting its siblings
    - Close the context (and write the checkpoint) when done
    """

    def __init__(self, context: JobContext, sink: Sink):
        self.context = context
        self.sink = sink
        self.batch_size = context.options.batch_size

    def run(self, sources: List[InputSource]) -> Dict[str, int]:
        """
        Load every source, then close the context.

        Returns:
            Records consumed per element category, including those loaded
            by the runs this one resumed from
        """
        try:
            for category in ElementCategory:
                group = [s for s in sources if s.category is category]
                if not group:
                    continue
                if self.context.stopped:
                    logger.info(f"Stopped before loading {category.value} sources")
                    break
                self.context.loading_category = category
                self._load_category(category, group)

            self._carry_over_unvisited(sources)
            totals = {
                category.value: self.context.new_progress.total_consumed(category)
                for category in ElementCategory
            }
            logger.info(
                f"Load run {self.context.timestamp} finished: "
                f"vertices={totals['vertex']}, edges={totals['edge']}"
            )
            return totals
        finally:
            self.context.close()

    def _load_category(self, category: ElementCategory, sources: List[InputSource]) -> None:
        logger.info(f"Loading {len(sources)} {category.value} sources")
        workers = min(self.context.options.num_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"load-{category.value}") as executor:
            futures = {executor.submit(self.load_source, source): source for source in sources}
            for future in as_completed(futures):
                source = futures[future]
                try:
                    future.result()
                except Exception:
                    logger.exception(f"Loading failed for source '{source}'")

    def load_source(self, source: InputSource) -> None:
        """Load one source; runs on the worker thread owning its progress"""
        struct = source.struct
        key = struct.unique_key_for_file()
        old = self.context.old_progress.get(struct.category, key)
        names = source.list_items()
        progress = self.context.new_progress.get_or_create(struct.category, key)
        resumed = old.loading_item if old is not None else None
        if resumed is not None and resumed.name not in names:
            resumed = None

        # Items loaded by a previous run are recorded before the first stop check
        pending: List[str] = []
        for name in names:
            loaded = old.match_loaded_item(name) if old is not None else None
            if loaded is not None:
                logger.info(f"Skipping '{name}' of '{source}', loaded by a previous run")
                progress.add_loaded_item(loaded.model_copy())
            elif resumed is not None and name == resumed.name:
                # Finish the in-flight item before starting new ones
                pending.insert(0, name)
            else:
                pending.append(name)

        try:
            self._reload_failures(source)
            for name in pending:
                if self.context.stopped:
                    return
                total = source.item_size(name)
                offset = 0
                if resumed is not None and name == resumed.name:
                    if total is not None and resumed.offset > total:
                        logger.warning(
                            f"'{name}' shrank below its checkpoint offset {resumed.offset}, reloading from start"
                        )
                    else:
                        offset = resumed.offset
                        logger.info(f"Resuming '{name}' of '{source}' at offset {offset}")

                item = progress.add_loading_item(InputItemProgress(name=name, offset=offset, total=total))
                if not self._load_item(source, name, item):
                    return
                # An exhausted reader completes the item even if its size was unknown
                if not self.context.new_progress.mark_loaded(struct, False):
                    self.context.new_progress.mark_loaded(struct, True)
        finally:
            if (
                resumed is not None
                and progress.loading_item is None
                and progress.match_loaded_item(resumed.name) is None
            ):
                logger.info(f"Keeping offset {resumed.offset} of unreached '{resumed.name}'")
                progress.add_loading_item(resumed.model_copy())

    def _reload_failures(self, source: InputSource) -> None:
        """Submit the records the previous run logged as failed for ``source``"""
        records = self.context.previous_failures(source.struct)
        if not records:
            return
        logger.info(f"Reloading {len(records)} failed records of '{source}'")
        for start in range(0, len(records), self.batch_size):
            self._send(source.struct, records[start:start + self.batch_size])

    def _load_item(self, source: InputSource, name: str, item: InputItemProgress) -> bool:
        batch: List[Any] = []
        for record in source.read(name, item.offset):
            batch.append(record)
            if len(batch) >= self.batch_size:
                self._submit(source.struct, item, batch)
                batch = []
                if self.context.stopped:
                    logger.info(f"Stopped loading '{name}' at offset {item.offset}")
                    return False
        if batch:
            self._submit(source.struct, item, batch)
        return True

    def _submit(self, struct: InputStruct, item: InputItemProgress, batch: List[Any]) -> None:
        self._send(struct, batch)
        item.increase(len(batch))

    def _send(self, struct: InputStruct, batch: List[Any]) -> None:
        try:
            self.sink(struct, batch)
        except Exception as e:
            failure_logger = self.context.failure_logger(struct)
            for record in batch:
                failure_logger.write(record, e)
            logger.warning(f"Batch of {len(batch)} records failed for '{struct}': {e}")

    def _carry_over_unvisited(self, sources: List[InputSource]) -> None:
        """Keep the old progress of sources this run never started"""
        for source in sources:
            struct = source.struct
            key = struct.unique_key_for_file()
            if self.context.new_progress.get(struct.category, key) is not None:
                continue
            old = self.context.old_progress.get(struct.category, key)
            if old is not None:
                self.context.new_progress.put(struct.category, key, InputProgress.model_validate(old.to_dict()))
