"""
Resumable loading of vertices and edges from input sources.

This package contains the components that make a loading job restartable:

Modules:
    base: Abstract base class for input sources
    checkpoint: Checkpoint persistence and discovery (CheckpointStore)
    client: Process-wide handle on the target store client
    context: Job context tying resumed progress, new progress, failure
        logs and shutdown together (JobContext)
    failure: Per-source failure logs
    runner: Orchestrator running one worker thread per source
    storage: File system abstraction used by the checkpoint store

Subpackages:
    extractors: Input sources (line-oriented text files)

Architecture:
    A run proceeds in three steps:

    1. Start - JobContext loads the latest checkpoint (incremental mode)
    2. Load - workers skip loaded items, resume the in-flight item and
       record progress into the new snapshot
    3. Close - failure logs are closed and the new snapshot is written
       as the next checkpoint

Usage:
    from ingestion.context import JobContext
    from ingestion.extractors.text_extractor import TextFileSource
    from ingestion.runner import LoadRunner

Example:
    context = JobContext(options)
    runner = LoadRunner(context, sink=submit_batch)
    totals = runner.run([TextFileSource(struct) for struct in structs])

Error Handling:
    A corrupt checkpoint aborts startup with CheckpointCorruptError.
    Failures of one source stay in that source's failure log. Only the
    final checkpoint write is allowed to fail without failing the run.
"""

__all__ = [
    "InputSource",
    "CheckpointStore",
    "ClientHolder",
    "JobContext",
    "FailureLogger",
    "LoadRunner",
    "TextFileSource",
]
