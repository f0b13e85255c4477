"""
Progress models recorded while loading.

Models:
    base: Shared enums (ElementCategory, JobState)
    progress: InputItemProgress, InputProgress and ProgressSnapshot

Checkpoint Shape:
    A snapshot serialises to one object per element category, each mapping a
    source key to its progress:

    {
      "vertex": {
        "<source key>": {
          "loadedItems": [{"offset": 100, "loaded": true}],
          "loadingItem": {"offset": 20, "loaded": false}
        }
      },
      "edge": {}
    }

Usage:
    from models.base import ElementCategory
    from models.progress import ProgressSnapshot

Example:
    snapshot = ProgressSnapshot()
    progress = snapshot.get_or_create(ElementCategory.VERTEX, key)
    progress.add_loading_item(InputItemProgress(name="part-0", total=100))
    progress.loading_item.increase(100)
    progress.mark_loaded(False)
"""

__all__ = [
    "ElementCategory",
    "JobState",
    "InputItemProgress",
    "InputProgress",
    "ProgressSnapshot",
]
