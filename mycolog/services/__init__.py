from mycolog.services.batches import BatchService
from mycolog.services.stats import StatsService, DateFilter, TimeRange
from mycolog.services.storage import ImageStore, StorageError
from mycolog.services.assistant import AssistantClient, AssistantError

__all__ = [
    "BatchService",
    "StatsService",
    "DateFilter",
    "TimeRange",
    "ImageStore",
    "StorageError",
    "AssistantClient",
    "AssistantError",
]
