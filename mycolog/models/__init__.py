from mycolog.models.user import User
from mycolog.models.batch import Batch, Unit, new_batch_id
from mycolog.models.settings import UserConfig, StatusKind
from mycolog.models.notebook import Recipe, Note

__all__ = [
    "User",
    "Batch",
    "Unit",
    "new_batch_id",
    "UserConfig",
    "StatusKind",
    "Recipe",
    "Note",
]
