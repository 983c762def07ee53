from .collection import EntityCollection
from .models import Result

__all__ = ["EntityCollection", "Result"]
