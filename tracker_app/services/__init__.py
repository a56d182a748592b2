"""Business services. Routes build them per request on top of ``db.session``."""

from .persons import PersonService
from .tasks import TaskService

__all__ = ["PersonService", "TaskService"]
