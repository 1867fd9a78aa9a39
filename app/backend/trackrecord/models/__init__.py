"""ORM model package."""

from trackrecord.models.entities import Customer, Project, Task, User, WorkPacket

__all__ = [
    "Customer",
    "Project",
    "Task",
    "User",
    "WorkPacket",
]
