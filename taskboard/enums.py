import enum


class TaskStatus(str, enum.Enum):
    backlog = "backlog"
    todo = "todo"
    in_progress = "in-progress"
    review = "review"
    done = "done"


class Priority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class UserRole(str, enum.Enum):
    admin = "admin"
    member = "member"


# Kanban column order, left to right
BOARD_COLUMNS: tuple[TaskStatus, ...] = (
    TaskStatus.backlog,
    TaskStatus.todo,
    TaskStatus.in_progress,
    TaskStatus.review,
    TaskStatus.done,
)
