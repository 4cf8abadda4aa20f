from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import Priority, TaskStatus, UserRole


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=280)
    description: str | None = None
    channel: str | None = None
    status: TaskStatus = TaskStatus.todo
    priority: Priority = Priority.medium
    assignee_id: str | None = None
    due_date: datetime | None = None
    labels: list[str] | None = None
    estimated_hours: float | None = Field(None, ge=0)
    actual_hours: float | None = Field(None, ge=0)


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=280)
    description: str | None = None
    channel: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    assignee_id: str | None = None
    due_date: datetime | None = None
    labels: list[str] | None = None
    estimated_hours: float | None = Field(None, ge=0)
    actual_hours: float | None = Field(None, ge=0)


class TaskMove(BaseModel):
    status: TaskStatus


class TaskOut(TaskBase):
    # Serialize enums as their values (e.g., "in-progress")
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
    id: int
    created_at: datetime
    updated_at: datetime
    history: list[dict] | None = None


class BoardColumn(BaseModel):
    id: str
    title: str
    tasks: list[TaskOut]


class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., max_length=255)
    role: str | None = None
    user_role: UserRole = UserRole.member
    avatar: str | None = None


class MemberUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    email: str | None = Field(None, max_length=255)
    role: str | None = None
    user_role: UserRole | None = None
    avatar: str | None = None


class MemberOut(MemberCreate):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
    id: str


class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    color: str = "#6b7280"


class LabelOut(LabelCreate):
    model_config = ConfigDict(from_attributes=True)
    id: str


class ReportCreate(BaseModel):
    author_id: str
    report_date: date
    yesterday_work: str
    today_plan: str
    blockers: str | None = None


class ReportUpdate(BaseModel):
    yesterday_work: str | None = None
    today_plan: str | None = None
    blockers: str | None = None


class ReportOut(ReportCreate):
    model_config = ConfigDict(from_attributes=True)
    id: str
    created_at: datetime
    updated_at: datetime


class ParsedTaskOut(BaseModel):
    """What the quick-add box would create; nothing is stored."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    title: str
    priority: Priority | None = None
    assignee: str | None = None
    assignee_name: str | None = None
    due_date: datetime | None = None
    estimated_hours: float | None = None
    labels: list[str] | None = None
    status: TaskStatus | None = None
