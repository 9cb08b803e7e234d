from pydantic import BaseModel


class ReportOut(BaseModel):
    total_capacity: int
    total_remaining: int
    total_reserved: int
    total_reservations: int

    class Config:
        from_attributes = True


class TaskQueuedOut(BaseModel):
    task_id: str | None
    status: str
