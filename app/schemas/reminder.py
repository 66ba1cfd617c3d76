from pydantic import BaseModel


class ReminderRunResults(BaseModel):
    sent: int
    failed: int
    skipped: int
    errors: list[str] = []


class ReminderRunRead(BaseModel):
    message: str
    results: ReminderRunResults
