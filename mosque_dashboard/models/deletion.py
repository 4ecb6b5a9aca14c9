from sqlmodel import SQLModel, Field

from mosque_dashboard.models.view import Notice


class DeletionRequest(SQLModel):
    reason: str


class BulkDeletionRequest(SQLModel):
    mosque_ids: list[str] = Field(min_length=1)
    reason: str


class DeletionOutcome(SQLModel):
    mosque_id: str
    deleted: bool
    error: str | None = None


class BulkDeletionResult(SQLModel):
    outcomes: list[DeletionOutcome]
    notice: Notice

    @property
    def deleted_ids(self) -> list[str]:
        return [o.mosque_id for o in self.outcomes if o.deleted]

    @property
    def failed(self) -> dict[str, str]:
        return {o.mosque_id: o.error or "" for o in self.outcomes if not o.deleted}
