from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from uuid import UUID, uuid4

class TokenCounter(SQLModel, table=True):
    __tablename__ = "token_counters"
    __table_args__ = (
        UniqueConstraint("branch_id", "department", "date", name="uq_token_counters_scope"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str
    department: str
    date: str # YYYY-MM-DD
    last_token: int = Field(default=0)
