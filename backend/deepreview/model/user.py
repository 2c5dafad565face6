from typing import Literal
from pydantic import BaseModel, Field
from datetime import datetime
import uuid


Role = Literal["student", "instructor"]


class User(BaseModel):
    """Public view of a user row (never carries password material)."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    full_name: str
    role: Role = "student"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = {
        "str_strip_whitespace": True,
    }

    @property
    def is_instructor(self) -> bool:
        return self.role == "instructor"
