"""Account schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class AccountUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)


class AccountResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}
