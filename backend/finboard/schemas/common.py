"""Schemas shared by several resources."""

from pydantic import BaseModel, Field


class BulkDeleteRequest(BaseModel):
    ids: list[int] = Field(min_length=1)


class BulkDeleteResult(BaseModel):
    deleted_ids: list[int]
