"""Lookup schemas for filter pickers."""

from uuid import UUID

from pydantic import BaseModel


class RegionOut(BaseModel):
    code: str
    name: str
    zone: str


class ClinicOut(BaseModel):
    id: UUID
    name: str
    state: str | None


class TumourTypeOut(BaseModel):
    id: UUID
    name: str
