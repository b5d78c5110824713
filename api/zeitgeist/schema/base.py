"""Shared schema base classes for domain records and API responses."""

from pydantic import BaseModel


class ORMModel(BaseModel):
    """Base model that supports orm_mode for SQLAlchemy."""

    model_config = {"from_attributes": True}


class CountItem(BaseModel):
    """Named counter used by histograms and top-N lists."""
    name: str
    count: int
