"""Pydantic request schemas."""

from typing import Any, List, Literal, Optional
from pydantic import BaseModel, Field


class StoreFilterModel(BaseModel):
    column: str
    operator: Literal["eq", "neq", "gte", "lte"] = "eq"
    value: Any


class LoadDatasetRequest(BaseModel):
    filters: List[StoreFilterModel] = Field(default_factory=list)
    search: Optional[str] = None
    page: int = 1
    page_size: Optional[int] = None


class DistinctValuesRequest(BaseModel):
    column: str
    filters: List[StoreFilterModel] = Field(default_factory=list)


class FilterSelection(BaseModel):
    column: str
    type: Literal["range", "category", "date"]
    range: Optional[List[Any]] = None
    values: Optional[List[Any]] = None
    value: Optional[Any] = None
    label: Optional[str] = None
    exclude: bool = False


class ApplySelectionsRequest(BaseModel):
    selections: List[FilterSelection]
