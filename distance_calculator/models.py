from __future__ import annotations

from pydantic import BaseModel, Field


class CalculationResponse(BaseModel):
    restaurant_ids: list[str] = Field(default_factory=list)


class PreprocessResponse(BaseModel):
    status: str
    restaurants: int
