"""Pydantic models for the HTTP API."""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


class CustomFoodCreate(BaseModel):
    """Payload for creating a custom food."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    serving: str | None = None
    quantity: str | None = None
    calories: float = Field(default=0, ge=0)
    carbohydrates: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    fats: float = Field(default=0, ge=0)


class FoodImportRequest(BaseModel):
    """Spreadsheet upload encoded as base64."""

    filename: str
    content_base64: str


class DiaryEntryCreate(BaseModel):
    """Payload for logging a catalog food."""

    food_id: str
    servings: float = Field(default=1, ge=1)
