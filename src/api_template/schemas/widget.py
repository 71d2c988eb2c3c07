"""Widget request and response schemas."""

from pydantic import BaseModel, Field


class WidgetCreate(BaseModel):
    """Payload for POST /api/widgets."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    quantity: int = Field(0, ge=0)


class WidgetResponse(BaseModel):
    """Single widget."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    description: str | None
    quantity: int


class WidgetListResponse(BaseModel):
    """All widgets, in creation order."""

    items: list[WidgetResponse]
    total: int
