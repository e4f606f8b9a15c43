"""
Input validation schemas using Pydantic for the plan API.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional

DATE_PATTERN = r'^\d{4}-\d{2}-\d{2}$'


class AssignDaysInput(BaseModel):
    """Assign one recipe to several days of the current week."""
    recipe_id: str = Field(..., min_length=1)
    indices: List[int] = Field(..., min_length=1)

    @field_validator('indices')
    @classmethod
    def validate_indices(cls, v):
        """Day indices are 0 (Monday) .. 6 (Sunday)."""
        for i in v:
            if not 0 <= i <= 6:
                raise ValueError(f'Day index out of range: {i}')
        return v


class ClearDayInput(BaseModel):
    index: int = Field(..., ge=0, le=6)


class AssignDateInput(BaseModel):
    """Month view assignment of one recipe to one or more dates."""
    recipe_id: str = Field(..., min_length=1)
    dates: List[str] = Field(..., min_length=1)

    @field_validator('dates')
    @classmethod
    def strip_dates(cls, v):
        return [d.strip() for d in v]


class CopyWeekInput(BaseModel):
    source: str = Field(..., pattern=DATE_PATTERN)
    dest: Optional[str] = Field(None, pattern=DATE_PATTERN)


class SlotInput(BaseModel):
    """Drag & drop slot: either a day index (optionally in a given week) or a date."""
    index: Optional[int] = Field(None, ge=0, le=6)
    week_start: Optional[str] = Field(None, pattern=DATE_PATTERN)
    date: Optional[str] = None

    @model_validator(mode='after')
    def exactly_one_address(self):
        if (self.index is None) == (self.date is None):
            raise ValueError('Slot needs exactly one of "index" or "date"')
        if self.date is not None and self.week_start is not None:
            raise ValueError('"week_start" only applies to index slots')
        return self


class MoveInput(BaseModel):
    source: SlotInput
    dest: SlotInput


class CategoryInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    emoji: Optional[str] = Field(None, max_length=8)

    @field_validator('name')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if not v.strip():
            raise ValueError('Category name cannot be empty')
        return v.strip()


class ImportPayload(BaseModel):
    """Backup document produced by the export endpoint."""
    version: int = 1
    recipes: List[dict]
    weekPlans: List[dict]
    knownIngredients: List[dict] = Field(default_factory=list)
    customCategories: List[dict] = Field(default_factory=list)
