"""
Input validation schemas using Pydantic for the rotation API.

These only check shape and ranges that do not depend on stored data; the
rotation core re-validates coordinates against the template.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import date as _date

from kitchen.domain.SuggestedSwap import SuggestedSwap
from kitchen.utilities.constants import COURSES, MEAL_ALIASES, MEALS


def _meal(v: str) -> str:
    v = (v or '').strip().lower()
    v = MEAL_ALIASES.get(v, v)
    if v not in MEALS:
        raise ValueError(f"meal must be one of {', '.join(MEALS)}")
    return v


class SlotKeyInput(BaseModel):
    """Coordinates of one rotation slot."""
    week_nr: int = Field(..., ge=1)
    day_of_week: int = Field(..., ge=0, le=6)
    meal: str
    course: str
    location: str = Field(..., min_length=1)

    @field_validator('meal')
    @classmethod
    def normalize_meal(cls, v):
        return _meal(v)

    @field_validator('course')
    @classmethod
    def validate_course(cls, v):
        if v not in COURSES:
            raise ValueError(f"course must be one of {', '.join(COURSES)}")
        return v

    @field_validator('location')
    @classmethod
    def strip_location(cls, v):
        return v.strip()


class SlotUpdateInput(SlotKeyInput):
    """Direct slot edit; recipe_id None empties the slot."""
    recipe_id: Optional[int] = None
    portions: int = Field(1, ge=1)


class ClearSlotsInput(BaseModel):
    scope: Literal['all', 'week', 'day']
    week_nr: Optional[int] = Field(None, ge=1)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)


class TemplateInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    week_count: int = Field(..., ge=1, le=52)
    locations: List[str] = Field(..., min_length=1)

    @field_validator('locations')
    @classmethod
    def validate_locations(cls, v):
        """Drop blanks and duplicates, keep at least one."""
        cleaned = sorted({loc.strip() for loc in v if loc and loc.strip()})
        if not cleaned:
            raise ValueError('at least one location is required')
        return cleaned


class LocationInput(BaseModel):
    location: str = Field(..., min_length=1, max_length=50)

    @field_validator('location')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip()


class SwapInput(BaseModel):
    """A swap as proposed by the optimizer or an external suggestion source."""
    week_nr: int = Field(..., ge=1)
    day_of_week: int = Field(..., ge=0, le=6)
    meal: str
    course: str
    current_recipe_id: Optional[int] = None
    suggested_recipe_id: int
    reason: str = ''
    location: Optional[str] = None
    current_recipe_name: Optional[str] = None
    suggested_recipe_name: Optional[str] = None

    @field_validator('meal')
    @classmethod
    def normalize_meal(cls, v):
        return _meal(v)

    def to_swap(self) -> SuggestedSwap:
        return SuggestedSwap(**self.model_dump())


class SwapBatchInput(BaseModel):
    swaps: List[SwapInput] = Field(..., min_length=1)


class OptimizeRequest(BaseModel):
    """Focus flags; `suggestions` switches the optimizer to validation-only mode."""
    variety: bool = True
    seasonality: bool = False
    cost: bool = False
    suggestions: Optional[List[SwapInput]] = None


class ScaleRequest(BaseModel):
    target_portions: float = Field(..., gt=0)


class ScalePreviewRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    quantity: float = Field(..., ge=0)
    unit: str = Field('', max_length=20)
    from_portions: float = Field(..., gt=0)
    to_portions: float = Field(..., gt=0)

    @field_validator('name', 'unit')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v


class SubRecipeLinkInput(BaseModel):
    child_recipe_id: int
    portion_multiplier: float = Field(1.0, gt=0)


class GuestCountInput(BaseModel):
    date: _date
    meal: str
    location: str
    guests: int = Field(..., ge=0)

    @field_validator('meal')
    @classmethod
    def normalize_meal(cls, v):
        return _meal(v)


class AutoFillInput(BaseModel):
    """Fill empty slots from the recipe pools; `overwrite` refills filled ones too."""
    overwrite: bool = False


class ShoppingListRequest(BaseModel):
    year: int = Field(..., ge=2000, le=2100)
    week: int = Field(..., ge=1, le=53)
    guest_counts: List[GuestCountInput] = Field(default_factory=list)


__all__ = [
    'SlotKeyInput', 'SlotUpdateInput', 'ClearSlotsInput', 'TemplateInput', 'LocationInput',
    'SwapInput', 'SwapBatchInput', 'OptimizeRequest', 'ScaleRequest', 'ScalePreviewRequest',
    'SubRecipeLinkInput', 'GuestCountInput', 'ShoppingListRequest', 'AutoFillInput',
]
