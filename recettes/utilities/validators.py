"""
Input validation schemas using Pydantic for better data integrity.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from recettes.domain.Plan import coerce_servings


class PlanItemDocument(BaseModel):
    """One stored plan entry. Accepts the short keys written by older clients (id, servings, options)."""
    model_config = ConfigDict(extra="ignore")

    recipe_id: str = Field(..., min_length=1, validation_alias=AliasChoices("recipe_id", "id"))
    servings_requested: Optional[Union[int, float]] = Field(
        None, validation_alias=AliasChoices("servings_requested", "servings"))
    enabled_optional_groups: Dict[str, StrictBool] = Field(
        default_factory=dict, validation_alias=AliasChoices("enabled_optional_groups", "options"))

    @field_validator('servings_requested', mode='before')
    @classmethod
    def clamp_servings(cls, v):
        """Apply the same clamping as interactive servings edits."""
        if v is None:
            return None
        return coerce_servings(v)


class PlanDocument(BaseModel):
    """Schema for a whole {items: [...]} plan document."""
    model_config = ConfigDict(extra="ignore")

    items: List[PlanItemDocument]

    @model_validator(mode='after')
    def unique_recipes(self):
        """Reject documents that reference the same recipe twice."""
        seen = set()
        for item in self.items:
            if item.recipe_id in seen:
                raise ValueError(f"Duplicate plan entry for recipe '{item.recipe_id}'")
            seen.add(item.recipe_id)
        return self


class AddPlanItemInput(BaseModel):
    """Schema for adding a recipe to the plan."""
    recipe_id: str = Field(..., min_length=1)

    @field_validator('recipe_id')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip()


class ServingsInput(BaseModel):
    """Raw servings value as typed by the user; clamping happens in the plan store."""
    servings: Any = None


class OptionToggleInput(BaseModel):
    """Schema for enabling or disabling an optional ingredient group."""
    enabled: bool


class IdentityInput(BaseModel):
    """Identity-change notification (None means signed out)."""
    identity: Optional[str] = None

    @field_validator('identity')
    @classmethod
    def blank_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v
