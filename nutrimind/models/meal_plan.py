"""Pydantic v2 models for meal plans and meal-plan generation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealPlanStatus(str, Enum):
    PENDING = "Pending"
    GENERATING = "Generating"
    IN_PROGRESS = "InProgress"
    GENERATED = "Generated"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    STARTED = "Started"
    QUEUED = "Queued"


class NutritionalInfo(BaseModel):
    """Macro totals for a recipe, meal or day."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float | None = None
    sugar: float | None = None


class Ingredient(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    quantity: str = ""
    notes: str | None = None


class RecipeSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    title: str
    description: str | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    nutrition: NutritionalInfo | None = None
    tags: list[str] = Field(default_factory=list)


class MealEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    mealType: str
    recipe: RecipeSummary
    scheduledTime: str | None = None


class DailyMealPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    date: str
    meals: list[MealEntry] = Field(default_factory=list)
    totalNutrition: NutritionalInfo | None = None


class MealPlan(BaseModel):
    """A generated weekly meal plan.

    The backend adds fields freely, so unknown keys are kept rather than
    rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    weekIdentifier: str | None = None
    status: str | None = None
    days: list[DailyMealPlan] = Field(default_factory=list)

    @property
    def total_meals(self) -> int:
        return sum(len(day.meals) for day in self.days)


class GenerateMealPlanRequest(BaseModel):
    weekIdentifier: str
    regenerateExisting: bool = False
    calorieTarget: int | None = None
    proteinTarget: int | None = None


class MealPlanGenerationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    orchestrationId: str
    status: str = MealPlanStatus.STARTED.value
    message: str | None = None
