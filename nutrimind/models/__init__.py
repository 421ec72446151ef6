"""Re-export all NutriMind data models for convenient access."""

from nutrimind.models.auth import (
    AuthResponse,
    Credential,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserDto,
)
from nutrimind.models.meal_plan import (
    DailyMealPlan,
    GenerateMealPlanRequest,
    Ingredient,
    MealEntry,
    MealPlan,
    MealPlanGenerationResponse,
    MealPlanStatus,
    NutritionalInfo,
    RecipeSummary,
)

__all__ = [
    # Auth models
    "AuthResponse",
    "Credential",
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "UserDto",
    # Meal plan models
    "DailyMealPlan",
    "GenerateMealPlanRequest",
    "Ingredient",
    "MealEntry",
    "MealPlan",
    "MealPlanGenerationResponse",
    "MealPlanStatus",
    "NutritionalInfo",
    "RecipeSummary",
]
