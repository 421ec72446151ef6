"""Meal-plan operations against the NutriMind API.

All functions accept a :class:`~nutrimind.api.client.NutriMindClient` as
their first argument and return parsed Pydantic models.
"""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError

from ..models.meal_plan import GenerateMealPlanRequest, MealPlan, MealPlanGenerationResponse
from .client import NutriMindClient, read_payload


async def generate_meal_plan(
    client: NutriMindClient, request: GenerateMealPlanRequest
) -> MealPlanGenerationResponse:
    """Start generating a plan for ``request.weekIdentifier``.

    Generation is asynchronous on the server; poll
    :func:`get_generation_status` with the returned ``orchestrationId``.
    """
    resp = await client.post("/mealplans", json=request.model_dump(exclude_none=True))
    return MealPlanGenerationResponse.model_validate(read_payload(resp))


async def get_meal_plan(client: NutriMindClient, plan_id: str) -> MealPlan:
    resp = await client.get(f"/mealplans/{plan_id}")
    return MealPlan.model_validate(read_payload(resp))


async def get_meal_plans_for_week(client: NutriMindClient, week: str) -> list[MealPlan]:
    """Fetch every plan for an ISO week such as ``2025-W09``.

    The server returns either a list or a single plan; plans that fail to
    parse are logged and skipped.
    """
    resp = await client.get("/mealplans", params={"week": week})
    payload = read_payload(resp)
    if payload is None:
        return []
    raw_plans = payload if isinstance(payload, list) else [payload]

    plans: list[MealPlan] = []
    for raw in raw_plans:
        try:
            plans.append(MealPlan.model_validate(raw))
        except ValidationError as exc:
            plan_id = raw.get("id", "<unknown>") if isinstance(raw, dict) else "<unknown>"
            logger.warning(f"Failed to parse meal plan {plan_id}: {exc}")
    return plans


async def get_generation_status(
    client: NutriMindClient, orchestration_id: str
) -> MealPlanGenerationResponse:
    resp = await client.get(f"/mealplans/status/{orchestration_id}")
    payload = read_payload(resp)
    if isinstance(payload, dict) and "orchestrationId" not in payload:
        payload = {**payload, "orchestrationId": orchestration_id}
    return MealPlanGenerationResponse.model_validate(payload)
