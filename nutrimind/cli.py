"""Command-line interface for the NutriMind API."""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .api import auth as auth_api
from .api import meal_plans as meal_plans_api
from .api.client import NutriMindClient
from .errors import ApiError, AuthExpired, AuthRefreshFailed
from .models.meal_plan import GenerateMealPlanRequest, MealPlan

app = typer.Typer(help="NutriMind meal planning client")
console = Console()

client_options: dict = {}


def get_client() -> NutriMindClient:
    return NutriMindClient(**client_options)


def configure_logging(debug: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING", format="{time} {level} {message}")


def run(coro):
    """Run *coro* and turn auth/API failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except AuthRefreshFailed as exc:
        rprint(f"[bold red]Session expired ({exc.reason}). Please log in again.[/bold red]")
        raise typer.Exit(code=1)
    except AuthExpired:
        rprint("[bold red]The server rejected the refreshed token. Please log in again.[/bold red]")
        raise typer.Exit(code=1)
    except ApiError as exc:
        rprint(f"[bold red]API error {exc.status_code}:[/bold red] {exc.message}")
        raise typer.Exit(code=1)


@app.callback()
def main(
    api_url: Optional[str] = typer.Option(None, "--api-url", "-u", help="Base URL of the NutriMind API"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    configure_logging(debug)
    client_options.clear()
    if api_url:
        client_options["base_url"] = api_url


@app.command()
def login(
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
):
    """Log in and save the credential for later commands."""

    async def _login():
        async with get_client() as client:
            return await auth_api.login(client, email, password)

    auth = run(_login())
    name = auth.user.display_name if auth.user else email
    rprint(f"[bold green]Logged in as {name}[/bold green]")


@app.command()
def logout():
    """Forget the saved credential."""

    async def _logout():
        async with get_client() as client:
            auth_api.logout(client)

    run(_logout())
    rprint("[bold green]Logged out.[/bold green]")


@app.command()
def status():
    """Show whether a credential is saved and when it expires."""

    async def _status():
        async with get_client() as client:
            return client.base_url, client.store.current()

    base_url, credential = run(_status())
    rprint(f"API: [cyan]{base_url}[/cyan]")
    if credential is None:
        rprint("[bold yellow]Not logged in.[/bold yellow]")
        return
    expiry = credential.expires_at.isoformat() if credential.expires_at else "unknown"
    rprint(f"[bold green]Logged in[/bold green], access token expires: {expiry}")


@app.command()
def whoami():
    """Show the account the saved credential belongs to."""

    async def _whoami():
        async with get_client() as client:
            return await auth_api.get_current_user(client)

    user = run(_whoami())
    rprint(
        Panel.fit(
            f"{user.display_name}\n{user.email}\nProfile: {'yes' if user.hasProfile else 'no'}",
            title="[bold green]Current user[/bold green]",
            subtitle=f"[bold cyan]{user.id}[/bold cyan]",
        )
    )


@app.command()
def generate_plan(
    week: str = typer.Argument(..., help="ISO week, e.g. 2025-W09"),
    regenerate: bool = typer.Option(False, help="Replace an existing plan for the week"),
    calories: Optional[int] = typer.Option(None, help="Daily calorie target"),
    protein: Optional[int] = typer.Option(None, help="Daily protein target in grams"),
):
    """Start generating a meal plan for a week."""
    request = GenerateMealPlanRequest(
        weekIdentifier=week,
        regenerateExisting=regenerate,
        calorieTarget=calories,
        proteinTarget=protein,
    )

    async def _generate():
        async with get_client() as client:
            return await meal_plans_api.generate_meal_plan(client, request)

    result = run(_generate())
    rprint(f"[bold green]Generation {result.status}[/bold green] (orchestration [cyan]{result.orchestrationId}[/cyan])")
    if result.message:
        rprint(result.message)


@app.command()
def plan_status(orchestration_id: str):
    """Check the progress of a meal plan generation."""

    async def _status():
        async with get_client() as client:
            return await meal_plans_api.get_generation_status(client, orchestration_id)

    result = run(_status())
    rprint(f"[bold]{result.orchestrationId}[/bold]: {result.status}")


def render_plan(plan: MealPlan) -> Table:
    table = Table(title=f"Meal plan {plan.weekIdentifier or plan.id or ''}".strip())
    table.add_column("Date", style="cyan")
    table.add_column("Meal", style="magenta")
    table.add_column("Recipe")
    table.add_column("kcal", justify="right")
    for day in plan.days:
        for meal in day.meals:
            calories = meal.recipe.nutrition.calories if meal.recipe.nutrition else ""
            table.add_row(day.date, meal.mealType, meal.recipe.title, f"{calories}")
    return table


@app.command()
def show_plan(plan_id: str):
    """Show a single meal plan."""

    async def _show():
        async with get_client() as client:
            return await meal_plans_api.get_meal_plan(client, plan_id)

    console.print(render_plan(run(_show())))


@app.command()
def week(week: str = typer.Argument(..., help="ISO week, e.g. 2025-W09")):
    """List the meal plans for a week."""

    async def _week():
        async with get_client() as client:
            return await meal_plans_api.get_meal_plans_for_week(client, week)

    plans = run(_week())
    if not plans:
        rprint(f"[bold red]No meal plans for {week}.[/bold red]")
        return
    for plan in plans:
        console.print(render_plan(plan))


if __name__ == "__main__":
    app()
