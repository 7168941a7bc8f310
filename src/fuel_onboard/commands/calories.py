"""Calorie calculator command."""

import click

from ..config import settings
from ..models.session import ActivityLevel, Sex
from ..rules.calories import (
    calculate_bmr,
    calculate_safe_calorie_target,
    calculate_tdee,
    soft_floor_for,
)
from .base import echo_error, echo_warning


@click.command()
@click.option("--weight-kg", type=float, required=True, help="Body weight in kilograms")
@click.option("--height-cm", type=float, required=True, help="Height in centimetres")
@click.option("--age", type=int, required=True, help="Age in years")
@click.option(
    "--sex",
    type=click.Choice([s.value for s in Sex]),
    default=Sex.UNKNOWN.value,
    show_default=True,
)
@click.option(
    "--activity",
    type=click.Choice([a.value for a in ActivityLevel]),
    default=ActivityLevel.SEDENTARY.value,
    show_default=True,
)
@click.option(
    "--diff",
    type=float,
    default=0.0,
    show_default=True,
    help="Requested daily deficit (negative) or surplus (positive) in kcal",
)
@click.pass_context
def calories(ctx, weight_kg: float, height_cm: float, age: int, sex: str, activity: str, diff: float):
    """Print BMR, TDEE and the safe daily calorie target.

    Example:

        fuel-onboard calories --weight-kg 70 --height-cm 175 --age 30 --sex male --activity moderate --diff -500
    """
    try:
        bmr = calculate_bmr(weight_kg, height_cm, age, sex)
    except ValueError as e:
        echo_error(str(e))
        ctx.exit(1)
    tdee = calculate_tdee(bmr, activity)
    soft_floors = {
        Sex.MALE: settings.soft_floor_male_kcal,
        Sex.FEMALE: settings.soft_floor_female_kcal,
    }
    result = calculate_safe_calorie_target(
        tdee, diff, sex, hard_floor=settings.hard_floor_kcal, soft_floors=soft_floors
    )

    click.echo()
    click.echo(f"BMR:    {bmr:.0f} kcal/day")
    click.echo(f"TDEE:   {tdee:.0f} kcal/day")
    click.echo(f"Target: {result.target_calories} kcal/day ({result.adjusted_daily_diff:+d} kcal)")
    click.echo(f"Floors: hard {settings.hard_floor_kcal}, soft {soft_floor_for(sex, soft_floors)}")
    if result.warning_message:
        echo_warning(result.warning_message)
    if result.hard_floor_applied:
        echo_warning(f"Requested pace is unsafe; target pinned to {settings.hard_floor_kcal} kcal")
