"""Interactive questionnaire for each onboarding step."""

import click
import questionary
from questionary import Style

from .models.session import (
    ActivityLevel,
    CaloriePlan,
    FocusModule,
    FocusTargets,
    GoalType,
    HeightUnit,
    OnboardingSession,
    Sex,
    Step,
    SubscriptionPlan,
    Timeframe,
    WeightUnit,
)
from .rules.calories import CalorieEstimate, calorie_target_for_plan
from .rules.goal_weight import SuggestedTarget
from .utils.metrics import weight_from_lb

# Custom style for questionnaire
custom_style = Style(
    [
        ("qmark", "fg:#2e7d32 bold"),
        ("question", "bold"),
        ("answer", "fg:#ef6c00 bold"),
        ("pointer", "fg:#2e7d32 bold"),
        ("highlighted", "fg:#2e7d32 bold"),
        ("selected", "fg:#ef6c00"),
        ("separator", "fg:#ef6c00"),
        ("instruction", ""),
        ("text", ""),
    ]
)

STEP_TITLES = {
    Step.NAME_AGE: "About you",
    Step.SEX: "Sex at birth",
    Step.HEIGHT: "Height",
    Step.ACTIVITY: "Activity level",
    Step.CURRENT_WEIGHT: "Current weight",
    Step.GOAL: "Your goal",
    Step.GOAL_WEIGHT: "Goal weight",
    Step.CALORIE_TARGET: "Daily calorie target",
    Step.FOCUS_TARGETS: "Daily focus targets",
    Step.MODULES: "Home screen modules",
    Step.PLAN: "Plan",
    Step.LEGAL: "Legal",
}


async def _ask(question):
    """Ask a questionary question; Ctrl+C aborts the command."""
    answer = await question.ask_async()
    if answer is None:
        raise click.Abort()
    return answer


def _text(message: str, default: str = ""):
    return questionary.text(message, default=default or "", style=custom_style)


def _select(message: str, choices: list, default=None):
    return questionary.select(message, choices=choices, default=default, style=custom_style)


class StepPrompter:
    """Collects the answers for one step and returns them as a session delta."""

    async def ask(self, session: OnboardingSession, offer=None) -> dict:
        handler = getattr(self, f"_step_{Step(session.current_step).name.lower()}")
        return await handler(session, offer)

    async def navigate(self, session: OnboardingSession) -> str:
        """Ask whether to answer the current step or go back."""
        return await _ask(
            _select(
                f"Step {session.current_step}/{session.total_steps}: "
                f"{STEP_TITLES[Step(session.current_step)]}",
                choices=[
                    questionary.Choice("Continue", "continue"),
                    questionary.Choice("Go back", "back"),
                ],
            )
        )

    async def _step_name_age(self, session, offer) -> dict:
        name = await _ask(_text("What should we call you?", session.preferred_name))
        dob = await _ask(_text("Date of birth (YYYY-MM-DD)?", session.date_of_birth))
        return {"preferred_name": name, "date_of_birth": dob}

    async def _step_sex(self, session, offer) -> dict:
        sex = await _ask(
            _select(
                "Sex at birth (used for energy estimates)?",
                choices=[
                    questionary.Choice("Male", Sex.MALE.value),
                    questionary.Choice("Female", Sex.FEMALE.value),
                ],
                default=session.sex or None,
            )
        )
        return {"sex": sex}

    async def _step_height(self, session, offer) -> dict:
        unit = await _ask(
            _select(
                "Height unit?",
                choices=[
                    questionary.Choice("Centimetres", HeightUnit.CM),
                    questionary.Choice("Feet and inches", HeightUnit.FT),
                ],
                default=session.height_unit,
            )
        )
        if unit == HeightUnit.FT:
            feet = await _ask(_text("Feet?", session.height_ft))
            inches = await _ask(_text("Inches?", session.height_in))
            return {"height_unit": unit, "height_ft": feet, "height_in": inches}
        cm = await _ask(_text("Height in cm?", session.height_cm))
        return {"height_unit": unit, "height_cm": cm}

    async def _step_activity(self, session, offer) -> dict:
        level = await _ask(
            _select(
                "How active are you on a typical day?",
                choices=[
                    questionary.Choice("Sedentary (desk job, little exercise)", ActivityLevel.SEDENTARY.value),
                    questionary.Choice("Light (exercise 1-3 days/week)", ActivityLevel.LIGHT.value),
                    questionary.Choice("Moderate (exercise 3-5 days/week)", ActivityLevel.MODERATE.value),
                    questionary.Choice("High (hard exercise 6-7 days/week)", ActivityLevel.HIGH.value),
                    questionary.Choice("Very high (athlete or physical job)", ActivityLevel.VERY_HIGH.value),
                ],
                default=session.activity_level or None,
            )
        )
        return {"activity_level": level}

    async def _step_current_weight(self, session, offer) -> dict:
        unit = await _ask(
            _select(
                "Weight unit?",
                choices=[
                    questionary.Choice("Pounds", WeightUnit.LB),
                    questionary.Choice("Kilograms", WeightUnit.KG),
                ],
                default=session.weight_unit,
            )
        )
        weight = await _ask(_text(f"Current weight ({unit.value})?", session.current_weight))
        body_fat = await _ask(_text("Body fat % (optional)?", session.body_fat_percent))
        return {"weight_unit": unit, "current_weight": weight, "body_fat_percent": body_fat}

    async def _step_goal(self, session, offer) -> dict:
        goal = await _ask(
            _select(
                "What is your main goal?",
                choices=[
                    questionary.Choice("Lose weight", GoalType.LOSE.value),
                    questionary.Choice("Maintain weight", GoalType.MAINTAIN.value),
                    questionary.Choice("Gain weight", GoalType.GAIN.value),
                    questionary.Choice("Recomposition (lose fat, build muscle)", GoalType.RECOMP.value),
                ],
                default=session.goal_type or None,
            )
        )
        return {"goal_type": goal}

    async def _step_goal_weight(self, session, offer) -> dict:
        default = session.goal_weight
        if isinstance(offer, SuggestedTarget):
            suggested = weight_from_lb(offer.suggested_lb, session.weight_unit.value)
            click.echo(f"  Suggested goal: {suggested:g} {session.weight_unit.value}")
            default = default or f"{suggested:g}"
        goal_weight = await _ask(_text(f"Goal weight ({session.weight_unit.value})?", default))
        timeframe = await _ask(
            _select(
                "When would you like to get there?",
                choices=[
                    questionary.Choice("In 3 months", Timeframe.THREE_MONTHS),
                    questionary.Choice("In 6 months", Timeframe.SIX_MONTHS),
                    questionary.Choice("In 12 months", Timeframe.TWELVE_MONTHS),
                    questionary.Choice("No deadline", Timeframe.NO_DEADLINE),
                    questionary.Choice("By a specific date", Timeframe.CUSTOM_DATE),
                ],
                default=session.goal_timeframe,
            )
        )
        delta = {"goal_weight": goal_weight, "goal_timeframe": timeframe}
        if timeframe == Timeframe.CUSTOM_DATE:
            delta["goal_target_date"] = await _ask(
                _text("Target date (YYYY-MM-DD)?", session.goal_target_date)
            )
        return delta

    async def _step_calorie_target(self, session, offer) -> dict:
        if not isinstance(offer, CalorieEstimate):
            target = await _ask(_text("Daily calorie target?", str(session.calorie_target or "")))
            return {
                "calorie_target": int(target) if target.strip().isdigit() else None,
                "calorie_plan": CaloriePlan.CUSTOM.value,
            }

        click.echo(f"  Estimated maintenance: {offer.maintenance_calories} kcal/day")
        choices = []
        for plan in (CaloriePlan.ON_TIME, CaloriePlan.SUSTAINABLE, CaloriePlan.ACCELERATED):
            result = calorie_target_for_plan(
                plan, offer, session.goal_type, session.sex or Sex.UNKNOWN
            )
            label = f"{plan.value.replace('_', ' ').capitalize()}: {result.target_calories} kcal"
            if result.warning_message:
                label += " (raised to a safe minimum)"
            choices.append(questionary.Choice(label, (plan, result.target_calories)))
        choices.append(questionary.Choice("Custom", (CaloriePlan.CUSTOM, None)))

        if offer.result.warning_message:
            click.echo(click.style(f"  {offer.result.warning_message}", fg="yellow"))
        plan, target = await _ask(_select("Choose a calorie plan", choices=choices))
        if plan == CaloriePlan.CUSTOM:
            raw = await _ask(_text("Daily calorie target?", str(session.calorie_target or "")))
            target = int(raw) if raw.strip().isdigit() else None
        return {
            "calorie_target": target,
            "calorie_plan": plan.value,
            "maintenance_calories": offer.maintenance_calories,
        }

    async def _step_focus_targets(self, session, offer) -> dict:
        current = session.focus_targets or offer
        if current is None:
            current = FocusTargets(100, 28, 200, 40, 2300, 2500)
        click.echo("  Suggested daily targets:")
        for name, value in current.to_dict().items():
            click.echo(f"    {name}: {value}")
        if await _ask(questionary.confirm("Use these targets?", default=True, style=custom_style)):
            return {"focus_targets": current}

        values = {}
        for name, value in current.to_dict().items():
            raw = await _ask(_text(f"{name}?", str(value)))
            values[name] = int(raw) if raw.strip().isdigit() else value
        return {"focus_targets": FocusTargets(**values)}

    async def _step_modules(self, session, offer) -> dict:
        picked = await _ask(
            questionary.checkbox(
                "Pick two modules to show after Food",
                choices=[
                    questionary.Choice(m.value, m.value, checked=m.value in session.focus_modules)
                    for m in (FocusModule.EXERCISE, FocusModule.MED, FocusModule.WATER)
                ],
                style=custom_style,
            )
        )
        return {"focus_modules": tuple(picked)}

    async def _step_plan(self, session, offer) -> dict:
        plan = await _ask(
            _select(
                "Choose your plan",
                choices=[
                    questionary.Choice("Free", SubscriptionPlan.FREE.value),
                    questionary.Choice("Premium", SubscriptionPlan.PREMIUM.value),
                ],
                default=session.plan or None,
            )
        )
        return {"plan": plan}

    async def _step_legal(self, session, offer) -> dict:
        terms = await _ask(questionary.confirm("I agree to the Terms of Service", style=custom_style))
        privacy = await _ask(questionary.confirm("I agree to the Privacy Policy", style=custom_style))
        risk = await _ask(
            questionary.confirm("I understand this app does not give medical advice", style=custom_style)
        )
        return {
            "legal_agree_terms": terms,
            "legal_agree_privacy": privacy,
            "legal_acknowledge_risk": risk,
        }
