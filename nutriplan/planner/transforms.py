"""Backend payload -> browser shape translation.

The backend names meals in French (petit_dejeuner, collation, ...) and items
as {aliment, groupe, portions, quantite}; the browser gets typed, labelled
meals in breakfast/snack/lunch/dinner order.
"""

from __future__ import annotations

import time
from typing import Any

from nutriplan.planner.labels import DAYS_ORDER, MEAL_ICONS, MEAL_LABELS
from nutriplan.planner.models import (
    AuthenticatedUser,
    BackendMealFormatted,
    CalculateResponse,
    Country,
    DailyMenuData,
    Food,
    Meal,
    MealType,
    MenuResponse,
    MenuSummary,
    MonthlyMenuResponse,
    PeriodSummary,
    PlanDescriptions,
    PlanDetails,
    PortionBudget,
    SessionData,
    UserProfile,
    WeeklyMenuResponse,
)

MEAL_MAPPING: list[tuple[str, MealType]] = [
    ("petit_dejeuner", MealType.breakfast),
    ("collation", MealType.snack),
    ("dejeuner", MealType.lunch),
    ("diner", MealType.dinner),
]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_meal(backend_meal: BackendMealFormatted, meal_type: MealType, id_prefix: str, stamp: int) -> Meal:
    foods = [
        Food(
            id=f"{id_prefix}{meal_type.value}-{index}-{stamp}",
            name=item.aliment,
            group=item.groupe,
            portion=item.quantite,
            quantity=item.portions,
        )
        for index, item in enumerate(backend_meal.items)
    ]
    return Meal(type=meal_type, label=MEAL_LABELS[meal_type], icon=MEAL_ICONS[meal_type], foods=foods)


def _period_summary(summary: dict[str, Any]) -> PeriodSummary:
    return PeriodSummary(
        total_portions_per_day=PortionBudget.model_validate(summary.get("totalPortionsPerDay") or {}),
        total_foods_per_day=summary.get("totalFoodsPerDay", 0),
        days_generated=summary.get("daysGenerated", 0),
    )


def transform_calorie_response(data: dict[str, Any]) -> CalculateResponse:
    """/calculate payload -> nutrition plan (rounded calories + portion budget)."""
    return CalculateResponse(
        calories=data["roundedCalories"],
        portions=PortionBudget.model_validate(data["portionBudget"]),
        details=PlanDetails(bmr=data["bmr"], tdee=data["tdee"], target_calories=data["targetCalories"]),
        descriptions=PlanDescriptions.model_validate(data.get("descriptions") or {}),
    )


def transform_daily_menu_to_meals(daily: DailyMenuData | dict[str, Any], day_index: int) -> list[Meal]:
    if not isinstance(daily, DailyMenuData):
        daily = DailyMenuData.model_validate(daily)
    stamp = _now_ms()
    return [
        _to_meal(getattr(daily, key), meal_type, f"{day_index}-", stamp)
        for key, meal_type in MEAL_MAPPING
    ]


def transform_menu_response(data: dict[str, Any]) -> MenuResponse:
    """/generate-menu payload -> single-day menu."""
    menu = data["menu"]
    summary = data.get("summary") or {}
    stamp = _now_ms()
    meals = [
        _to_meal(BackendMealFormatted.model_validate(menu[key]), meal_type, "", stamp)
        for key, meal_type in MEAL_MAPPING
    ]
    return MenuResponse(
        meals=meals,
        summary=MenuSummary(
            total_portions=PortionBudget.model_validate(summary.get("total_portions") or {}),
            total_foods=summary.get("nombre_aliments", 0),
        ),
        region=data.get("region", ""),
    )


def transform_weekly_menu_response(data: dict[str, Any]) -> WeeklyMenuResponse:
    """/generate-weekly-menu payload -> Monday..Sunday menus."""
    weekly = data["weeklyMenu"]
    return WeeklyMenuResponse(
        weekly_menu={
            day: transform_daily_menu_to_meals(weekly[day.value], index)
            for index, day in enumerate(DAYS_ORDER)
        },
        summary=_period_summary(data.get("summary") or {}),
        region=data.get("region", ""),
    )


def transform_monthly_menu_response(data: dict[str, Any]) -> MonthlyMenuResponse:
    """/generate-monthly-menu payload -> menus keyed by day of month (1..31)."""
    monthly = {int(day): menu for day, menu in data["monthlyMenu"].items()}
    return MonthlyMenuResponse(
        monthly_menu={day: transform_daily_menu_to_meals(monthly[day], day) for day in sorted(monthly)},
        summary=_period_summary(data.get("summary") or {}),
        region=data.get("region", ""),
    )


def plan_from_session(session: SessionData) -> CalculateResponse:
    """Rebuild a nutrition plan from a stored monthly session."""
    return CalculateResponse(
        calories=session.target_calories,
        portions=session.portion_budget,
        details=PlanDetails(bmr=session.bmr, tdee=session.tdee, target_calories=session.target_calories),
        descriptions=PlanDescriptions(),
    )


def profile_from_login(user: AuthenticatedUser, session: SessionData) -> UserProfile:
    """Profile for /calculate from the user record and its latest session."""
    try:
        country = Country(user.country)
    except ValueError:
        country = Country.general
    return UserProfile(
        gender=user.gender,
        age=session.age,
        weight=session.weight,
        height=user.height,
        activity=session.activity_level,
        goal=session.goal,
        rate=session.rate,
        country=country,
    )
