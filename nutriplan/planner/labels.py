"""Static display tables (French): configuration only."""

from __future__ import annotations

from dataclasses import dataclass

from nutriplan.planner.models import (
    ActivityLevel,
    Country,
    DayOfWeek,
    FoodGroup,
    Goal,
    MealType,
    WeightChangeRate,
)

KCAL_PER_KG_FAT = 7700


@dataclass(frozen=True, slots=True)
class StepInfo:
    kind: str
    title: str
    description: str


ONBOARDING_STEPS: dict[str, StepInfo] = {
    "identity": StepInfo("identity", "Identité", "Créez votre compte"),
    "physical": StepInfo("physical", "Profil", "Vos informations physiques"),
    "activity": StepInfo("activity", "Activité", "Votre niveau d'activité"),
    "goal": StepInfo("goal", "Objectif", "Votre objectif nutritionnel"),
    "rate": StepInfo("rate", "Rythme", "Votre rythme souhaité"),
    "country": StepInfo("country", "Pays", "Votre pays de résidence"),
}

GENDER_LABELS: dict[str, str] = {"male": "Homme", "female": "Femme"}

ACTIVITY_LABELS: dict[ActivityLevel, str] = {
    ActivityLevel.sedentary: "Sédentaire",
    ActivityLevel.light: "Légèrement actif",
    ActivityLevel.moderate: "Modérément actif",
    ActivityLevel.active: "Actif",
    ActivityLevel.extra_active: "Très actif",
}

ACTIVITY_DESCRIPTIONS: dict[ActivityLevel, str] = {
    ActivityLevel.sedentary: "Peu ou pas d'exercice",
    ActivityLevel.light: "Exercice léger 1-3 jours/semaine",
    ActivityLevel.moderate: "Exercice modéré 3-5 jours/semaine",
    ActivityLevel.active: "Exercice intense 6-7 jours/semaine",
    ActivityLevel.extra_active: "Exercice très intense quotidien",
}

GOAL_LABELS: dict[Goal, str] = {
    Goal.lose: "Perdre du poids",
    Goal.maintain: "Maintenir",
    Goal.gain: "Prendre du poids",
}

GOAL_DESCRIPTIONS: dict[Goal, str] = {
    Goal.lose: "Réduire la masse grasse",
    Goal.maintain: "Garder votre poids actuel",
    Goal.gain: "Augmenter la masse musculaire",
}

# Shorter wording used on the progress timeline.
GOAL_PROGRESS_LABELS: dict[Goal, str] = {
    Goal.lose: "Perte de poids",
    Goal.maintain: "Maintien",
    Goal.gain: "Prise de masse",
}

RATE_LABELS: dict[WeightChangeRate, str] = {
    WeightChangeRate.half: "0,5 kg/semaine",
    WeightChangeRate.one: "1 kg/semaine",
    WeightChangeRate.one_and_half: "1,5 kg/semaine",
    WeightChangeRate.two: "2 kg/semaine",
}

RATE_DESCRIPTIONS: dict[WeightChangeRate, str] = {
    WeightChangeRate.half: "Progression douce et durable",
    WeightChangeRate.one: "Rythme recommandé",
    WeightChangeRate.one_and_half: "Progression rapide",
    WeightChangeRate.two: "Progression intensive",
}

RATE_KCAL_PER_DAY: dict[WeightChangeRate, int] = {
    rate: round(float(rate.value) * KCAL_PER_KG_FAT / 7) for rate in WeightChangeRate
}

COUNTRY_LABELS: dict[Country, str] = {
    Country.general: "Autre",
    Country.senegal: "Sénégal",
    Country.mali: "Mali",
    Country.benin: "Bénin",
    Country.togo: "Togo",
    Country.ghana: "Ghana",
    Country.cote_ivoire: "Côte d'Ivoire",
    Country.cameroun: "Cameroun",
    Country.guinea: "Guinée",
    Country.burkina: "Burkina Faso",
    Country.niger: "Niger",
    Country.congo: "Congo",
    Country.nigeria: "Nigeria",
}

MEAL_LABELS: dict[MealType, str] = {
    MealType.breakfast: "Petit-déjeuner",
    MealType.snack: "Collation",
    MealType.lunch: "Déjeuner",
    MealType.dinner: "Dîner",
}

MEAL_ICONS: dict[MealType, str] = {
    MealType.breakfast: "☀️",
    MealType.snack: "🍎",
    MealType.lunch: "🍽️",
    MealType.dinner: "🌙",
}

FOOD_GROUP_LABELS: dict[FoodGroup, str] = {
    FoodGroup.starch: "Féculents",
    FoodGroup.fruit: "Fruits",
    FoodGroup.milk: "Produits laitiers",
    FoodGroup.veg: "Légumes",
    FoodGroup.protein: "Protéines",
    FoodGroup.fat: "Matières grasses",
}

# Portion budget rows, in the order the export shows them.
PORTION_ROWS: list[tuple[FoodGroup, str]] = [
    (FoodGroup.starch, "Féculents"),
    (FoodGroup.protein, "Protéines"),
    (FoodGroup.veg, "Légumes"),
    (FoodGroup.fruit, "Fruits"),
    (FoodGroup.milk, "Laitiers"),
    (FoodGroup.fat, "Graisses"),
]

DAYS_ORDER: list[DayOfWeek] = list(DayOfWeek)

DAY_LABELS: dict[DayOfWeek, str] = {
    DayOfWeek.monday: "Lundi",
    DayOfWeek.tuesday: "Mardi",
    DayOfWeek.wednesday: "Mercredi",
    DayOfWeek.thursday: "Jeudi",
    DayOfWeek.friday: "Vendredi",
    DayOfWeek.saturday: "Samedi",
    DayOfWeek.sunday: "Dimanche",
}

DAY_SHORT_LABELS: dict[DayOfWeek, str] = {day: label[:3] for day, label in DAY_LABELS.items()}

MONTH_DAYS: list[int] = list(range(1, 32))


def get_step_info(kind: str) -> StepInfo | None:
    return ONBOARDING_STEPS.get(kind)


def _choices(labels: dict, descriptions: dict | None = None) -> list[dict]:
    out = []
    for key, label in labels.items():
        item = {"value": getattr(key, "value", key), "label": label}
        if descriptions is not None:
            item["description"] = descriptions.get(key, "")
        out.append(item)
    return out


def onboarding_options() -> dict[str, list[dict]]:
    """Every choice the questionnaire offers, with its labels."""
    rates = _choices(RATE_LABELS, RATE_DESCRIPTIONS)
    for item in rates:
        item["kcalPerDay"] = RATE_KCAL_PER_DAY[WeightChangeRate(item["value"])]
    return {
        "gender": _choices(GENDER_LABELS),
        "activity": _choices(ACTIVITY_LABELS, ACTIVITY_DESCRIPTIONS),
        "goal": _choices(GOAL_LABELS, GOAL_DESCRIPTIONS),
        "rate": rates,
        "country": _choices(COUNTRY_LABELS),
    }
