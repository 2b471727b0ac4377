"""Backend contract mirrors and the translated shapes served to the browser.

Browser-facing models serialise with camelCase aliases (the JSON the UI
consumes); backend menu models keep the backend's French field names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Gender(str, Enum):
    male = "male"
    female = "female"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    extra_active = "extra_active"


class Goal(str, Enum):
    lose = "lose"
    maintain = "maintain"
    gain = "gain"


class WeightChangeRate(str, Enum):
    """Weekly weight change target, in kg."""

    half = "0.5"
    one = "1"
    one_and_half = "1.5"
    two = "2"


class Country(str, Enum):
    general = "general"
    senegal = "senegal"
    mali = "mali"
    benin = "benin"
    togo = "togo"
    ghana = "ghana"
    cote_ivoire = "cote_ivoire"
    cameroun = "cameroun"
    guinea = "guinea"
    burkina = "burkina"
    niger = "niger"
    congo = "congo"
    nigeria = "nigeria"


class MealType(str, Enum):
    breakfast = "breakfast"
    snack = "snack"
    lunch = "lunch"
    dinner = "dinner"


class FoodGroup(str, Enum):
    starch = "starch"
    fruit = "fruit"
    milk = "milk"
    veg = "veg"
    protein = "protein"
    fat = "fat"


class DayOfWeek(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class LicenseType(str, Enum):
    QUOTA = "QUOTA"
    SUBSCRIPTION = "SUBSCRIPTION"


def _coerce_rate(value: Any) -> Any:
    # The backend stores rates as numbers in some payloads (0.5, 1.0).
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


# ---------------------------------------------------------------------------
# Profile & calorie calculation
# ---------------------------------------------------------------------------


class UserProfile(CamelModel):
    gender: Gender
    age: int
    weight: float  # kg
    height: float  # cm
    activity: ActivityLevel
    goal: Goal
    rate: WeightChangeRate | None = None  # required unless goal == maintain
    country: Country = Country.general  # not sent to /calculate, used as menu region

    normalise_rate = field_validator("rate", mode="before")(_coerce_rate)


class PortionBudget(BaseModel):
    starch: float = 0
    fruit: float = 0
    milk: float = 0
    veg: float = 0
    protein: float = 0
    fat: float = 0


class PlanDetails(CamelModel):
    bmr: float
    tdee: float
    target_calories: float


class PlanDescriptions(BaseModel):
    activity: str = ""
    goal: str = ""


class CalculateResponse(CamelModel):
    """Nutrition plan: calorie target and daily portion budget."""

    calories: float
    portions: PortionBudget
    details: PlanDetails
    descriptions: PlanDescriptions = Field(default_factory=PlanDescriptions)


# ---------------------------------------------------------------------------
# Backend menu shapes
# ---------------------------------------------------------------------------


class BackendMealItem(BaseModel):
    aliment: str
    groupe: FoodGroup
    portions: float
    quantite: str


class BackendMealFormatted(BaseModel):
    name: str = ""
    items: list[BackendMealItem] = Field(default_factory=list)
    resume_portions: PortionBudget | None = None


class DailyMenuData(BaseModel):
    jour: str = ""
    petit_dejeuner: BackendMealFormatted
    dejeuner: BackendMealFormatted
    diner: BackendMealFormatted
    collation: BackendMealFormatted


# ---------------------------------------------------------------------------
# Translated menu shapes
# ---------------------------------------------------------------------------


class Food(CamelModel):
    id: str
    name: str
    group: FoodGroup
    portion: str
    quantity: float


class Meal(CamelModel):
    type: MealType
    label: str
    icon: str
    foods: list[Food] = Field(default_factory=list)


class MenuSummary(CamelModel):
    total_portions: PortionBudget
    total_foods: int


class MenuResponse(CamelModel):
    meals: list[Meal]
    summary: MenuSummary
    region: str


class PeriodSummary(CamelModel):
    total_portions_per_day: PortionBudget
    total_foods_per_day: int
    days_generated: int


class WeeklyMenuResponse(CamelModel):
    weekly_menu: dict[DayOfWeek, list[Meal]]
    summary: PeriodSummary
    region: str


class MonthlyMenuResponse(CamelModel):
    monthly_menu: dict[int, list[Meal]]
    summary: PeriodSummary
    region: str


# ---------------------------------------------------------------------------
# Users, sessions, licenses
# ---------------------------------------------------------------------------


class SessionData(CamelModel):
    """One monthly tracking session (weight check-in + recalculated plan)."""

    id: str
    month: int
    weight: float
    age: int
    activity_level: ActivityLevel
    goal: Goal
    rate: WeightChangeRate | None = None
    bmr: float = 0
    tdee: float = 0
    target_calories: float = 0
    portion_budget: PortionBudget = Field(default_factory=PortionBudget)
    created_at: str | None = None

    normalise_rate = field_validator("rate", mode="before")(_coerce_rate)


class AuthenticatedUser(CamelModel):
    id: str
    email: str = ""
    first_name: str
    last_name: str = ""
    gender: Gender
    height: float
    country: str = Country.general.value
    sessions: list[SessionData] = Field(default_factory=list)  # latest first

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class LicenseHolder(CamelModel):
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""


class LicenseActivation(CamelModel):
    id: str
    user_id: str
    user: LicenseHolder | None = None


class License(CamelModel):
    id: str
    code: str
    type: LicenseType
    name: str
    description: str | None = None
    menu_quota: int | None = None
    duration_days: int | None = None
    is_active: bool = True
    created_by: str | None = None
    created_at: str | None = None
    activations: list[LicenseActivation] = Field(default_factory=list)


class AdminUser(BaseModel):
    id: str
    email: str
    name: str


class CountryCount(BaseModel):
    country: str
    count: int


class GoalCount(BaseModel):
    goal: str
    count: int


class AdminStats(CamelModel):
    total_users: int
    active_this_month: int
    total_menus: int
    users_by_country: list[CountryCount] = Field(default_factory=list)
    users_by_goal: list[GoalCount] = Field(default_factory=list)


class LastSession(CamelModel):
    month: int
    weight: float
    goal: str
    created_at: str | None = None


class UserListItem(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    gender: str
    height: float
    country: str
    created_at: str | None = None
    last_session: LastSession | None = None


class UserListResponse(CamelModel):
    users: list[UserListItem]
    total: int
    page: int
    total_pages: int


class StoredMenu(CamelModel):
    id: str
    data: Any = None
    created_at: str | None = None


class UserSessionDetail(SessionData):
    menu: StoredMenu | None = None


class UserDetail(CamelModel):
    id: str
    first_name: str
    last_name: str
    role: str
    gender: str
    height: float
    country: str
    created_at: str | None = None
    sessions: list[UserSessionDetail] = Field(default_factory=list)
