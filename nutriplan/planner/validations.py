"""Form validation with the user-facing (French) messages."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, TypeVar

from fastapi import HTTPException
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from nutriplan.planner.models import (
    ActivityLevel,
    CamelModel,
    Gender,
    Goal,
    LicenseType,
    WeightChangeRate,
)

E = TypeVar("E", bound=Enum)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError("form_invalid", message)


def _number(value: Any, message: str) -> float:
    if isinstance(value, bool) or value is None or value == "":
        raise _invalid(message)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise _invalid(message)


def _bounded(value: Any, low: float, high: float, messages: tuple[str, str, str]) -> float:
    invalid, too_low, too_high = messages
    number = _number(value, invalid)
    if number < low:
        raise _invalid(too_low)
    if number > high:
        raise _invalid(too_high)
    return number


AGE_MESSAGES = (
    "L'âge doit être un nombre valide",
    "L'âge minimum est 10 ans",
    "L'âge maximum est 120 ans",
)
WEIGHT_MESSAGES = (
    "Le poids doit être un nombre valide",
    "Le poids minimum est 20 kg",
    "Le poids maximum est 300 kg",
)
HEIGHT_MESSAGES = (
    "La taille doit être un nombre valide",
    "La taille minimum est 100 cm",
    "La taille maximum est 250 cm",
)
ACTIVITY_MESSAGE = "Veuillez sélectionner votre niveau d'activité"
GOAL_MESSAGE = "Veuillez choisir votre objectif"
RATE_MESSAGE = "Veuillez choisir votre rythme"
COUNTRY_MESSAGE = "Veuillez sélectionner votre pays"


def coerce_rate(value: Any) -> Any:
    """0.5 -> "0.5", 1.0 -> "1"; anything else unchanged."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


def _choice(enum_cls: type[E], value: Any, message: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise _invalid(message)


class IdentityForm(CamelModel):
    full_name: str | None = Field(default=None, validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    password: str | None = Field(default=None, validate_default=True)
    gender: Gender | None = Field(default=None, validate_default=True)

    @field_validator("full_name", mode="before")
    @classmethod
    def _check_full_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise _invalid("Le nom est requis")
        if len(v) < 3:
            raise _invalid("Le nom doit contenir au moins 3 caractères")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise _invalid("L'email est requis")
        if not EMAIL_RE.match(v):
            raise _invalid("L'email est invalide")
        return v

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, v: Any) -> str:
        if not isinstance(v, str) or not v:
            raise _invalid("Le mot de passe est requis")
        if len(v) < 6:
            raise _invalid("Le mot de passe doit contenir au moins 6 caractères")
        return v

    @field_validator("gender", mode="before")
    @classmethod
    def _check_gender(cls, v: Any) -> Any:
        if v not in {g.value for g in Gender} and not isinstance(v, Gender):
            raise _invalid("Veuillez sélectionner votre genre")
        return v


class PhysicalInfoForm(CamelModel):
    age: int | None = Field(default=None, validate_default=True)
    weight: float | None = Field(default=None, validate_default=True)
    height: float | None = Field(default=None, validate_default=True)

    @field_validator("age", mode="before")
    @classmethod
    def _check_age(cls, v: Any) -> int:
        return int(_bounded(v, 10, 120, AGE_MESSAGES))

    @field_validator("weight", mode="before")
    @classmethod
    def _check_weight(cls, v: Any) -> float:
        return _bounded(v, 20, 300, WEIGHT_MESSAGES)

    @field_validator("height", mode="before")
    @classmethod
    def _check_height(cls, v: Any) -> float:
        return _bounded(v, 100, 250, HEIGHT_MESSAGES)


class NewSessionForm(CamelModel):
    """Monthly check-in: current weight, age and (possibly new) goal."""

    weight: float | None = Field(default=None, validate_default=True)
    age: int | None = Field(default=None, validate_default=True)
    activity_level: ActivityLevel | None = Field(default=None, validate_default=True)
    goal: Goal | None = Field(default=None, validate_default=True)
    rate: WeightChangeRate | None = None

    @field_validator("weight", mode="before")
    @classmethod
    def _check_weight(cls, v: Any) -> float:
        return _bounded(v, 20, 300, WEIGHT_MESSAGES)

    @field_validator("age", mode="before")
    @classmethod
    def _check_age(cls, v: Any) -> int:
        return int(_bounded(v, 10, 120, AGE_MESSAGES))

    @field_validator("activity_level", mode="before")
    @classmethod
    def _check_activity(cls, v: Any) -> ActivityLevel:
        return _choice(ActivityLevel, v, ACTIVITY_MESSAGE)

    @field_validator("goal", mode="before")
    @classmethod
    def _check_goal(cls, v: Any) -> Goal:
        return _choice(Goal, v, GOAL_MESSAGE)

    @field_validator("rate", mode="before")
    @classmethod
    def _check_rate(cls, v: Any) -> WeightChangeRate | None:
        if v is None or v == "":
            return None
        return _choice(WeightChangeRate, coerce_rate(v), RATE_MESSAGE)

    @model_validator(mode="after")
    def _rate_matches_goal(self) -> "NewSessionForm":
        if self.goal == Goal.maintain:
            self.rate = None
        elif self.rate is None:
            raise _invalid(RATE_MESSAGE)
        return self

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "weight": self.weight,
            "age": self.age,
            "activityLevel": self.activity_level.value,
            "goal": self.goal.value,
        }
        if self.rate is not None:
            payload["rate"] = self.rate.value
        return payload


class LicenseCreateForm(CamelModel):
    type: LicenseType = LicenseType.QUOTA
    name: str = ""
    description: str | None = None
    menu_quota: int = 10
    duration_days: int = 30

    @model_validator(mode="after")
    def _check(self) -> "LicenseCreateForm":
        self.name = self.name.strip()
        if not self.name:
            raise _invalid("Veuillez entrer un nom pour la licence")
        if self.type == LicenseType.QUOTA and self.menu_quota < 1:
            raise _invalid("Le quota doit être au moins 1")
        if self.type == LicenseType.SUBSCRIPTION and self.duration_days < 1:
            raise _invalid("La durée doit être au moins 1 jour")
        return self

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "name": self.name}
        description = (self.description or "").strip()
        if description:
            payload["description"] = description
        if self.type == LicenseType.QUOTA:
            payload["menuQuota"] = self.menu_quota
        else:
            payload["durationDays"] = self.duration_days
        return payload


def split_full_name(full_name: str) -> tuple[str, str]:
    """'Awa Diop Ndiaye' -> ('Awa', 'Diop Ndiaye')."""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def field_messages(exc: ValidationError, model: type[CamelModel] | None = None) -> dict[str, str]:
    """First message per field, keyed by the camelCase name the browser sends.

    Defaults validated with `validate_default=True` report their Python
    name in `loc`, supplied values report the alias; both map to the alias.
    Form-level errors land under '_form'.
    """
    fields = model.model_fields if model is not None else {}
    out: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        key = str(loc[0]) if loc else "_form"
        if key in fields:
            key = fields[key].alias or key
        out.setdefault(key, err["msg"])
    return out


def validate_form(model: type[CamelModel], payload: dict[str, Any]):
    """Validate `payload` or raise a 422 carrying the first French message."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        messages = field_messages(exc, model)
        raise HTTPException(
            status_code=422,
            detail={"error": next(iter(messages.values())), "fields": messages},
        )
