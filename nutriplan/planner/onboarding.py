"""Onboarding questionnaire step sequencer.

Steps run in a fixed order, numbered from 1. The only branch: the
"rate" step (weekly weight change) is skipped when the goal is "maintain",
which shortens the questionnaire from 6 to 5 steps.
"""

from __future__ import annotations

from typing import Any

from nutriplan.planner.labels import get_step_info
from nutriplan.planner.models import (
    ActivityLevel,
    CamelModel,
    Country,
    Gender,
    Goal,
    UserProfile,
    WeightChangeRate,
)
from nutriplan.planner.validations import IdentityForm, PhysicalInfoForm

STEP_SEQUENCE: tuple[str, ...] = ("identity", "physical", "activity", "goal", "rate", "country")


def steps_for(goal: Goal | None) -> list[str]:
    return [kind for kind in STEP_SEQUENCE if not (kind == "rate" and goal == Goal.maintain)]


def total_steps(goal: Goal | None) -> int:
    return len(steps_for(goal))


def step_kind(step: int, goal: Goal | None) -> str | None:
    """Kind of the step at 1-based position `step`, or None if out of range."""
    sequence = steps_for(goal)
    if 1 <= step <= len(sequence):
        return sequence[step - 1]
    return None


class OnboardingState(CamelModel):
    step: int = 1

    full_name: str | None = None
    email: str | None = None
    gender: Gender | None = None
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    activity: ActivityLevel | None = None
    goal: Goal | None = None
    rate: WeightChangeRate | None = None
    country: Country | None = None

    # -- navigation -------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return total_steps(self.goal)

    @property
    def current_kind(self) -> str | None:
        return step_kind(self.step, self.goal)

    def is_last_step(self) -> bool:
        return self.step == self.total_steps

    def set_step(self, step: int) -> None:
        self.step = min(max(step, 1), self.total_steps)

    def next_step(self) -> None:
        self.set_step(self.step + 1)

    def prev_step(self) -> None:
        self.set_step(self.step - 1)

    def reset(self) -> None:
        for name, field in type(self).model_fields.items():
            setattr(self, name, field.default)

    # -- answers ----------------------------------------------------------

    def set_identity(self, form: IdentityForm) -> None:
        self.full_name = form.full_name
        self.email = form.email
        self.gender = form.gender

    def set_physical_info(self, form: PhysicalInfoForm) -> None:
        self.age = form.age
        self.weight = form.weight
        self.height = form.height

    def set_activity(self, activity: ActivityLevel) -> None:
        self.activity = activity

    def set_goal(self, goal: Goal) -> None:
        self.goal = goal
        # Switching to "maintain" drops a step; never point past the end.
        self.set_step(self.step)

    def set_rate(self, rate: WeightChangeRate) -> None:
        self.rate = rate

    def set_country(self, country: Country) -> None:
        self.country = country

    # -- checks -----------------------------------------------------------

    def can_proceed(self) -> bool:
        kind = self.current_kind
        if kind == "identity":
            return self.has_identity()
        if kind == "physical":
            return bool(self.age and self.weight and self.height)
        if kind == "activity":
            return self.activity is not None
        if kind == "goal":
            return self.goal is not None
        if kind == "rate":
            return self.rate is not None
        if kind == "country":
            return self.country is not None
        return False

    def is_complete(self) -> bool:
        base = all(
            (
                self.full_name,
                self.email,
                self.gender,
                self.age,
                self.weight,
                self.height,
                self.activity,
                self.goal,
                self.country,
            )
        )
        return base and (self.goal == Goal.maintain or self.rate is not None)

    def get_profile(self) -> UserProfile | None:
        if not self.is_complete():
            return None
        return UserProfile(
            gender=self.gender,
            age=self.age,
            weight=self.weight,
            height=self.height,
            activity=self.activity,
            goal=self.goal,
            rate=self.rate if self.goal != Goal.maintain else None,
            country=self.country,
        )

    def has_identity(self) -> bool:
        return bool(self.full_name and self.email and self.gender)

    def identity_payload(self, password: Any) -> dict[str, Any]:
        """Registration form fields; the password is never kept in the wizard."""
        return {
            "fullName": self.full_name,
            "email": self.email,
            "password": password,
            "gender": self.gender.value if self.gender else None,
        }

    def view(self) -> dict[str, Any]:
        """Public snapshot for the browser."""
        info = get_step_info(self.current_kind or "")
        answers = self.model_dump(mode="json", by_alias=True, exclude={"step"})
        return {
            "step": self.step,
            "totalSteps": self.total_steps,
            "kind": self.current_kind,
            "title": info.title if info else "",
            "description": info.description if info else "",
            "canProceed": self.can_proceed(),
            "isLastStep": self.is_last_step(),
            "isComplete": self.is_complete(),
            "answers": answers,
        }
