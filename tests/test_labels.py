"""Tests for display tables and the PDF export."""

from nutriplan.planner.export_pdf import render_weekly_plan_pdf
from nutriplan.planner.labels import (
    COUNTRY_LABELS,
    DAY_SHORT_LABELS,
    DAYS_ORDER,
    MONTH_DAYS,
    RATE_KCAL_PER_DAY,
    get_step_info,
    onboarding_options,
)
from nutriplan.planner.models import CalculateResponse, Country, DayOfWeek, UserProfile, WeightChangeRate
from nutriplan.planner.transforms import transform_weekly_menu_response
from tests.conftest import PLAN, PROFILE, make_weekly_data


class TestLabels:
    def test_rate_kcal(self):
        assert RATE_KCAL_PER_DAY == {
            WeightChangeRate.half: 550,
            WeightChangeRate.one: 1100,
            WeightChangeRate.one_and_half: 1650,
            WeightChangeRate.two: 2200,
        }

    def test_every_country_labelled(self):
        assert set(COUNTRY_LABELS) == set(Country)

    def test_days(self):
        assert DAYS_ORDER[0] == DayOfWeek.monday
        assert DAY_SHORT_LABELS[DayOfWeek.wednesday] == "Mer"
        assert MONTH_DAYS[0] == 1 and MONTH_DAYS[-1] == 31

    def test_step_info(self):
        assert get_step_info("rate").title == "Rythme"
        assert get_step_info("unknown") is None

    def test_options_shape(self):
        options = onboarding_options()
        assert set(options) == {"gender", "activity", "goal", "rate", "country"}
        assert options["goal"][0] == {
            "value": "lose",
            "label": "Perdre du poids",
            "description": "Réduire la masse grasse",
        }
        assert "description" not in options["gender"][0]


class TestExportPdf:
    def test_renders_pdf(self):
        pdf = render_weekly_plan_pdf(
            CalculateResponse.model_validate(PLAN),
            transform_weekly_menu_response(make_weekly_data()),
            UserProfile.model_validate(PROFILE),
            "Awa Diop",
        )
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_markup_in_text_is_escaped(self):
        data = make_weekly_data()
        data["weeklyMenu"]["monday"]["dejeuner"]["items"][0]["aliment"] = "Riz <b>gras"
        data["weeklyMenu"]["monday"]["dejeuner"]["items"][0]["quantite"] = "1 < 2 assiettes"
        pdf = render_weekly_plan_pdf(
            CalculateResponse.model_validate(PLAN),
            transform_weekly_menu_response(data),
            UserProfile.model_validate(PROFILE),
            "Awa <i> Diop",
        )
        assert pdf.startswith(b"%PDF")

    def test_renders_without_profile(self):
        pdf = render_weekly_plan_pdf(
            CalculateResponse.model_validate(PLAN),
            transform_weekly_menu_response(make_weekly_data()),
        )
        assert pdf.startswith(b"%PDF")
