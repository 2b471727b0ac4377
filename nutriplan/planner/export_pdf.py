"""Printable weekly plan, rendered to PDF with reportlab."""

from __future__ import annotations

import io
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from nutriplan.planner.labels import (
    ACTIVITY_LABELS,
    COUNTRY_LABELS,
    DAY_LABELS,
    DAYS_ORDER,
    GOAL_LABELS,
    PORTION_ROWS,
)
from nutriplan.planner.models import CalculateResponse, UserProfile, WeeklyMenuResponse

APP_NAME = "NutriPlan"

_TABLE_STYLE = TableStyle(
    [
        ("GRID", (0, 0), (-1, -1), 0.4, colors.grey),
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _profile_line(profile: UserProfile | None) -> str | None:
    if profile is None:
        return None
    return " • ".join(
        [
            GOAL_LABELS[profile.goal],
            ACTIVITY_LABELS[profile.activity],
            COUNTRY_LABELS[profile.country],
            f"{_fmt(profile.weight)} kg",
        ]
    )


def render_weekly_plan_pdf(
    plan: CalculateResponse,
    weekly: WeeklyMenuResponse,
    profile: UserProfile | None = None,
    user_name: str | None = None,
) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=f"{APP_NAME} - Plan hebdomadaire")
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Small", fontSize=9, leading=11))
    story: list[Any] = []

    title = f"<b>{APP_NAME}</b>"
    if user_name:
        title += f" - {escape(user_name)}"
    story.append(Paragraph(title, styles["Title"]))
    story.append(Paragraph(f"Généré le {date.today().strftime('%d/%m/%Y')}", styles["Small"]))
    line = _profile_line(profile)
    if line:
        story.append(Paragraph(escape(line), styles["Normal"]))
    story.append(
        Paragraph(f"Objectif calorique : <b>{_fmt(plan.calories)} kcal/jour</b>", styles["Normal"])
    )
    story.append(Spacer(1, 0.4 * cm))

    story.append(Paragraph("<b>Budget de portions par jour</b>", styles["Heading2"]))
    portions = plan.portions.model_dump()
    budget = Table(
        [[label for _, label in PORTION_ROWS], [_fmt(portions[group.value]) for group, _ in PORTION_ROWS]],
        hAlign="LEFT",
    )
    budget.setStyle(_TABLE_STYLE)
    story.append(budget)

    for index, day in enumerate(DAYS_ORDER):
        meals = weekly.weekly_menu.get(day, [])
        story.append(PageBreak() if index and index % 2 == 0 else Spacer(1, 0.5 * cm))
        story.append(Paragraph(f"<b>{DAY_LABELS[day]}</b>", styles["Heading2"]))
        rows: list[list[Any]] = [["Repas", "Aliments"]]
        for meal in meals:
            foods = "<br/>".join(escape(f"{food.name} ({food.portion})") for food in meal.foods) or "-"
            rows.append([meal.label, Paragraph(foods, styles["Small"])])
        table = Table(rows, hAlign="LEFT", colWidths=[3.5 * cm, 13 * cm])
        table.setStyle(_TABLE_STYLE)
        story.append(table)

    doc.build(story)
    return buf.getvalue()
