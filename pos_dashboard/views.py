from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pos_dashboard import reports
from pos_dashboard.aggregation import format_currency
from pos_dashboard.periods import MONTH, WEEK, parse_reference_date

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SECTIONS = {
    "dashboard": "لوحة التحكم",
    "sales": "المبيعات",
    "drawers": "الأدراج",
    "suppliers": "الموردين",
    "customers": "العملاء",
    "inventory": "المخزون",
    "restaurant": "المطعم",
}

PERIOD_BUTTONS = {
    "today": "اليوم",
    WEEK: "هذا الأسبوع",
    MONTH: "هذا الشهر",
}


class ViewState(BaseModel):
    section: str = "dashboard"
    date: Optional[str] = None
    period: Optional[str] = None
    employee: str = reports.ALL_EMPLOYEES
    status: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_type: Optional[str] = None

    def with_changes(self, **changes) -> "ViewState":
        return self.model_copy(update=changes)

    def query_string(self) -> str:
        params = {key: value for key, value in self.model_dump(exclude_defaults=True).items() if value}
        return urlencode(params)


def preset_date(period: str, today: date) -> date:
    if period == WEEK:
        return today - timedelta(days=today.weekday())
    if period == MONTH:
        return today.replace(day=1)
    return today


def format_timestamp(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    return f"{moment.day}/{moment.month}/{moment.year} {moment.hour:02d}:{moment.minute:02d}"


templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["currency"] = format_currency
templates.env.filters["timestamp"] = format_timestamp


def navigation_links(state: ViewState) -> list[dict]:
    return [
        {
            "query": state.with_changes(section=section).query_string(),
            "label": label,
            "active": section == state.section,
        }
        for section, label in SECTIONS.items()
    ]


def period_links(state: ViewState, today: date) -> list[dict]:
    return [
        {
            "query": state.with_changes(date=preset_date(period, today).isoformat(), period=period).query_string(),
            "label": label,
            "active": state.period == period,
        }
        for period, label in PERIOD_BUTTONS.items()
    ]


def section_context(state: ViewState, db: Session, today: date) -> tuple[str, dict[str, Any]]:
    if state.section == "sales":
        report = reports.sales_report(db, state.date, state.period, state.employee, today=today)
        return "sales.html", {"report": report}
    if state.section == "drawers":
        return "drawers.html", {"drawers": reports.list_drawers(db, state.status, None, state.date)}
    if state.section == "suppliers":
        return "suppliers.html", {"report": reports.supplier_invoices(db, state.status, None, state.date)}
    if state.section == "customers":
        report = reports.customer_payments(db, None, state.payment_method, state.date)
        return "customers.html", {"report": report}
    if state.section == "inventory":
        history = reports.inventory_history(db, None, state.transaction_type, state.date)
        return "inventory.html", {"history": history}
    if state.section == "restaurant":
        return "restaurant.html", {"tables": reports.restaurant_tables(db, state.status)}
    summary = reports.dashboard_summary(db, state.date, state.period, today=today)
    return "dashboard.html", {"summary": summary}


def page_context(state: ViewState, db: Session, today: Optional[date] = None) -> dict[str, Any]:
    today = today or date.today()
    if state.date:
        parse_reference_date(state.date)
    section_template, context = section_context(state, db, today)
    return {
        **context,
        "state": state,
        "title": SECTIONS.get(state.section, SECTIONS["dashboard"]),
        "navigation": navigation_links(state),
        "periods": period_links(state, today),
        "employees": reports.list_employees(db),
        "reference": state.date or today.isoformat(),
        "section_template": section_template,
    }
