from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from pydantic import BaseModel

DAY = "day"
WEEK = "week"
MONTH = "month"
CUSTOM = "custom"

PERIODS = (DAY, WEEK, MONTH, CUSTOM)

START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)


class InvalidDateError(ValueError):
    pass


class DateRange(BaseModel):
    model_config = {"frozen": True}

    start: datetime
    end: datetime

    def contains(self, moment: Optional[datetime]) -> bool:
        return moment is not None and self.start <= moment <= self.end

    def to_payload(self) -> dict:
        return {
            "startDate": isoformat_ms(self.start),
            "endDate": isoformat_ms(self.end),
        }


def isoformat_ms(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds")


def parse_reference_date(value: Union[str, date, datetime, None], today: Optional[date] = None) -> date:
    if value is None or value == "":
        return today or date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError as exc:
        raise InvalidDateError(f"invalid date: {value!r}") from exc


def normalize_period(period: Optional[str]) -> str:
    if period in (WEEK, MONTH):
        return period
    return DAY


def last_day_of_month(reference: date) -> date:
    return reference.replace(day=calendar.monthrange(reference.year, reference.month)[1])


def resolve_range(
    reference_date: Union[str, date, datetime, None] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
) -> DateRange:
    reference = parse_reference_date(reference_date, today=today)
    window = normalize_period(period)
    if window == WEEK:
        try:
            last_day = reference + timedelta(days=6)
        except OverflowError as exc:
            raise InvalidDateError(f"date out of range: {reference_date!r}") from exc
    elif window == MONTH:
        last_day = last_day_of_month(reference)
    else:
        last_day = reference
    return DateRange(
        start=datetime.combine(reference, START_OF_DAY),
        end=datetime.combine(last_day, END_OF_DAY),
    )
