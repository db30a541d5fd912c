"""Staff order listing filters.

``mode`` picks the delivery window (today, tomorrow, or everything) and
defaults to today.  ``month`` (``YYYY-MM``) narrows ``mode=all`` to one
calendar month and is rejected with any other mode.  ``outlet`` keeps a
single sales outlet (``ALL`` disables it).  Days are computed in the
operational timezone (``settings.TIME_ZONE``).
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Tuple

import django_filters
from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.orders.constants import ALL_OUTLETS, ListMode
from modules.orders.models import Order

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def month_bounds(value: str) -> Tuple[date, date]:
    """Return ``[first day, first day of next month)`` for ``YYYY-MM``."""
    match = MONTH_PATTERN.match(value or "")
    if not match:
        raise ValidationError("Month must use the YYYY-MM format.")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 01 and 12.")
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class OrderFilterForm(forms.Form):
    def clean(self):
        cleaned = super().clean()
        if cleaned.get("month") and cleaned.get("mode") != ListMode.ALL:
            raise ValidationError({"month": "Month can only be used with mode=all."})
        return cleaned


class OrderFilter(django_filters.FilterSet):
    mode = django_filters.ChoiceFilter(
        choices=ListMode.choices, method="filter_mode", empty_label=None
    )
    month = django_filters.CharFilter(method="filter_month", validators=[month_bounds])
    outlet = django_filters.CharFilter(method="filter_outlet")

    class Meta:
        model = Order
        fields = ["mode", "month", "outlet"]
        form = OrderFilterForm

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and not data.get("mode"):
            data = data.copy()
            data["mode"] = ListMode.TODAY
        super().__init__(data, *args, **kwargs)

    def filter_mode(self, queryset, name, value):
        today = timezone.localdate()
        if value == ListMode.TODAY:
            return queryset.filter(delivery_date=today)
        if value == ListMode.TOMORROW:
            return queryset.filter(delivery_date=today + timedelta(days=1))
        return queryset

    def filter_month(self, queryset, name, value):
        start, end = month_bounds(value)
        return queryset.filter(delivery_date__gte=start, delivery_date__lt=end)

    def filter_outlet(self, queryset, name, value):
        value = value.strip()
        if not value or value == ALL_OUTLETS:
            return queryset
        return queryset.filter(sales_outlet=value)
