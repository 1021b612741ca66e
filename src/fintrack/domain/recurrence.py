"""Recurrence expansion for transactions and budgets."""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from fintrack.domain.entities import Budget, RecurrenceFrequency, TransactionDraft
from fintrack.domain.errors import ValidationError
from fintrack.utils.clock import IdGenerator
from fintrack.utils.date_parser import start_of_month, end_of_month, add_months, month_label

MAX_OCCURRENCES = 1000


def recurrence_frequency(value) -> RecurrenceFrequency:
    """Coerce a stored frequency string or enum member to ``RecurrenceFrequency``.

    Raises:
        ValidationError: If the value is missing or unknown
    """
    if value is None:
        raise ValidationError("Recurrence frequency is required", field="recurrence_frequency")
    try:
        return RecurrenceFrequency(value)
    except ValueError:
        raise ValidationError(f"Unknown recurrence frequency: {value}", field="recurrence_frequency")


def occurrence_date(start: date, frequency: RecurrenceFrequency, index: int) -> date:
    """Date of the ``index``-th occurrence (0 is ``start`` itself).

    Monthly and yearly steps are measured from ``start`` so the day of
    month is preserved and only clamped in short months.
    """
    if frequency == RecurrenceFrequency.DAILY:
        return start + timedelta(days=index)
    if frequency == RecurrenceFrequency.WEEKLY:
        return start + timedelta(weeks=index)
    if frequency == RecurrenceFrequency.MONTHLY:
        return start + relativedelta(months=index)
    if frequency == RecurrenceFrequency.YEARLY:
        return start + relativedelta(years=index)
    raise ValidationError(f"Unknown recurrence frequency: {frequency}", field="recurrence_frequency")


def occurrence_dates(start: date, end: date, frequency: RecurrenceFrequency) -> list[date]:
    """All occurrence dates from ``start`` up to and including ``end``.

    Raises:
        ValidationError: If ``end`` is before ``start`` or the schedule is too long
    """
    if end < start:
        raise ValidationError("Recurrence end date cannot be earlier than the start date", field="recurrence_end_date")
    dates = []
    index = 0
    while True:
        current = occurrence_date(start, frequency, index)
        if current > end:
            break
        if len(dates) >= MAX_OCCURRENCES:
            raise ValidationError(
                f"Recurring schedule produces more than {MAX_OCCURRENCES} occurrences",
                field="recurrence_end_date",
            )
        dates.append(current)
        index += 1
    return dates


def expand_transaction(template: TransactionDraft) -> list[TransactionDraft]:
    """Expand a recurring transaction template into one draft per occurrence.

    Each draft is identical to the template except for its date.

    Raises:
        ValidationError: If frequency or end date is missing or inconsistent
    """
    if not template.is_recurring:
        return [template]
    frequency = recurrence_frequency(template.recurrence_frequency)
    if template.recurrence_end_date is None:
        raise ValidationError("Recurrence end date is required", field="recurrence_end_date")
    return [
        replace(template, date=day, recurrence_frequency=frequency)
        for day in occurrence_dates(template.date, template.recurrence_end_date, frequency)
    ]


def expand_budget(
    template: Budget, start_date: date, number_of_months: int, ids: IdGenerator
) -> list[Budget]:
    """Expand a budget template into monthly siblings.

    Produces ``number_of_months`` budgets starting with the month of
    ``start_date``, each covering its calendar month, sharing one new
    ``parent_budget_id`` and starting with nothing spent.
    """
    if number_of_months < 1:
        raise ValidationError("Number of months must be at least 1", field="number_of_months")
    parent_id = ids.new_id()
    first = start_of_month(start_date)
    budgets = []
    for offset in range(number_of_months):
        month = add_months(first, offset)
        budgets.append(
            replace(
                template,
                id=ids.new_id(),
                name=f"{template.name} - {month_label(month)}",
                start_date=month,
                end_date=end_of_month(month),
                spent=Decimal("0"),
                is_recurring=True,
                parent_budget_id=parent_id,
                transaction_ids=(),
            )
        )
    return budgets
