"""
Renewal Notification Formatter

Turns a user's due subscriptions into the strings used by the renewal
reminder email: message, numbered list, date and subject line.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from subtrack.domain.subscription import days_between, utcnow
from subtrack.infrastructure.exceptions import ConfigurationError


@dataclass(frozen=True)
class FormattedRenewalNotification:
    """Template variables for one renewal reminder."""
    renewal_message: str
    subscriptions_list: str
    formatted_date: str
    subject: str


@dataclass(frozen=True)
class ReminderTemplates:
    """Locale-specific wording. ``{n}`` is the day count, ``{unit}`` day/days."""
    due_today: str
    due_in_one_day: str
    due_in_days: str
    day_singular: str
    day_plural: str
    subject_single: str
    subject_multiple: str


TEMPLATES: Dict[str, ReminderTemplates] = {
    "en": ReminderTemplates(
        due_today="renew today",
        due_in_one_day="renew in 1 day",
        due_in_days="renew in {n} days",
        day_singular="day",
        day_plural="days",
        subject_single="Reminder: {name} renews in {n} {unit}",
        subject_multiple="Reminder: {count} subscriptions renew in {n} {unit}",
    ),
    "pt-BR": ReminderTemplates(
        due_today="suas assinaturas vencem hoje",
        due_in_one_day="suas assinaturas vencem em 1 dia",
        due_in_days="suas assinaturas vencem em {n} dias",
        day_singular="dia",
        day_plural="dias",
        subject_single="Lembrete: {name} vence em {n} {unit}",
        subject_multiple="Lembrete: {count} assinaturas vencem em {n} {unit}",
    ),
}


class RenewalNotificationFormatter:
    """
    Pure formatter for renewal reminders.

    Args:
        locale: Key of ``TEMPLATES`` ("en" or "pt-BR")
    """

    def __init__(self, locale: str = "en"):
        if locale not in TEMPLATES:
            raise ConfigurationError(
                f"Unsupported notification locale: {locale}",
                missing_keys=["notification_locale"],
            )
        self.locale = locale
        self._templates = TEMPLATES[locale]

    def format(
        self,
        subscription_names: List[str],
        next_billing_date: datetime,
        reference_date: Optional[datetime] = None,
    ) -> FormattedRenewalNotification:
        reference_date = reference_date or utcnow()
        days_left = days_between(reference_date, next_billing_date)

        return FormattedRenewalNotification(
            renewal_message=self._format_renewal_message(days_left),
            subscriptions_list=self._format_subscriptions_list(subscription_names),
            formatted_date=next_billing_date.strftime("%d/%m/%Y"),
            subject=self._format_subject(subscription_names, days_left),
        )

    def _format_renewal_message(self, days_left: int) -> str:
        if days_left == 0:
            return self._templates.due_today
        if days_left == 1:
            return self._templates.due_in_one_day
        return self._templates.due_in_days.format(n=days_left)

    @staticmethod
    def _format_subscriptions_list(subscription_names: List[str]) -> str:
        return "<br>".join(
            f"{index}. {name}" for index, name in enumerate(subscription_names, start=1)
        )

    def _format_subject(self, subscription_names: List[str], days_left: int) -> str:
        unit = self._templates.day_singular if days_left == 1 else self._templates.day_plural

        if len(subscription_names) == 1:
            return self._templates.subject_single.format(
                name=subscription_names[0], n=days_left, unit=unit
            )
        return self._templates.subject_multiple.format(
            count=len(subscription_names), n=days_left, unit=unit
        )
