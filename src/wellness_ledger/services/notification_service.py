"""
Notification service for ledger side effects

Every send is best-effort: failures are logged and reported as False, and
never propagate into the accounting operation that triggered them.
"""
from typing import Optional
import logging

from ..config import config
from ..db.models import PayoutRequest, Specialist
from .email_provider import EmailMessage, EmailProvider, get_email_provider

logger = logging.getLogger(__name__)


def format_minutes(minutes: int) -> str:
    """Render minutes as '2h 5m' / '45m'"""
    minutes = max(0, int(minutes))
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y") if value else "-"


class NotificationService:
    """Builds and dispatches ledger emails"""

    def __init__(self, email_provider: Optional[EmailProvider] = None):
        self._email_provider = email_provider

    @property
    def email_provider(self) -> EmailProvider:
        if self._email_provider is None:
            self._email_provider = get_email_provider()
        return self._email_provider

    def _send(self, message: EmailMessage, kind: str) -> bool:
        try:
            sent = self.email_provider.send(message)
        except Exception as e:
            logger.error(f"Failed to send {kind} email to {message.to}: {e}", exc_info=True)
            return False
        if not sent:
            logger.warning(f"{kind} email to {message.to} was not sent")
        return sent

    def send_low_minutes_warning(
        self,
        admin_email: str,
        company_name: str,
        minutes_used: int,
        minutes_included: int,
        usage_percentage: float,
    ) -> bool:
        """Warn a company admin that the monthly allowance is running low"""
        remaining = format_minutes(minutes_included - minutes_used)
        pct = round(usage_percentage)
        bar_width = min(usage_percentage, 100)

        html_body = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px;">
            <h2>Low Minutes Warning</h2>
            <p><strong>{company_name}</strong> has used <strong>{pct}%</strong> of the monthly wellness minutes allocation.</p>
            <div style="background: #e5e7eb; height: 20px; border-radius: 8px;">
                <div style="background: #f59e0b; height: 100%; width: {bar_width}%;"></div>
            </div>
            <p>Remaining: <strong>{remaining}</strong> ({minutes_used} of {minutes_included} minutes used)</p>
            <p>To keep wellness sessions available, consider upgrading your plan before your minutes run out.</p>
            <p><a href="{config.DASHBOARD_URL}">View Dashboard</a></p>
        </div>
        """
        text_body = (
            f"{company_name} has used {pct}% of its monthly wellness minutes.\n"
            f"Remaining: {remaining} ({minutes_used} of {minutes_included} minutes used).\n"
            f"Dashboard: {config.DASHBOARD_URL}\n"
        )

        return self._send(
            EmailMessage(
                to=admin_email,
                subject=f"Low Wellness Minutes Warning - {company_name}",
                html_body=html_body,
                text_body=text_body,
            ),
            kind="low minutes",
        )

    def send_payout_requested(self, payout: PayoutRequest, specialist: Specialist) -> bool:
        """Tell the platform admin a specialist is waiting to be paid"""
        period = f"{_format_date(payout.period_start)} - {_format_date(payout.period_end)}"
        tier = (specialist.rate_tier or "standard").title()

        html_body = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px;">
            <h2>Payout Request</h2>
            <p style="font-size: 28px; font-weight: bold;">${payout.amount:.2f}</p>
            <p>Specialist: {specialist.full_name} ({specialist.email})</p>
            <p>Rate tier: {tier}</p>
            <p>Period: {period}</p>
            <p>Request ID: {payout.id}</p>
        </div>
        """
        text_body = (
            f"Payout request {payout.id}: ${payout.amount:.2f}\n"
            f"Specialist: {specialist.full_name} ({specialist.email}), tier {tier}\n"
            f"Period: {period}\n"
        )

        return self._send(
            EmailMessage(
                to=config.PAYOUT_ADMIN_EMAIL,
                subject=f"Payout Request: {specialist.full_name} - ${payout.amount:.2f}",
                html_body=html_body,
                text_body=text_body,
            ),
            kind="payout requested",
        )

    def send_payout_processed(self, payout: PayoutRequest, specialist: Specialist) -> bool:
        """Tell the specialist their request was paid or rejected"""
        if payout.status == "rejected":
            subject = f"Payout request declined - ${payout.amount:.2f}"
            summary = f"Your payout request for ${payout.amount:.2f} was declined."
            if payout.rejection_reason:
                summary += f" Reason: {payout.rejection_reason}"
        else:
            subject = f"Payout sent - ${payout.amount:.2f}"
            summary = f"Your payout of ${payout.amount:.2f} has been processed."

        period = f"{_format_date(payout.period_start)} - {_format_date(payout.period_end)}"

        return self._send(
            EmailMessage(
                to=specialist.email,
                subject=subject,
                html_body=f"<p>Hello {specialist.full_name},</p><p>{summary}</p><p>Period: {period}</p>",
                text_body=f"Hello {specialist.full_name},\n\n{summary}\nPeriod: {period}\n",
            ),
            kind="payout processed",
        )


def get_notification_service() -> NotificationService:
    """Get notification service instance"""
    return NotificationService()
