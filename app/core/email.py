import smtplib
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List

from app.core.config import settings

logger = logging.getLogger(__name__)


def _send_email(to_email: str, subject: str, plain_text: str, html_text: str) -> None:
    """Low-level helper to send one email via SMTP."""
    if not all([settings.SMTP_HOST, settings.SMTP_USER, settings.SMTP_PASSWORD, settings.FROM_EMAIL]):
        logger.warning("SMTP not fully configured; skipping email to %s.", to_email)
        return

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.FROM_EMAIL
    msg["To"] = to_email
    if settings.REPLY_TO_EMAIL:
        msg["Reply-To"] = settings.REPLY_TO_EMAIL

    msg.attach(MIMEText(plain_text, "plain"))
    msg.attach(MIMEText(html_text, "html"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT or 587) as server:
        server.ehlo()
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.FROM_EMAIL, to_email, msg.as_string())


def _rupiah(amount: float) -> str:
    return "Rp " + f"{amount:,.0f}".replace(",", ".")


def send_overdue_report(
    to_emails: List[str],
    koperasi_name: str,
    overdue_loans: List[dict],
) -> None:
    """Email admins the loans that just went overdue.

    Only call this when there is at least one loan to report.
    Each overdue_loan dict: {"borrower_name": str, "category": str, "loan_amount": float, "due_date": str}
    """
    if not to_emails:
        return

    subject = f"{koperasi_name} - {len(overdue_loans)} pinjaman jatuh tempo"

    # ---- plain text --------------------------------------------------------
    lines = [f"{koperasi_name} - Overdue Loan Report", ""]
    lines.append(f"LOANS NOW OVERDUE ({len(overdue_loans)}):")
    for item in overdue_loans:
        lines.append(
            f"  - {item['borrower_name']} ({item['category']}): "
            f"{_rupiah(item['loan_amount'])}, due {item['due_date']}"
        )
    lines.append("")
    lines.append("This is an automated notification from the koperasi dashboard.")
    plain_text = "\n".join(lines)

    # ---- HTML --------------------------------------------------------------
    rows = ""
    for item in overdue_loans:
        rows += (
            f'<tr><td style="padding:6px 12px;border-bottom:1px solid #e2e8f0;">{item["borrower_name"]}</td>'
            f'<td style="padding:6px 12px;border-bottom:1px solid #e2e8f0;">{item["category"]}</td>'
            f'<td style="padding:6px 12px;border-bottom:1px solid #e2e8f0;text-align:right;">{_rupiah(item["loan_amount"])}</td>'
            f'<td style="padding:6px 12px;border-bottom:1px solid #e2e8f0;">{item["due_date"]}</td></tr>'
        )

    html_text = f"""
    <html>
    <body style="font-family:Arial,sans-serif;color:#1e3a5f;background:#f0fdf4;padding:24px;">
      <div style="max-width:560px;margin:0 auto;background:#ffffff;border-radius:12px;
                  border:2px solid #bbf7d0;padding:32px;">
        <h2 style="color:#15803d;margin-bottom:4px;">Overdue Loan Report</h2>
        <p style="font-size:13px;color:#64748b;margin-top:0;">{koperasi_name}</p>
        <table style="width:100%;border-collapse:collapse;font-size:14px;">
          <tr style="background:#f0fdf4;">
            <th style="padding:8px 12px;text-align:left;">Borrower</th>
            <th style="padding:8px 12px;text-align:left;">Category</th>
            <th style="padding:8px 12px;text-align:right;">Amount</th>
            <th style="padding:8px 12px;text-align:left;">Due</th>
          </tr>
          {rows}
        </table>
        <p style="font-size:12px;color:#94a3b8;margin-top:24px;">
          This is an automated notification from the koperasi dashboard.
        </p>
      </div>
    </body>
    </html>
    """

    for email_addr in to_emails:
        try:
            _send_email(email_addr, subject, plain_text, html_text)
            logger.info("Overdue report email sent to %s", email_addr)
        except Exception:
            logger.exception("Failed to send overdue report to %s", email_addr)
