# core/notifications.py
import requests
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
from core.config import settings
from core.logging_config import logger
from models.lead import Lead


# -----------------------------------------------------
# 📨 Send webhook (Discord, Slack, etc.)
# -----------------------------------------------------
def send_webhook_message(message: str, webhook_url: Optional[str] = None):
    webhook_url = webhook_url or settings.LEAD_WEBHOOK_URL
    if not webhook_url:
        logger.debug("Webhook URL not configured — skipping.")
        return

    try:
        payload = {"content": message}
        response = requests.post(webhook_url, json=payload, timeout=10)
        logger.info(f"Webhook sent (status {response.status_code})")
    except requests.RequestException as e:
        logger.warning(f"Webhook failed: {e}")


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def send_email(
    subject: str,
    body: str,
    recipients: Optional[List[str]] = None,
    html_body: Optional[str] = None,
):
    """
    Send email via SMTP.

    Args:
        subject: Email subject
        body: Plain text email body
        recipients: Recipient addresses (defaults to ADMIN_NOTIFICATION_EMAIL)
        html_body: Optional HTML email body
    """
    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASS

    if recipients:
        recipient_list = recipients
    else:
        recipient_list = [settings.ADMIN_NOTIFICATION_EMAIL] if settings.ADMIN_NOTIFICATION_EMAIL else []

    if not recipient_list:
        logger.warning("No recipients specified — skipping email.")
        return

    if not all([smtp_host, smtp_port, smtp_user, smtp_pass]):
        logger.warning("Email credentials missing — skipping email.")
        return

    try:
        msg = MIMEMultipart("alternative")
        msg["From"] = smtp_user
        msg["To"] = ", ".join(recipient_list)
        msg["Subject"] = subject

        msg.attach(MIMEText(body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP_SSL(smtp_host, smtp_port) as server:
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)

        logger.info(f"Email sent to {', '.join(recipient_list)}")

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email failed: {e}")
        raise


# -----------------------------------------------------
# 🆕 New lead alerts (best effort)
# -----------------------------------------------------
def format_lead_summary(lead: Lead) -> str:
    survey = lead.survey_responses
    interests = [
        label
        for label, flag in (
            ("website", survey.interested_in_website),
            ("chatbot", survey.interested_in_chatbot),
            ("AI agent", survey.interested_in_ai_agent),
            ("receptionist", survey.interested_in_receptionist),
        )
        if flag
    ]
    lines = [
        f"Name: {lead.name}",
        f"Email: {lead.email}",
        f"Mobile: {lead.mobile}",
        f"Clinic: {lead.clinic_name}",
        f"Reason: {lead.reason_for_contact}",
    ]
    if lead.referral_source:
        lines.append(f"Referral: {lead.referral_source}")
    if interests:
        lines.append(f"Interested in: {', '.join(interests)}")
    return "\n".join(lines)


def notify_new_lead(lead: Lead):
    """Admin e-mail + webhook for a public submission. Never raises."""
    summary = format_lead_summary(lead)

    try:
        send_email(subject=f"New lead: {lead.clinic_name}", body=summary)
    except (smtplib.SMTPException, OSError):
        logger.warning(f"Admin notification for lead {lead.id} was not delivered")

    send_webhook_message(f"🆕 New lead {lead.id}\n{summary}")
