#!/usr/bin/env python

"""
    Transactional emails for zerolist: confirmation, welcome and
    admin notification, rendered with Jinja2 and sent through Resend.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
import requests
from jinja2 import Environment, PackageLoader, select_autoescape
from zerolist import configs
from zerolist.core.exceptions import EmailError, NotFoundError
from zerolist.core.models import DEFAULT_COLOR

logger = logging.getLogger(__name__)

TEMPLATES = {
    "confirmation": "emails/confirmation.html",
    "welcome": "emails/welcome.html",
    "admin-notification": "emails/admin_notification.html",
}

env = Environment(
    loader=PackageLoader("zerolist", "templates"),
    autoescape=select_autoescape(["html"]),
)


def is_email_configured() -> bool:
    return bool(configs.RESEND_API_KEY and configs.RESEND_FROM_EMAIL)


class Mailer:

    SENDER_NAME = "zerolist"

    @classmethod
    def render(cls, template: str, **context) -> str:
        if template not in TEMPLATES:
            raise NotFoundError("Email template")
        return env.get_template(TEMPLATES[template]).render(**context)

    @classmethod
    def send(cls, to: str, subject: str, html: str, sender: str) -> dict:
        try:
            r = requests.post(
                configs.RESEND_API_URL,
                headers={
                    **configs.HTTP_HEADERS,
                    "Authorization": f"Bearer {configs.RESEND_API_KEY}",
                },
                json={
                    "from": f"{sender} <{configs.RESEND_FROM_EMAIL}>",
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
                timeout=configs.HTTP_TIMEOUT,
            )
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            logger.error(f"[Email] Resend rejected '{subject}' to {to}: {e}")
            raise EmailError()

    @classmethod
    def _branding(cls, waitlist) -> dict:
        return {
            "waitlist_name": waitlist.name,
            "logo_url": waitlist.logo_url,
            "primary_color": waitlist.primary_color or DEFAULT_COLOR,
        }

    @classmethod
    def confirmation_url(cls, base_url: str, waitlist, token: str) -> str:
        return f"{base_url}/api/w/{waitlist.slug}/confirm/{token}"

    @classmethod
    def admin_url(cls, base_url: str, waitlist) -> str:
        return f"{base_url}/admin/waitlists/{waitlist.id}/signups"

    @classmethod
    def send_confirmation(cls, waitlist, signup, base_url: str):
        """Required for double opt-in; raises EmailError when email is not set up."""
        if not is_email_configured():
            raise EmailError(
                "Email not configured. Set RESEND_API_KEY and RESEND_FROM_EMAIL "
                "to enable double opt-in.")
        html = cls.render(
            "confirmation",
            confirmation_url=cls.confirmation_url(base_url, waitlist, signup.confirmation_token),
            position=signup.position,
            **cls._branding(waitlist),
        )
        return cls.send(
            signup.email,
            waitlist.email_subject_confirmation
            or f"Confirm your spot on the {waitlist.name} waitlist",
            html,
            sender=waitlist.email_from_name or waitlist.name,
        )

    @classmethod
    def send_welcome(cls, waitlist, signup, base_url: str = None):
        if not is_email_configured():
            logger.info("[Email] Resend not configured, skipping welcome email")
            return None
        html = cls.render("welcome", position=signup.position, **cls._branding(waitlist))
        return cls.send(
            signup.email,
            waitlist.email_subject_welcome
            or f"You're #{signup.position} on the {waitlist.name} waitlist!",
            html,
            sender=waitlist.email_from_name or waitlist.name,
        )

    @classmethod
    def send_admin_notification(cls, waitlist, signup, base_url: str):
        if not waitlist.notify_on_signup:
            return None
        if not (is_email_configured() and waitlist.notify_email):
            logger.info("[Email] Admin notification not configured, skipping")
            return None
        html = cls.render(
            "admin-notification",
            waitlist_name=waitlist.name,
            signup_email=signup.email,
            position=signup.position,
            custom_data=signup.custom_data or {},
            referral_source=signup.referral_source,
            admin_url=cls.admin_url(base_url, waitlist),
        )
        return cls.send(
            waitlist.notify_email,
            f"New signup #{signup.position}: {signup.email}",
            html,
            sender=cls.SENDER_NAME,
        )

    @classmethod
    def preview(cls, template: str, waitlist, base_url: str, email: str = "test@example.com",
                position: int = 47, custom_data: dict = None, referral_source: str = None) -> str:
        """Renders a template with sample data for the admin email editor."""
        if template == "confirmation":
            return cls.render(
                template,
                confirmation_url=cls.confirmation_url(base_url, waitlist, "sample-token"),
                position=position,
                **cls._branding(waitlist),
            )
        if template == "welcome":
            return cls.render(template, position=position, **cls._branding(waitlist))
        return cls.render(
            template,
            waitlist_name=waitlist.name,
            signup_email=email,
            position=position,
            custom_data=custom_data or {},
            referral_source=referral_source,
            admin_url=cls.admin_url(base_url, waitlist),
        )
