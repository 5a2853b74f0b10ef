#!/usr/bin/env python

"""
    Public signup intake and email confirmation for zerolist.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from zerolist.core.dispatch import Dispatcher
from zerolist.core.emails import Mailer, is_email_configured
from zerolist.core.models import Waitlist, Signup, PENDING, CONFIRMED, ACTIVE_STATUSES
from zerolist.core.utils import generate_token, normalize_email, is_valid_email, utcnow
from zerolist.core.webhooks import Webhook, SIGNUP_CREATED, SIGNUP_CONFIRMED
from zerolist.core.exceptions import (
    WaitlistNotFoundError,
    InvalidEmailError,
    ValidationError,
    AlreadySignedUpError,
    NotFoundError,
    InternalError,
)

logger = logging.getLogger(__name__)


class SignupFlow:

    # Attempts at claiming a free position before giving up
    MAX_POSITION_ATTEMPTS = 5

    MSG_CHECK_EMAIL = "Please check your email to confirm your spot."
    MSG_RESENT = "Confirmation email resent. Please check your inbox."
    MSG_ON_LIST = "You're on the list!"
    MSG_CONFIRMED = "Your email has been confirmed!"
    MSG_ALREADY_CONFIRMED = "Your email is already confirmed."

    @classmethod
    def get_waitlist(cls, slug: str) -> Waitlist:
        if not (waitlist := Waitlist.get_by_slug(slug)):
            raise WaitlistNotFoundError()
        return waitlist

    @classmethod
    def clean_custom_data(cls, fields, data: Optional[dict]) -> dict:
        """Applies a waitlist's custom field schema to submitted data.

        Required fields must be non-blank after trimming. Keys outside the
        schema are dropped, known values are trimmed and blank optional
        values are left out.
        """
        data = data or {}
        cleaned = {}
        for field in fields:
            value = data.get(field.key)
            value = value.strip() if isinstance(value, str) else ""
            if field.required and not value:
                raise ValidationError(f"{field.label} is required")
            if value:
                cleaned[field.key] = value
        return cleaned

    @classmethod
    def _webhook(cls, dispatcher: Dispatcher, event: str, waitlist, signup):
        if waitlist.webhook_url:
            # Payload is built now, the ORM objects are gone once the response is sent
            dispatcher.fire_and_forget(
                Webhook.send, waitlist.webhook_url, Webhook.payload(event, waitlist, signup))

    @classmethod
    def _notify(cls, dispatcher: Dispatcher, waitlist, signup, base_url: str):
        dispatcher.best_effort(Mailer.send_welcome, waitlist, signup, base_url)
        dispatcher.best_effort(Mailer.send_admin_notification, waitlist, signup, base_url)

    @classmethod
    def _resend(cls, dispatcher: Dispatcher, waitlist, signup, base_url: str) -> dict:
        signup.reissue_token()
        dispatcher.required(Mailer.send_confirmation, waitlist, signup, base_url)
        return {
            "success": True,
            "message": cls.MSG_RESENT,
            "position": signup.position,
            "requiresConfirmation": True,
            "redirectUrl": waitlist.redirect_url,
        }

    @classmethod
    def _insert(cls, waitlist, **fields) -> Signup:
        """Claims the next position, retrying when a concurrent signup took it."""
        for attempt in range(1, cls.MAX_POSITION_ATTEMPTS + 1):
            waitlist.lock()
            position = Signup.next_position(waitlist.id)
            try:
                return Signup.create(waitlist_id=waitlist.id, position=position, **fields)
            except IntegrityError:
                if Signup.find(waitlist.id, fields["email"]):
                    raise AlreadySignedUpError()
                logger.warning(
                    f"[Signup] Position {position} on {waitlist.slug} taken, "
                    f"retrying ({attempt}/{cls.MAX_POSITION_ATTEMPTS})")
        raise InternalError("Could not assign a waitlist position. Please try again.")

    @classmethod
    def signup(cls, slug: str, email: str, dispatcher: Dispatcher, base_url: str,
               custom_data: dict = None, referral_source: str = None,
               ip_address: str = None, user_agent: str = None) -> dict:
        waitlist = cls.get_waitlist(slug)

        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmailError()

        custom_data = cls.clean_custom_data(waitlist.fields, custom_data)
        email_configured = is_email_configured()

        if existing := Signup.find(waitlist.id, email):
            if existing.status in ACTIVE_STATUSES:
                raise AlreadySignedUpError()
            if waitlist.double_opt_in and existing.status == PENDING and email_configured:
                return cls._resend(dispatcher, waitlist, existing, base_url)
            raise AlreadySignedUpError()

        use_double_opt_in = waitlist.double_opt_in and email_configured
        if waitlist.double_opt_in and not email_configured:
            logger.warning(
                "[Signup] Double opt-in enabled but email not configured, "
                "falling back to direct confirmation")

        signup = cls._insert(
            waitlist,
            email=email,
            status=PENDING if use_double_opt_in else CONFIRMED,
            custom_data=custom_data,
            referral_source=referral_source or None,
            ip_address=ip_address,
            user_agent=user_agent or None,
            confirmation_token=generate_token() if use_double_opt_in else None,
            confirmed_at=None if use_double_opt_in else utcnow(),
        )
        logger.info(f"[Signup] {waitlist.slug} #{signup.position} ({signup.status})")

        if use_double_opt_in:
            # The row stays committed if this fails; resubmitting resends it
            dispatcher.required(Mailer.send_confirmation, waitlist, signup, base_url)
        else:
            cls._notify(dispatcher, waitlist, signup, base_url)
        cls._webhook(dispatcher, SIGNUP_CREATED, waitlist, signup)

        return {
            "success": True,
            "message": cls.MSG_CHECK_EMAIL if use_double_opt_in else cls.MSG_ON_LIST,
            "position": signup.position,
            "requiresConfirmation": use_double_opt_in,
            "redirectUrl": waitlist.redirect_url,
        }

    @classmethod
    def confirm(cls, slug: str, token: str, dispatcher: Dispatcher, base_url: str) -> dict:
        """Redeems a confirmation token.

        The returned dict carries `redirectUrl` when the waitlist has one; the
        caller turns that into a redirect. A token that was already redeemed
        has been cleared and is reported as not found.
        """
        waitlist = cls.get_waitlist(slug)
        if not (signup := Signup.find_by_token(waitlist.id, token)):
            raise NotFoundError("Confirmation link")

        if signup.is_active:
            return {
                "success": True,
                "message": cls.MSG_ALREADY_CONFIRMED,
                "position": signup.position,
                "redirectUrl": waitlist.redirect_url,
            }

        signup.confirm()
        logger.info(f"[Confirm] {waitlist.slug} #{signup.position} confirmed")
        cls._notify(dispatcher, waitlist, signup, base_url)
        cls._webhook(dispatcher, SIGNUP_CONFIRMED, waitlist, signup)

        return {
            "success": True,
            "message": cls.MSG_CONFIRMED,
            "position": signup.position,
            "redirectUrl": waitlist.redirect_url,
        }

    @classmethod
    def status(cls, slug: str) -> dict:
        waitlist = cls.get_waitlist(slug)
        return {
            "name": waitlist.name,
            "slug": waitlist.slug,
            "logoUrl": waitlist.logo_url,
            "primaryColor": waitlist.primary_color,
            "customFields": waitlist.custom_fields or [],
            "signupCount": waitlist.confirmed_count(),
        }
