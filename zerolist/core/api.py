#!/usr/bin/env python

"""
    Admin operations for zerolist: waitlist CRUD, signup listing,
    CSV export, signup status changes and email previews.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import io
import csv
import math
import logging
from typing import Optional
from sqlalchemy.sql import func
from zerolist.core.db import session as db
from zerolist.core.emails import Mailer, TEMPLATES
from zerolist.core.models import Waitlist, Signup, DEFAULT_COLOR
from zerolist.core.stats import Period, confirmed_sum, waitlist_stats, dashboard_stats
from zerolist.core.utils import slugify, isoformat
from zerolist.core.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    SignupNotFoundError,
    ValidationError,
    WaitlistNotFoundError,
)
from zerolist.schemas.waitlist import (
    Waitlist as WaitlistOut,
    WaitlistCreate,
    WaitlistUpdate,
    dump_custom_fields,
)
from zerolist.schemas.signup import Signup as SignupOut, SignupUpdate

logger = logging.getLogger(__name__)


class WaitlistAPI:

    DEFAULT_LIMIT = 50
    MAX_LIMIT = 100
    SORTS = {
        "position": Signup.position,
        "email": Signup.email,
        "status": Signup.status,
        "createdAt": Signup.created_at,
    }
    # Columns that cannot be cleared through a PATCH
    NOT_NULL = {
        "name", "slug", "double_opt_in", "notify_on_signup",
        "custom_fields", "allowed_origins", "primary_color",
    }

    @classmethod
    def serialize(cls, waitlist: Waitlist) -> dict:
        return WaitlistOut.model_validate(waitlist).model_dump(by_alias=True)

    @classmethod
    def serialize_signup(cls, signup: Signup) -> dict:
        return SignupOut.model_validate(signup).model_dump(by_alias=True)

    @classmethod
    def get_waitlist(cls, waitlist_id: str) -> Waitlist:
        if not (waitlist := Waitlist.get(waitlist_id)):
            raise WaitlistNotFoundError()
        return waitlist

    @classmethod
    def list_waitlists(cls) -> list:
        rows = db.query(
            Waitlist,
            func.count(Signup.id),
            confirmed_sum,
        ).outerjoin(Signup, Signup.waitlist_id == Waitlist.id).group_by(
            Waitlist.id
        ).order_by(Waitlist.created_at.desc()).all()
        return [
            dict(cls.serialize(w), signupCount=count, confirmedCount=int(active or 0))
            for w, count, active in rows
        ]

    @classmethod
    def create_waitlist(cls, data: WaitlistCreate) -> Waitlist:
        slug = data.slug or slugify(data.name)
        if not slug:
            raise ValidationError("A slug could not be derived from the name")
        if Waitlist.slug_taken(slug):
            raise AlreadyExistsError("Waitlist with this slug")

        waitlist = Waitlist.create(
            name=data.name,
            slug=slug,
            logo_url=data.logo_url,
            primary_color=data.primary_color or DEFAULT_COLOR,
            double_opt_in=True if data.double_opt_in is None else data.double_opt_in,
            redirect_url=data.redirect_url,
            custom_fields=dump_custom_fields(data.custom_fields),
            notify_on_signup=True if data.notify_on_signup is None else data.notify_on_signup,
            notify_email=data.notify_email,
            webhook_url=data.webhook_url,
            email_from_name=data.email_from_name,
            email_subject_confirmation=data.email_subject_confirmation,
            email_subject_welcome=data.email_subject_welcome,
            allowed_origins=data.allowed_origins or [],
        )
        logger.info(f"Created waitlist {waitlist.slug} ({waitlist.id})")
        return waitlist

    @classmethod
    def update_waitlist(cls, waitlist_id: str, data: WaitlistUpdate) -> Waitlist:
        waitlist = cls.get_waitlist(waitlist_id)
        changes = data.model_dump(exclude_unset=True)
        changes = {
            k: v for k, v in changes.items()
            if not (v is None and k in cls.NOT_NULL)
        }
        if "custom_fields" in changes:
            changes["custom_fields"] = dump_custom_fields(data.custom_fields)

        slug = changes.get("slug")
        if slug and slug != waitlist.slug and Waitlist.slug_taken(slug, exclude_id=waitlist.id):
            raise AlreadyExistsError("Waitlist with this slug")
        return waitlist.update(**changes)

    @classmethod
    def delete_waitlist(cls, waitlist_id: str) -> None:
        waitlist = cls.get_waitlist(waitlist_id)
        logger.info(f"Deleting waitlist {waitlist.slug} ({waitlist.id})")
        waitlist.delete()

    @classmethod
    def list_signups(cls, waitlist_id: str, page: int = 1, limit: int = DEFAULT_LIMIT,
                     search: Optional[str] = None, status: Optional[str] = None,
                     sort: str = "position", order: str = "desc") -> dict:
        cls.get_waitlist(waitlist_id)
        page = max(1, page or 1)
        limit = min(cls.MAX_LIMIT, max(1, limit or cls.DEFAULT_LIMIT))

        query = db.query(Signup).filter(Signup.waitlist_id == waitlist_id)
        if search := (search or "").strip():
            query = query.filter(Signup.email.ilike(f"%{search}%"))
        if status:
            query = query.filter(Signup.status == status)

        total = query.count()
        column = cls.SORTS.get(sort, Signup.position)
        column = column.asc() if order == "asc" else column.desc()
        signups = query.order_by(column).offset((page - 1) * limit).limit(limit).all()

        return {
            "signups": [cls.serialize_signup(s) for s in signups],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    @classmethod
    def export_csv(cls, waitlist_id: str) -> tuple:
        """Returns `(filename, csv_text)` with every signup in position order."""
        waitlist = cls.get_waitlist(waitlist_id)
        keys = [f.key for f in waitlist.fields]
        signups = db.query(Signup).filter(
            Signup.waitlist_id == waitlist.id
        ).order_by(Signup.position.asc()).all()

        out = io.StringIO()
        csv.writer(out, lineterminator="\n").writerow(
            ["position", "email", "status", "referral_source", *keys, "confirmed_at", "created_at"])
        rows = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for s in signups:
            data = s.custom_data or {}
            rows.writerow([
                str(s.position),
                s.email,
                s.status,
                s.referral_source or "",
                *(data.get(k) or "" for k in keys),
                isoformat(s.confirmed_at) or "",
                isoformat(s.created_at),
            ])
        return f"{waitlist.slug}-signups.csv", out.getvalue()

    @classmethod
    def update_signup(cls, waitlist_id: str, signup_id: str, data: SignupUpdate) -> Signup:
        if not (signup := Signup.get_in_waitlist(waitlist_id, signup_id)):
            raise SignupNotFoundError()
        if data.status:
            signup.set_status(data.status)
        return signup

    @classmethod
    def stats(cls, waitlist_id: str, from_: str = None, to: str = None, compare: bool = False) -> dict:
        waitlist = cls.get_waitlist(waitlist_id)
        return waitlist_stats(waitlist, Period.parse(from_, to), compare=compare)

    @classmethod
    def dashboard(cls, from_: str = None, to: str = None, compare: bool = False) -> dict:
        return dashboard_stats(Period.parse(from_, to), compare=compare)

    @classmethod
    def preview_email(cls, waitlist_id: str, template: str, base_url: str,
                      email: str = None, position: int = None) -> str:
        waitlist = cls.get_waitlist(waitlist_id)
        if template not in TEMPLATES:
            raise NotFoundError("Email template")
        return Mailer.preview(
            template, waitlist, base_url,
            email=email or "test@example.com",
            position=position or 47,
        )
