#!/usr/bin/env python

"""
    Waitlist and Signup models for zerolist,
    including the queries the signup workflow and admin API run against them.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import uuid
import logging
from sqlalchemy import (
    Column, String, Boolean, Integer, DateTime, JSON, ForeignKey,
    UniqueConstraint, Index
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.ext.hybrid import hybrid_property
from zerolist.core.db import session as db, Base
from zerolist.core.utils import generate_token, isoformat, utcnow
from zerolist.core.exceptions import DatabaseInsertError
from zerolist.schemas.waitlist import parse_custom_fields

logger = logging.getLogger(__name__)

PENDING = "pending"
CONFIRMED = "confirmed"
INVITED = "invited"
STATUSES = (PENDING, CONFIRMED, INVITED)
# Statuses that count as "confirmed" for totals and rates
ACTIVE_STATUSES = (CONFIRMED, INVITED)
DEFAULT_COLOR = "#6366f1"


def _uuid():
    return str(uuid.uuid4())


class Waitlist(Base):
    __tablename__ = 'waitlists'

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    slug = Column(String(50), unique=True, nullable=False)

    logo_url = Column(String)
    primary_color = Column(String(7), default=DEFAULT_COLOR)

    double_opt_in = Column(Boolean, default=True, nullable=False)
    redirect_url = Column(String)
    custom_fields = Column(JSON, default=list, nullable=False)

    notify_on_signup = Column(Boolean, default=True, nullable=False)
    notify_email = Column(String)
    webhook_url = Column(String)

    email_from_name = Column(String)
    email_subject_confirmation = Column(String)
    email_subject_welcome = Column(String)

    allowed_origins = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    signups = relationship(
        'Signup', back_populates='waitlist', cascade='all, delete-orphan')

    @property
    def fields(self):
        """The custom field schema as typed field objects."""
        return parse_custom_fields(self.custom_fields)

    @classmethod
    def get_by_slug(cls, slug):
        return db.query(cls).filter(cls.slug == slug).first()

    @classmethod
    def slug_taken(cls, slug, exclude_id=None):
        q = db.query(cls.id).filter(cls.slug == slug)
        if exclude_id:
            q = q.filter(cls.id != exclude_id)
        return q.first() is not None

    @classmethod
    def create(cls, **kwargs):
        try:
            waitlist = cls(**kwargs)
            db.add(waitlist)
            db.commit()
            return waitlist
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create waitlist: {e}")
            raise DatabaseInsertError("Failed to create waitlist.")

    def update(self, **changes):
        try:
            for key, value in changes.items():
                setattr(self, key, value)
            db.commit()
            return self
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to update waitlist {self.id}: {e}")
            raise DatabaseInsertError("Failed to update waitlist.")

    def delete(self):
        try:
            db.delete(self)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete waitlist {self.id}: {e}")
            raise DatabaseInsertError("Failed to delete waitlist.")

    def lock(self):
        """Row-locks the waitlist for the rest of the transaction where the
        store supports `SELECT ... FOR UPDATE` (a no-op on SQLite), which
        serializes position assignment for concurrent signups.
        """
        db.query(Waitlist.id).filter(Waitlist.id == self.id).with_for_update().first()

    def confirmed_count(self):
        return db.query(func.count(Signup.id)).filter(
            Signup.waitlist_id == self.id,
            Signup.status.in_(ACTIVE_STATUSES),
        ).scalar() or 0

    def summary(self):
        """The `waitlist` block of webhook payloads."""
        return {"id": self.id, "name": self.name, "slug": self.slug}


class Signup(Base):
    __tablename__ = 'signups'

    id = Column(String(36), primary_key=True, default=_uuid)
    waitlist_id = Column(
        String(36), ForeignKey('waitlists.id', ondelete='CASCADE'), nullable=False)
    email = Column(String(254), nullable=False)
    position = Column(Integer, nullable=False)
    status = Column(String(20), default=PENDING, nullable=False)

    custom_data = Column(JSON, default=dict)

    referral_source = Column(String(100))
    ip_address = Column(String(64))
    user_agent = Column(String)

    confirmation_token = Column(String(64))
    confirmed_at = Column(DateTime)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    waitlist = relationship('Waitlist', back_populates='signups')

    __table_args__ = (
        UniqueConstraint('waitlist_id', 'email', name='waitlist_email_unique'),
        UniqueConstraint('waitlist_id', 'position', name='waitlist_position_unique'),
        Index('status_idx', 'status'),
        Index('confirmation_token_idx', 'confirmation_token'),
        Index('created_at_idx', 'created_at'),
    )

    @hybrid_property
    def is_active(self):
        """Confirmed or invited."""
        return self.status in ACTIVE_STATUSES

    @is_active.expression
    def is_active(cls):
        return cls.status.in_(ACTIVE_STATUSES)

    @classmethod
    def find(cls, waitlist_id, email):
        return db.query(cls).filter(
            cls.waitlist_id == waitlist_id,
            cls.email == email
        ).first()

    @classmethod
    def find_by_token(cls, waitlist_id, token):
        return db.query(cls).filter(
            cls.waitlist_id == waitlist_id,
            cls.confirmation_token == token
        ).first()

    @classmethod
    def get_in_waitlist(cls, waitlist_id, signup_id):
        return db.query(cls).filter(
            cls.id == signup_id,
            cls.waitlist_id == waitlist_id
        ).first()

    @classmethod
    def next_position(cls, waitlist_id):
        highest = db.query(func.coalesce(func.max(cls.position), 0)).filter(
            cls.waitlist_id == waitlist_id).scalar()
        return (highest or 0) + 1

    @classmethod
    def create(cls, **kwargs):
        """Inserts and commits a signup. Uniqueness violations are re-raised
        as `IntegrityError` for the caller to classify.
        """
        try:
            signup = cls(**kwargs)
            db.add(signup)
            db.commit()
            return signup
        except IntegrityError:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create signup: {e}")
            raise DatabaseInsertError("Failed to create signup record.")

    def reissue_token(self):
        try:
            self.confirmation_token = generate_token()
            db.commit()
            return self.confirmation_token
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to reissue token for signup {self.id}: {e}")
            raise DatabaseInsertError("Failed to update signup.")

    def confirm(self):
        """Marks the signup confirmed and burns its token."""
        try:
            self.status = CONFIRMED
            self.confirmed_at = utcnow()
            self.confirmation_token = None
            db.commit()
            return self
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to confirm signup {self.id}: {e}")
            raise DatabaseInsertError("Failed to confirm signup.")

    def set_status(self, status):
        try:
            self.status = status
            if status == CONFIRMED and not self.confirmed_at:
                self.confirmed_at = utcnow()
            db.commit()
            return self
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to update signup {self.id}: {e}")
            raise DatabaseInsertError("Failed to update signup.")

    def summary(self, timestamp='created_at'):
        """The `signup` block of webhook payloads."""
        key = 'confirmedAt' if timestamp == 'confirmed_at' else 'createdAt'
        return {
            "email": self.email,
            "position": self.position,
            "status": self.status,
            "customData": self.custom_data or {},
            "referralSource": self.referral_source,
            key: isoformat(getattr(self, timestamp)),
        }
