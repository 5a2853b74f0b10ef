#!/usr/bin/env python
"""
    Waitlist Schema for zerolist,
    including the custom field variants a waitlist's signup form is built from.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from urllib.parse import urlparse
from pydantic import AfterValidator, AliasGenerator, BaseModel, EmailStr, Field, TypeAdapter, field_serializer
from pydantic.alias_generators import to_camel
from zerolist.core.utils import isoformat

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


def _check_url(value):
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute http(s) URL")
    return value

Url = Annotated[Optional[str], AfterValidator(_check_url)]


class _CustomFieldBase(BaseModel):
    key: str = Field(..., min_length=1)
    label: str
    required: bool = False
    placeholder: Optional[str] = None

class TextField(_CustomFieldBase):
    type: Literal["text"]

class TextareaField(_CustomFieldBase):
    type: Literal["textarea"]

class SelectField(_CustomFieldBase):
    type: Literal["select"]
    options: List[str] = []

CustomField = Annotated[
    Union[TextField, TextareaField, SelectField],
    Field(discriminator="type"),
]

CustomFields = TypeAdapter(List[CustomField])


def parse_custom_fields(raw) -> list:
    """Stored JSON -> list of typed custom fields."""
    return CustomFields.validate_python(raw or [])

def dump_custom_fields(fields) -> list:
    return [f.model_dump(exclude_none=True) for f in fields or []]


class WaitlistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=50)
    logo_url: Url = None
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    double_opt_in: Optional[bool] = None
    redirect_url: Url = None
    custom_fields: Optional[List[CustomField]] = None
    notify_on_signup: Optional[bool] = None
    notify_email: Optional[EmailStr] = None
    webhook_url: Url = None
    email_from_name: Optional[str] = None
    email_subject_confirmation: Optional[str] = None
    email_subject_welcome: Optional[str] = None
    allowed_origins: Optional[List[str]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class WaitlistUpdate(WaitlistCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class Waitlist(BaseModel):
    id: str
    name: str
    slug: str
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    double_opt_in: bool
    redirect_url: Optional[str] = None
    custom_fields: List[CustomField] = []
    notify_on_signup: bool
    notify_email: Optional[str] = None
    webhook_url: Optional[str] = None
    email_from_name: Optional[str] = None
    email_subject_confirmation: Optional[str] = None
    email_subject_welcome: Optional[str] = None
    allowed_origins: List[str] = []
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _timestamps(self, value):
        return isoformat(value)

    class Config:
        from_attributes = True
        alias_generator = AliasGenerator(serialization_alias=to_camel)
        json_schema_extra = {
            "example": {
                "id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                "name": "Beta",
                "slug": "beta",
                "primaryColor": "#6366f1",
                "doubleOptIn": True,
                "customFields": [
                    {"key": "company", "label": "Company", "type": "text", "required": False}
                ],
                "notifyOnSignup": True,
                "allowedOrigins": ["*.example.com"],
            }
        }
