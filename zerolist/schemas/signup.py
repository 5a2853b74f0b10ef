from pydantic import AliasGenerator, BaseModel, Field, field_serializer
from pydantic.alias_generators import to_camel
from typing import Dict, Literal, Optional
from datetime import datetime
from zerolist.core.utils import isoformat

Status = Literal["pending", "confirmed", "invited"]

class SignupRequest(BaseModel):
    email: str = Field(..., min_length=1)
    custom_data: Optional[Dict[str, str]] = None
    referral_source: Optional[str] = Field(None, max_length=100)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class SignupUpdate(BaseModel):
    status: Optional[Status] = None

class Signup(BaseModel):
    id: str
    waitlist_id: str
    email: str
    position: int
    status: Status
    custom_data: Dict[str, str] = {}
    referral_source: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime

    @field_serializer("confirmed_at", "created_at")
    def _timestamps(self, value):
        return isoformat(value)

    class Config:
        from_attributes = True
        alias_generator = AliasGenerator(serialization_alias=to_camel)
