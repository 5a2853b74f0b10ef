#!/usr/bin/env python

"""
    Admin routes for zerolist. Everything except `/auth` requires a
    Cloudflare Access identity and is rate limited per IP.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import HTMLResponse
from zerolist.core import auth
from zerolist.core.api import WaitlistAPI
from zerolist.core.limiter import api_limiter
from zerolist.core.utils import get_base_url
from zerolist.routes import demo_guard
from zerolist.schemas.signup import SignupUpdate, Status
from zerolist.schemas.waitlist import WaitlistCreate, WaitlistUpdate

router = APIRouter(dependencies=[Depends(demo_guard)])
protected = APIRouter(dependencies=[Depends(auth.require_admin), Depends(api_limiter)])


@router.get("/auth")
def check_auth(request: Request):
    return auth.check_auth(request)

# Waitlists

@protected.get("/waitlists")
def list_waitlists():
    return {"waitlists": WaitlistAPI.list_waitlists()}

@protected.post("/waitlists", status_code=status.HTTP_201_CREATED)
def create_waitlist(body: WaitlistCreate):
    return {"waitlist": WaitlistAPI.serialize(WaitlistAPI.create_waitlist(body))}

@protected.get("/waitlists/{waitlist_id}")
def get_waitlist(waitlist_id: str):
    return {"waitlist": WaitlistAPI.serialize(WaitlistAPI.get_waitlist(waitlist_id))}

@protected.patch("/waitlists/{waitlist_id}")
def update_waitlist(waitlist_id: str, body: WaitlistUpdate):
    return {"waitlist": WaitlistAPI.serialize(WaitlistAPI.update_waitlist(waitlist_id, body))}

@protected.delete("/waitlists/{waitlist_id}")
def delete_waitlist(waitlist_id: str):
    WaitlistAPI.delete_waitlist(waitlist_id)
    return {"success": True}

# Signups

@protected.get("/waitlists/{waitlist_id}/signups")
def list_signups(
        waitlist_id: str,
        page: int = 1,
        limit: int = WaitlistAPI.DEFAULT_LIMIT,
        search: Optional[str] = None,
        status: Optional[Status] = None,
        sort: str = "position",
        order: Literal["asc", "desc"] = "desc"):
    return WaitlistAPI.list_signups(
        waitlist_id, page=page, limit=limit, search=search,
        status=status, sort=sort, order=order,
    )

@protected.get("/waitlists/{waitlist_id}/signups/export")
def export_signups(waitlist_id: str):
    filename, content = WaitlistAPI.export_csv(waitlist_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@protected.patch("/waitlists/{waitlist_id}/signups/{signup_id}")
def update_signup(waitlist_id: str, signup_id: str, body: SignupUpdate):
    signup = WaitlistAPI.update_signup(waitlist_id, signup_id, body)
    return {"signup": WaitlistAPI.serialize_signup(signup)}

# Stats

@protected.get("/waitlists/{waitlist_id}/stats")
def waitlist_stats(
        waitlist_id: str,
        from_: Optional[str] = Query(None, alias="from"),
        to: Optional[str] = None,
        compare: bool = False):
    return WaitlistAPI.stats(waitlist_id, from_=from_, to=to, compare=compare)

@protected.get("/stats")
def dashboard_stats(
        from_: Optional[str] = Query(None, alias="from"),
        to: Optional[str] = None,
        compare: bool = False):
    return WaitlistAPI.dashboard(from_=from_, to=to, compare=compare)

# Email previews

@protected.get("/waitlists/{waitlist_id}/emails/{template}/preview", response_class=HTMLResponse)
def preview_email(
        request: Request,
        waitlist_id: str,
        template: str,
        email: Optional[str] = None,
        position: Optional[int] = None):
    return HTMLResponse(WaitlistAPI.preview_email(
        waitlist_id, template, get_base_url(request), email=email, position=position))


router.include_router(protected)
