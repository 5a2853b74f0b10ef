#!/usr/bin/env python

"""
    Public routes for zerolist: signup, confirmation, status and
    the per-waitlist CORS preflight.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from zerolist.core.dispatch import Dispatcher
from zerolist.core.exceptions import ForbiddenError
from zerolist.core.limiter import signup_limiter
from zerolist.core.models import Waitlist
from zerolist.core.origins import is_origin_allowed, cors_headers
from zerolist.core.signups import SignupFlow
from zerolist.core.utils import get_base_url, get_client_ip
from zerolist.routes import demo_guard
from zerolist.schemas.signup import SignupRequest

router = APIRouter(dependencies=[Depends(demo_guard)])


def origin_allowed(origin: str, slug: str) -> bool:
    waitlist = Waitlist.get_by_slug(slug)
    return is_origin_allowed(origin, waitlist.allowed_origins if waitlist else [])

def cors_gate(request: Request, slug: str):
    """Checks a browser caller against the waitlist's allowed origins.

    Allowed origins are echoed back by the app middleware through
    `request.state.cors_origin`.
    """
    if not (origin := request.headers.get("origin")):
        return
    if not origin_allowed(origin, slug):
        raise ForbiddenError("This domain is not authorized to submit to this waitlist")
    request.state.cors_origin = origin


@router.options("/{slug}")
@router.options("/{slug}/{rest:path}")
def preflight(request: Request, slug: str, rest: str = ""):
    if not (origin := request.headers.get("origin")):
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if not origin_allowed(origin, slug):
        return Response(status_code=status.HTTP_403_FORBIDDEN)
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers=cors_headers(origin, preflight=True),
    )

@router.post("/{slug}/signup", dependencies=[Depends(cors_gate), Depends(signup_limiter)])
def signup(request: Request, slug: str, body: SignupRequest, background_tasks: BackgroundTasks):
    return SignupFlow.signup(
        slug,
        body.email,
        dispatcher=Dispatcher(background_tasks),
        base_url=get_base_url(request),
        custom_data=body.custom_data,
        referral_source=body.referral_source,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

@router.get("/{slug}/confirm/{token}")
def confirm(request: Request, slug: str, token: str, background_tasks: BackgroundTasks):
    result = SignupFlow.confirm(
        slug, token,
        dispatcher=Dispatcher(background_tasks),
        base_url=get_base_url(request),
    )
    if redirect_url := result.pop("redirectUrl", None):
        # A returned Response carries its own background tasks
        return RedirectResponse(redirect_url, status_code=status.HTTP_302_FOUND,
                                background=background_tasks)
    return result

@router.get("/{slug}/status", dependencies=[Depends(cors_gate)])
def waitlist_status(slug: str):
    return SignupFlow.status(slug)
