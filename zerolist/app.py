#!/usr/bin/env python3

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from zerolist import configs, __version__ as VERSION
from zerolist.core import db as database
from zerolist.core.exceptions import (
    ZerolistAPIError, ValidationError, NotFoundError, InternalError
)
from zerolist.core.origins import cors_headers
from zerolist.core.utils import isoformat, utcnow
from zerolist.routes import public, admin

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/w/"
HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


class AdminCORSMiddleware(CORSMiddleware):
    """CORS for the dashboard origins. The public API answers its own
    preflights against each waitlist's allowed origins, so it is skipped.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["path"].startswith(PUBLIC_PREFIX):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


app = FastAPI(
    title="zerolist API",
    description="zerolist: self-hosted waitlists with double opt-in and analytics",
    version=VERSION,
)

app.add_middleware(
    AdminCORSMiddleware,
    allow_origins=configs.ADMIN_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_scope(request: Request, call_next):
    token = database.request_scope.set(object())
    try:
        response = await call_next(request)
    finally:
        database.session.remove()
        database.request_scope.reset(token)
    if origin := getattr(request.state, "cors_origin", None):
        response.headers.update(cors_headers(origin))
    return response


@app.exception_handler(ZerolistAPIError)
async def api_error_handler(request: Request, exc: ZerolistAPIError):
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=exc.headers or None)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        field = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{field}: {errors[0].get('msg')}" if field else errors[0].get("msg", message)
    return JSONResponse(ValidationError(message).to_dict(), status_code=400)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        error = NotFoundError().to_dict()
    else:
        code = HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR")
        error = {"error": {"code": code, "message": str(exc.detail)}}
    return JSONResponse(error, status_code=exc.status_code, headers=getattr(exc, "headers", None))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(InternalError().to_dict(), status_code=500)


@app.get("/api/health")
async def health():
    return {"status": "ok", "timestamp": isoformat(utcnow())}

@app.get("/api/config")
async def config():
    return {"demoMode": configs.DEMO_MODE}

app.include_router(public.router, prefix="/api/w")
app.include_router(admin.router, prefix="/api/admin")

database.init()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("zerolist.app:app", **configs.OPTIONS)
