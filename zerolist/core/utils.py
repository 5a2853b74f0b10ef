import re
import math
import secrets
import ipaddress
import datetime
from typing import Optional
from zerolist import configs


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254
# Width of Signup.ip_address
MAX_IP_LENGTH = 64


def generate_token(length: int = 32) -> str:
    """Hex token with `length` bytes of entropy."""
    return secrets.token_hex(length)

def normalize_email(email: str) -> str:
    return email.strip().lower()

def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email)) and len(email) <= MAX_EMAIL_LENGTH

def slugify(value: str) -> str:
    value = value.lower().strip()
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[\s_-]+", "-", value)
    return value.strip("-")

def utcnow() -> datetime.datetime:
    """Naive UTC now, the format every timestamp column is stored in."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)

def isoformat(dt: Optional[datetime.datetime]) -> Optional[str]:
    """ISO-8601 with millisecond precision and a `Z` suffix."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec="milliseconds") + "Z"

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def _parse_ip(value: Optional[str]) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(value.strip())) if value else None
    except ValueError:
        return None

def get_client_ip(request) -> Optional[str]:
    """Caller IP for rate limiting and signup records.

    Behind a trusted proxy the Cloudflare header wins, then the first
    forwarded hop. Otherwise, or when neither holds a valid address, the
    socket peer.
    """
    if configs.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for", "").split(",")[0]
        for value in (request.headers.get("cf-connecting-ip"), forwarded):
            if ip := _parse_ip(value):
                return ip
    if request.client and request.client.host:
        return request.client.host[:MAX_IP_LENGTH]
    return None

def get_base_url(request) -> str:
    if configs.BASE_URL:
        return configs.BASE_URL
    return f"{request.url.scheme}://{request.url.netloc}"
