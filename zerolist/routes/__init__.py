from fastapi import Request
from zerolist import configs
from zerolist.core.exceptions import ForbiddenError

WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
DEMO_MODE_MESSAGE = (
    "This action is disabled in demo mode. Deploy your own instance to make changes."
)


async def demo_guard(request: Request):
    """Rejects writes while the instance runs as a read-only demo."""
    if configs.DEMO_MODE and request.method.upper() in WRITE_METHODS:
        raise ForbiddenError(DEMO_MODE_MESSAGE)
