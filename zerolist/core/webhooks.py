import httpx
import logging
from zerolist import configs

logger = logging.getLogger(__name__)

SIGNUP_CREATED = "signup.created"
SIGNUP_CONFIRMED = "signup.confirmed"


class Webhook:

    HTTP_HEADERS = configs.HTTP_HEADERS

    @classmethod
    def payload(cls, event: str, waitlist, signup) -> dict:
        timestamp = 'confirmed_at' if event == SIGNUP_CONFIRMED else 'created_at'
        return {
            "event": event,
            "waitlist": waitlist.summary(),
            "signup": signup.summary(timestamp=timestamp),
        }

    @classmethod
    def send(cls, url: str, payload: dict, timeout: int = None) -> None:
        """POSTs the JSON payload once. No signature, no retry."""
        with httpx.Client() as client:
            response = client.post(
                url,
                json=payload,
                headers=cls.HTTP_HEADERS,
                timeout=timeout or configs.HTTP_TIMEOUT,
            )
            logger.info(f"[Webhook] {payload.get('event')} -> {url}: {response.status_code}")
            response.raise_for_status()
