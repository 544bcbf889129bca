"""Browser-side logo client: one POST to the relay per brand name."""

from __future__ import annotations

import logging
from typing import Optional

import requests

import errors
from errors import RelayError

log = logging.getLogger(__name__)


class LogoClient:
    """Asks the relay for a logo and returns it as a data URI.

    Calls are independent and safe to re-invoke; nothing is retried here.
    """

    def __init__(
        self,
        relay_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 120.0,
    ) -> None:
        self.relay_url = relay_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def generate_logo(self, name: str, industry: str, tone: str) -> str:
        body = {"name": name, "industry": industry, "tone": tone}
        try:
            resp = self.session.post(self.relay_url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("Logo relay unreachable at %s: %s", self.relay_url, exc)
            raise RelayError(errors.UNREACHABLE, "Could not reach the logo service. Is the relay running?") from exc

        data = _json_or_none(resp)

        if not 200 <= resp.status_code < 300:
            message = (data or {}).get("error") or f"Logo generation failed ({resp.status_code})"
            reason = (data or {}).get("reason")
            if reason not in errors.REASONS:
                reason = errors.UPSTREAM_ERROR
            log.warning("Logo relay error %d for %r: %s (%s)", resp.status_code, name, message, reason)
            raise RelayError(reason, str(message), status=resp.status_code)

        image = (data or {}).get("image")
        if not isinstance(image, str) or not image.startswith("data:image/"):
            raise RelayError(errors.MALFORMED, "Invalid logo response from server", status=resp.status_code)
        return image


def _json_or_none(resp: requests.Response) -> Optional[dict]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
