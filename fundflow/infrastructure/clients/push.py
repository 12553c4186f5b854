"""Push notification client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Any, Dict
from fundflow.config import settings
from fundflow.domain.exceptions import NotificationDeliveryError
from fundflow.infrastructure.observability.metrics import push_latency_histogram, push_failure_counter


class PushClient:
    """Client for a OneSignal-compatible push notification API"""

    def __init__(
        self,
        api_url: str | None = None,
        app_id: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.api_url = api_url or settings.push_api_url
        self.app_id = app_id if app_id is not None else settings.push_app_id
        self.api_key = api_key if api_key is not None else settings.push_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max(1, settings.push_max_retries)
        self.backoff_base = settings.push_backoff_base

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.api_key)

    async def send(self, target: str, title: Dict[str, str], body: Dict[str, str], data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deliver one notification to a single device.

        Retry strategy:
        - Exponential backoff: base, 2x base, 4x base ...
        - Retries on 5xx errors and network failures; 4xx fails immediately

        Raises:
            NotificationDeliveryError: On missing credentials or final failure
        """
        if not self.configured:
            raise NotificationDeliveryError("Push credentials are not configured")

        payload = {
            "app_id": self.app_id,
            "include_player_ids": [target],
            "headings": title,
            "contents": body,
            "data": data,
        }
        headers = {"Authorization": f"Basic {self.api_key}", "Content-Type": "application/json"}

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                try:
                    with push_latency_histogram.time():
                        response = await client.post(self.api_url, json=payload, headers=headers)
                        response.raise_for_status()
                        return response.json()

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    push_failure_counter.inc()
                    status = e.response.status_code
                    if status < 500 or attempt >= self.max_retries:
                        raise NotificationDeliveryError(
                            f"Push provider error: {status}", status=status, body=e.response.text[:500]
                        ) from e

                except httpx.RequestError as e:
                    attempt += 1
                    push_failure_counter.inc()
                    if attempt >= self.max_retries:
                        raise NotificationDeliveryError(f"Push provider unreachable: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)
