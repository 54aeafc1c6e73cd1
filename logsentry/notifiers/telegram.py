"""
Telegram notifier for Logsentry.
"""

from typing import Any, ClassVar

import requests

from logsentry.core import Notifier
from logsentry.errors import DeliveryError
from logsentry.logging_config import get_logger
from logsentry.registry import register_notifier

logger = get_logger(__name__)


@register_notifier("telegram")
class TelegramNotifier(Notifier):
    """
    Sends messages to a chat through the Telegram Bot API.

    Config:
        token: Bot token issued by BotFather
        chat_id: Destination chat identifier
        timeout_seconds: HTTP timeout per request (default: 10)
        max_retries: Extra attempts after a failed send (default: 0)
        retry_backoff_seconds: Initial delay between attempts (default: 1.0)
    """

    TELEGRAM_API_URL: ClassVar[str] = "https://api.telegram.org/bot{token}/{method}"

    MAX_MESSAGE_LENGTH: ClassVar[int] = 4096

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.token: str = config["token"]
        self.chat_id: int = config["chat_id"]
        self.timeout: float = config.get("timeout_seconds", 10)

    def _call(self, method: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        """Call a Bot API method and return its result."""
        url = self.TELEGRAM_API_URL.format(token=self.token, method=method)
        try:
            response = requests.post(url, json=payload or {}, timeout=self.timeout)
        except requests.RequestException as e:
            raise self._masked(method, e) from None

        # Error responses carry a JSON description, which beats the bare status
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            try:
                response.raise_for_status()
            except requests.RequestException as e:
                raise self._masked(method, e) from None
            raise DeliveryError(f"Telegram {method} returned invalid JSON")

        if not body.get("ok"):
            raise DeliveryError(
                f"Telegram {method} rejected (HTTP {response.status_code}): "
                f"{body.get('description', 'unknown error')}"
            )
        result: dict[str, Any] = body.get("result", {})
        return result

    def _masked(self, method: str, error: Exception) -> DeliveryError:
        """Wrap a request failure, keeping the token out of the message."""
        return DeliveryError(
            f"Telegram {method} failed: {error}".replace(self.token, "<token>")
        )

    def connect(self) -> None:
        """Verify the bot token with getMe."""
        me = self._call("getMe")
        logger.info("Connected to Telegram as @%s", me.get("username", "unknown"))

    def send(self, message: str) -> None:
        """Send the message to the configured chat."""
        if len(message) > self.MAX_MESSAGE_LENGTH:
            message = message[:self.MAX_MESSAGE_LENGTH - 1] + "…"

        self._call("sendMessage", {"chat_id": self.chat_id, "text": message})
        logger.info("Telegram notification sent to chat %s", self.chat_id)


# Export for dynamic importing
__all__ = ["TelegramNotifier"]
