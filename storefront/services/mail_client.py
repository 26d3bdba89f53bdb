# storefront/services/mail_client.py
import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from storefront.utils.settings import MAIL_API_URL, MAIL_API_KEY, MAIL_FROM
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _transient(exc: BaseException) -> bool:
    #network trouble or a 5xx from the mail API, a 4xx is our fault
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        return exc.response is not None and exc.response.status_code >= 500
    return False


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(_transient),
    )


class MailClient:
    """Sends email through a transactional mail HTTP API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: int = 5,
    ):
        self.api_url = (api_url if api_url is not None else MAIL_API_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else MAIL_API_KEY
        self.sender = sender or MAIL_FROM
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_url)

    @http_retry()
    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.configured:
            logger.warning(f"Mail API not configured, dropping '{subject}' to {to}")
            return False

        logger.info(f"MailClient POST {self.api_url} to={to} subject={subject!r}")

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        resp = requests.post(
            self.api_url,
            json={
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            },
            headers=headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return True
