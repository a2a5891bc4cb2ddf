"""
Account emails: credentials for team-created customers and password resets.

Delivery order:
    1. The backend mail endpoint (MAIL_ENDPOINT_URL), POST {to, subject, html, text}
    2. EmailJS, when its service, template and public key are configured
       (credentials emails only; the EmailJS template renders its own body)
    3. Nothing worked: the message is written to the log and False is returned

Email failure never fails the request that triggered it.
"""

import httpx
from typing import Any, Dict, Optional
from pydantic import BaseModel
from core.config import Settings, settings
from core.exceptions import EmailDeliveryError
from services.rendering import render_template
import logging

logger = logging.getLogger(__name__)

CREDENTIALS_SUBJECT = "Your {company} Account - Login Credentials"
RESET_SUBJECT = "Reset your {company} password"


class EmailMessage(BaseModel):
    to: str
    subject: str
    html: str
    text: str


class EmailService:

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or settings
        self.transport = transport

    @property
    def login_url(self) -> str:
        return f"{self.config.APP_BASE_URL}/login"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_credentials_email(
        self,
        customer_name: str,
        customer_email: str,
        temporary_password: str
    ) -> EmailMessage:
        context = {
            "company": self.config.MAIL_FROM_NAME,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "temporary_password": temporary_password,
            "login_url": self.login_url,
        }
        return EmailMessage(
            to=customer_email,
            subject=CREDENTIALS_SUBJECT.format(company=self.config.MAIL_FROM_NAME),
            html=render_template("credentials_email.html", **context),
            text=render_template("credentials_email.txt", **context).strip(),
        )

    def render_password_reset_email(
        self,
        customer_name: str,
        customer_email: str,
        reset_url: str
    ) -> EmailMessage:
        context = {
            "company": self.config.MAIL_FROM_NAME,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "reset_url": reset_url,
            "expires_minutes": self.config.RESET_TOKEN_EXPIRE_MINUTES,
        }
        return EmailMessage(
            to=customer_email,
            subject=RESET_SUBJECT.format(company=self.config.MAIL_FROM_NAME),
            html=render_template("password_reset_email.html", **context),
            text=render_template("password_reset_email.txt", **context).strip(),
        )

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_email(self, message: EmailMessage) -> bool:
        """Send through the backend endpoint; logs the transcript on failure."""
        try:
            await self._send_via_endpoint(message)
            return True
        except EmailDeliveryError as e:
            logger.warning(f"Mail endpoint failed: {e.message}")

        self._log_transcript(message)
        return False

    async def send_customer_credentials_email(
        self,
        customer_name: str,
        customer_email: str,
        temporary_password: str
    ) -> bool:
        """
        Deliver login credentials to a customer created by staff.

        Returns:
            True when one of the transports accepted the message
        """
        message = self.render_credentials_email(customer_name, customer_email, temporary_password)

        try:
            await self._send_via_endpoint(message)
            logger.info(f"Credentials email sent to {customer_email} via mail endpoint")
            return True
        except EmailDeliveryError as e:
            logger.warning(f"Mail endpoint failed, trying alternative method: {e.message}")

        if self.config.emailjs_configured:
            try:
                await self._send_via_emailjs({
                    "to_email": customer_email,
                    "to_name": customer_name,
                    "customer_email": customer_email,
                    "temporary_password": temporary_password,
                    "login_url": self.login_url,
                })
                logger.info(f"Credentials email sent to {customer_email} via EmailJS")
                return True
            except EmailDeliveryError as e:
                logger.error(f"EmailJS sending failed: {e.message}")

        self._log_transcript(message)
        return False

    async def send_password_reset_email(
        self,
        customer_name: str,
        customer_email: str,
        reset_url: str
    ) -> bool:
        message = self.render_password_reset_email(customer_name, customer_email, reset_url)
        return await self.send_email(message)

    async def _send_via_endpoint(self, message: EmailMessage) -> None:
        if not self.config.MAIL_ENDPOINT_URL:
            raise EmailDeliveryError("MAIL_ENDPOINT_URL is not configured")
        await self._post(self.config.MAIL_ENDPOINT_URL, message.model_dump())

    async def _send_via_emailjs(self, template_params: Dict[str, Any]) -> None:
        payload = {
            "service_id": self.config.EMAILJS_SERVICE_ID,
            "template_id": self.config.EMAILJS_TEMPLATE_ID,
            "user_id": self.config.EMAILJS_PUBLIC_KEY,
            "template_params": template_params,
        }
        await self._post(self.config.EMAILJS_API_URL, payload)

    async def _post(self, url: str, payload: Dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.config.HTTP_TIMEOUT, transport=self.transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Could not reach {url}", context={"url": url}, original_exception=e)

        if not response.is_success:
            raise EmailDeliveryError(
                f"{url} answered {response.status_code}",
                context={"url": url, "status_code": response.status_code}
            )

    @staticmethod
    def _log_transcript(message: EmailMessage) -> None:
        logger.warning(
            "Email could not be delivered. Transcript follows.\n"
            f"To: {message.to}\n"
            f"Subject: {message.subject}\n\n"
            f"{message.text}"
        )
