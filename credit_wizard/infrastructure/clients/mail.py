"""Outbound mail for the assessment summary (Postmark, or log-only in development)"""

import asyncio
import base64
import logging
import uuid
from typing import Any, Dict, Optional

from postmarker.core import PostmarkClient

from credit_wizard.config import settings
from credit_wizard.domain.exceptions import DeliveryError
from credit_wizard.domain.ports import Artifact, DeliveryReceipt
from credit_wizard.infrastructure.observability.metrics import delivery_counter

logger = logging.getLogger(__name__)

SENDER_NAME = "Credit App"
SENDER_ADDRESS = "no-reply@creditapp.local"
SENDER = f"{SENDER_NAME} <{SENDER_ADDRESS}>"

SUBJECT = "Congratulations, you're approved"

TEXT_BODY = """Congratulations! You're approved for credit.

Your credit assessment summary is attached as a PDF.

If you didn't request this, reply to this email.
- Credit App
"""


def build_message(recipient: str, artifact: Artifact) -> Dict[str, Any]:
    """Postmark message payload with the PDF attached"""
    return {
        "From": SENDER,
        "To": recipient,
        "Subject": SUBJECT,
        "TextBody": TEXT_BODY,
        "Attachments": [
            {
                "Name": artifact.filename,
                "Content": base64.b64encode(artifact.content).decode("ascii"),
                "ContentType": artifact.content_type,
            }
        ],
    }


class PostmarkDispatcher:
    """Sends the assessment through Postmark; a single attempt, no retry"""

    def __init__(
        self,
        server_token: Optional[str] = None,
        message_stream: Optional[str] = None,
        client: Optional[PostmarkClient] = None,
    ):
        token = server_token or settings.postmark_server_token
        self.client = client or PostmarkClient(server_token=token)
        self.message_stream = message_stream or settings.postmark_message_stream

    async def dispatch(self, recipient: str, artifact: Artifact) -> DeliveryReceipt:
        """
        Raises:
            DeliveryError: Postmark rejected the message or was unreachable
        """
        message = build_message(recipient, artifact)
        message["MessageStream"] = self.message_stream

        try:
            response = await asyncio.to_thread(self.client.emails.send, **message)
        except Exception as e:
            delivery_counter.labels(outcome="failed").inc()
            raise DeliveryError(f"Mail delivery failed: {e}") from e

        delivery_counter.labels(outcome="sent").inc()
        message_id = response.get("MessageID")
        logger.info("Assessment email sent", extra={"message_id": message_id})
        return DeliveryReceipt(recipient=recipient, message_id=message_id)


class LogDispatcher:
    """Development transport: logs the message instead of sending it"""

    async def dispatch(self, recipient: str, artifact: Artifact) -> DeliveryReceipt:
        message_id = str(uuid.uuid4())
        delivery_counter.labels(outcome="sent").inc()
        logger.info(
            "[DEV MODE] Assessment email logged (not sent)",
            extra={
                "message_id": message_id,
                "subject": SUBJECT,
                "attachment": artifact.filename,
                "attachment_bytes": len(artifact.content),
            },
        )
        return DeliveryReceipt(recipient=recipient, message_id=message_id)


def build_dispatcher(adapter: Optional[str] = None, server_token: Optional[str] = None):
    """Pick the mail transport from configuration"""
    adapter = adapter or settings.mail_adapter
    token = server_token or settings.postmark_server_token

    if adapter == "postmark":
        if token:
            return PostmarkDispatcher(server_token=token)
        logger.warning("POSTMARK_SERVER_TOKEN not set - emails will be logged but not sent")

    return LogDispatcher()
