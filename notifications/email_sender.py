# StockPulse/notifications/email_sender.py
import base64
import json
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_GMAIL_API_BASE_URL = 'https://gmail.googleapis.com/gmail/v1'


def encode_message(to: str, subject: str, body: str) -> str:
    """RFC 2822 message, base64url-encoded without padding, as the Gmail API expects in `raw`."""
    email_content = "\r\n".join([
        "From: me",
        f"To: {to}",
        f"Subject: {subject}",
        "",
        body,
    ]).strip()
    encoded = base64.urlsafe_b64encode(email_content.encode('utf-8')).decode('ascii')
    return encoded.rstrip('=')


class GmailSender:
    """
    Sends vendor order e-mails through the Gmail REST API.
    Obtaining the OAuth access token is left to the caller.
    """
    def __init__(self, access_token: str, base_url: str = DEFAULT_GMAIL_API_BASE_URL):
        if not access_token:
            raise ValueError("A Gmail OAuth access token is required.")

        self.base_url = base_url.rstrip('/')
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        logger.info(f"GmailSender initialized for {self.base_url}")

    def send_email(self, to: str, subject: str, body: str) -> bool:
        if not to or not subject:
            logger.warning("GMAIL_SENDER: Recipient or subject is empty. Cannot send e-mail.")
            return False

        url = f"{self.base_url}/users/me/messages/send"
        payload = {"raw": encode_message(to, subject, body)}

        response = None
        try:
            logger.info(f"GMAIL_SENDER: Sending '{subject}' to {to}.")
            response = requests.post(url, headers=self.headers, json=payload, timeout=15)
            response.raise_for_status()

            response_json = response.json()
            logger.info(f"GMAIL_SENDER: E-mail sent. Message id: {response_json.get('id')}")
            return True

        except requests.exceptions.RequestException as e:
            logger.error(f"GMAIL_SENDER: Failed to send e-mail. Error: {e}", exc_info=True)
            if response is not None:
                logger.error(f"GMAIL_SENDER: Response Status: {response.status_code}, Response Text: {response.text}")
            return False
        except json.JSONDecodeError as e:
            logger.error(f"GMAIL_SENDER: Failed to decode JSON response. Error: {e}", exc_info=True)
            return False
