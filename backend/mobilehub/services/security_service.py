# /mobilehub/services/security_service.py

import hmac
import hashlib
import re

# Webhook signature verification and input sanitisation for inbound
# WhatsApp events.

MAX_MESSAGE_LENGTH = 4096


class SecurityService:
    @staticmethod
    def verify_webhook_signature(payload: bytes, signature: str, secret: str) -> bool:
        if not signature or not signature.startswith('sha256='):
            return False
        expected_signature = hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected_signature, signature[7:])


class EnhancedSecurityService(SecurityService):
    @staticmethod
    def sanitize_phone_number(phone: str) -> str:
        """
        Sanitizes a phone number.
        - Returns a normalized E.164-style string (e.g., +919876543210) if valid.
        - Returns an empty string for invalid or empty inputs (instead of raising).
        """
        if not phone or not isinstance(phone, str):
            return ""

        # Remove all characters except digits and leading +
        clean_phone = re.sub(r"[^\d+]", "", phone.strip())

        if not clean_phone.startswith("+"):
            clean_phone = "+" + clean_phone.lstrip("+")

        # Require 10-15 digits after +
        if not re.match(r"^\+\d{10,15}$", clean_phone):
            return ""

        return clean_phone

    @staticmethod
    def validate_message_content(message: str) -> str:
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValueError("Message too long")
        message = message.strip()
        if not message:
            raise ValueError("Message is empty")
        return message
