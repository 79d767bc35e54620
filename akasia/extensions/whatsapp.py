import requests
from flask import current_app


class WhatsAppClient:
    """Sends messages through the wa-multi-session gateway."""

    def __init__(self):
        self.api_url = None
        self.session_id = None
        self.api_key = None
        self.default_recipient = None
        self.timeout = 10

    def init_app(self, app):
        self.api_url = (app.config.get('WA_API_URL') or '').rstrip('/') or None
        self.session_id = app.config.get('WA_SESSION_ID')
        self.api_key = app.config.get('WA_API_KEY')
        self.default_recipient = app.config.get('WA_RECIPIENT')
        self.timeout = app.config.get('WA_TIMEOUT_SECONDS', 10)

    def send(self, message, to=None):
        recipient = to or self.default_recipient

        if not all([self.api_url, self.session_id, self.api_key, recipient]):
            current_app.logger.warning("WhatsApp API not configured, skipping notification")
            return {'success': False, 'error': 'WhatsApp API not configured'}

        try:
            response = requests.post(
                f"{self.api_url}/sessions/{self.session_id}/send",
                headers={
                    'Content-Type': 'application/json',
                    'X-API-Key': self.api_key,
                },
                json={'to': recipient, 'message': message},
                timeout=self.timeout
            )
        except requests.RequestException:
            current_app.logger.exception("Failed to send WhatsApp message")
            return {'success': False, 'error': 'Network error'}

        if not response.ok:
            current_app.logger.error("WhatsApp API error: %s", response.text)
            return {'success': False, 'error': f'API error: {response.status_code}'}

        current_app.logger.info("WhatsApp message sent to %s", recipient)
        return {'success': True}
