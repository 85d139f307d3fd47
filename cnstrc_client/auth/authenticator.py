import base64
import logging
from typing import Any, Dict, Optional

from cnstrc_client.config import ClientConfig
from cnstrc_client.exceptions import ValidationError

logger = logging.getLogger(__name__)

class Authenticator:
    def __init__(self, config: ClientConfig):
        self.config = config

    def get_basic_auth_header(self) -> Dict[str, str]:
        """Get the basic auth header for catalog management calls"""
        api_token = self.config.api_token
        if not api_token or not isinstance(api_token, str):
            raise ValidationError('api_token is required for catalog requests')

        encoded = base64.b64encode(f'{api_token}:'.encode('utf-8')).decode('ascii')
        return {'Authorization': f'Basic {encoded}'}

    def get_headers(self, user: Optional[Dict[str, Any]] = None, base_headers: Optional[Dict] = None,
                    basic_auth: bool = False) -> Dict[str, str]:
        """
        Get request headers

        Args:
            user (dict): Resolved user context, supplies ``user_ip`` and ``user_agent``
            base_headers (dict): Headers to start from
            basic_auth (bool): Add the token based Authorization header
        """
        headers = dict(base_headers or {})
        user = user or {}

        if self.config.security_token and isinstance(self.config.security_token, str):
            headers['x-cnstrc-token'] = self.config.security_token

        if user.get('user_ip') and isinstance(user['user_ip'], str):
            headers['X-Forwarded-For'] = user['user_ip']

        if user.get('user_agent') and isinstance(user['user_agent'], str):
            headers['User-Agent'] = user['user_agent']

        if basic_auth:
            headers.update(self.get_basic_auth_header())

        return headers
