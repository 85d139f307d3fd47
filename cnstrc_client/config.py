import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from cnstrc_client.exceptions import ValidationError

PACKAGE_VERSION = '1.0.0'
DEFAULT_SERVICE_URL = 'https://ac.cnstrc.com'
DEFAULT_CLIENT_VERSION = f'cio-py-client-{PACKAGE_VERSION}'


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    client_id: str
    session_id: str
    service_url: str = DEFAULT_SERVICE_URL
    version: str = DEFAULT_CLIENT_VERSION
    user_id: Optional[str] = None
    segments: Tuple[str, ...] = ()
    test_cells: Mapping[str, str] = field(default_factory=dict)
    security_token: Optional[str] = None
    api_token: Optional[str] = None
    fetch: Optional[Callable] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        self.validate_config(self)

        # Freeze the collection fields so the config cannot be changed in place
        object.__setattr__(self, 'service_url', self.service_url.rstrip('/'))
        object.__setattr__(self, 'segments', tuple(self.segments or ()))
        object.__setattr__(self, 'test_cells', MappingProxyType(dict(self.test_cells or {})))

    @classmethod
    def from_env(cls, **overrides: Any) -> 'ClientConfig':
        load_dotenv(find_dotenv(usecwd=True))
        overrides = {k: v for k, v in overrides.items() if v is not None}

        required_vars = {
            'api_key': os.getenv('CONSTRUCTORIO_API_KEY'),
            'client_id': os.getenv('CONSTRUCTORIO_CLIENT_ID'),
            'session_id': os.getenv('CONSTRUCTORIO_SESSION_ID'),
        }
        required_vars.update({k: v for k, v in overrides.items() if k in required_vars and v})

        missing = [k for k, v in required_vars.items() if not v]
        if missing:
            raise ValidationError(f"Missing required environment variables: {', '.join(missing)}")

        segments = os.getenv('CONSTRUCTORIO_SEGMENTS')
        optional_vars = {
            'service_url': os.getenv('CONSTRUCTORIO_SERVICE_URL') or DEFAULT_SERVICE_URL,
            'user_id': os.getenv('CONSTRUCTORIO_USER_ID'),
            'api_token': os.getenv('CONSTRUCTORIO_API_TOKEN'),
            'security_token': os.getenv('CONSTRUCTORIO_SECURITY_TOKEN'),
            'segments': tuple(s.strip() for s in segments.split(',') if s.strip()) if segments else (),
        }
        optional_vars.update({k: v for k, v in overrides.items() if k not in required_vars})

        return cls(**required_vars, **optional_vars)

    @classmethod
    def validate_config(cls, config: 'ClientConfig') -> None:
        """Validate configuration values"""
        if not config.api_key or not isinstance(config.api_key, str):
            raise ValidationError('API key is a required parameter of type string')

        if not config.client_id or not isinstance(config.client_id, str):
            raise ValidationError('Client ID is a required parameter of type string')

        if not config.session_id or not isinstance(config.session_id, str):
            raise ValidationError('Session ID is a required parameter of type string')

        if not config.service_url or not isinstance(config.service_url, str):
            raise ValidationError('service_url must be a non-empty string')

        if not config.version or not isinstance(config.version, str):
            raise ValidationError('version must be a non-empty string')

        if config.user_id is not None and not isinstance(config.user_id, str):
            raise ValidationError('user_id must be a string')

        if config.segments is not None:
            if isinstance(config.segments, str) or not all(isinstance(s, str) for s in config.segments):
                raise ValidationError('segments must be a list of strings')

        if config.test_cells is not None:
            if not isinstance(config.test_cells, Mapping):
                raise ValidationError('test_cells must be a mapping of strings')
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in config.test_cells.items()):
                raise ValidationError('test_cells must be a mapping of strings')

        for name in ('security_token', 'api_token'):
            value = getattr(config, name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f'{name} must be a string')

        if config.fetch is not None and not callable(config.fetch):
            raise ValidationError('fetch must be callable')

    def updated(self, **changes: Any) -> 'ClientConfig':
        """Return a copy of the config with the given fields replaced"""
        return replace(self, **changes)
