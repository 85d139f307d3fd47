from cnstrc_client.client import ConstructorIO
from cnstrc_client.config import PACKAGE_VERSION as __version__
from cnstrc_client.config import ClientConfig
from cnstrc_client.exceptions import (
    AuthenticationError,
    ConstructorIOException,
    HttpError,
    MalformedResponseError,
    TransportError,
    ValidationError,
)
from cnstrc_client.utils.params import UserContext

__all__ = [
    'ConstructorIO',
    'ClientConfig',
    'UserContext',
    'ConstructorIOException',
    'ValidationError',
    'TransportError',
    'HttpError',
    'AuthenticationError',
    'MalformedResponseError',
    '__version__'
]
