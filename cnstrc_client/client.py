import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from cnstrc_client.api import (
    AutocompleteAPI,
    BrowseAPI,
    CatalogAPI,
    RecommendationsAPI,
    SearchAPI,
)
from cnstrc_client.config import DEFAULT_CLIENT_VERSION, DEFAULT_SERVICE_URL, ClientConfig
from cnstrc_client.utils.metrics import APIMetrics

logger = logging.getLogger(__name__)

class ConstructorIO:
    """
    Entry point of the client.

    Holds one immutable ``ClientConfig`` shared by the ``search``, ``browse``,
    ``autocomplete``, ``recommendations`` and ``catalog`` interfaces, plus the
    request metrics they record into.
    """

    def __init__(self, api_key: Optional[str] = None, client_id: Optional[str] = None,
                 session_id: Optional[str] = None, service_url: Optional[str] = None,
                 version: Optional[str] = None, user_id: Optional[str] = None,
                 segments: Optional[Sequence[str]] = None, test_cells: Optional[Mapping[str, str]] = None,
                 security_token: Optional[str] = None, api_token: Optional[str] = None,
                 fetch: Optional[Callable] = None, config: Optional[ClientConfig] = None):
        if config is None:
            config = ClientConfig(
                api_key=api_key,
                client_id=client_id,
                session_id=session_id,
                service_url=service_url or DEFAULT_SERVICE_URL,
                version=version or DEFAULT_CLIENT_VERSION,
                user_id=user_id,
                segments=segments or (),
                test_cells=test_cells or {},
                security_token=security_token,
                api_token=api_token,
                fetch=fetch
            )

        self.metrics = APIMetrics()

        # Expose API modules
        self.search = SearchAPI(config, self.metrics)
        self.browse = BrowseAPI(config, self.metrics)
        self.autocomplete = AutocompleteAPI(config, self.metrics)
        self.recommendations = RecommendationsAPI(config, self.metrics)
        self.catalog = CatalogAPI(config, self.metrics)

        self._config = config

    @classmethod
    def from_env(cls, **overrides: Any) -> 'ConstructorIO':
        """Build a client from CONSTRUCTORIO_* environment variables and a .env file"""
        return cls(config=ClientConfig.from_env(**overrides))

    @property
    def options(self) -> ClientConfig:
        return self._config

    def _modules(self):
        return (self.search, self.browse, self.autocomplete, self.recommendations, self.catalog)

    def set_client_options(self, api_key: Optional[str] = None, segments: Optional[Sequence[str]] = None,
                           test_cells: Optional[Mapping[str, str]] = None, user_id: Optional[str] = None) -> ClientConfig:
        """
        Update the client options, only the supplied values are applied

        Calls already in flight keep the options they started with.

        Args:
            api_key (str): API key
            segments (list): User segments
            test_cells (dict): User test cells
            user_id (str): User ID
        """
        changes: Dict[str, Any] = {}
        if api_key:
            changes['api_key'] = api_key
        if segments:
            changes['segments'] = segments
        if test_cells:
            changes['test_cells'] = test_cells
        if user_id:
            changes['user_id'] = user_id

        if not changes:
            return self._config

        config = self._config.updated(**changes)
        for module in self._modules():
            module.config = config
        self._config = config

        logger.debug(f"Client options updated: {', '.join(sorted(changes))}")
        return config

    async def test_connection(self) -> Dict[str, Any]:
        """Test connection to the API"""
        return await self.autocomplete.test_connection()
