from .autocomplete_api import AutocompleteAPI
from .browse_api import BrowseAPI
from .catalog_api import CatalogAPI
from .recommendations_api import RecommendationsAPI
from .search_api import SearchAPI

__all__ = [
    'AutocompleteAPI',
    'BrowseAPI',
    'CatalogAPI',
    'RecommendationsAPI',
    'SearchAPI'
]
