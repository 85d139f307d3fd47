import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlencode

from cnstrc_client.config import ClientConfig
from cnstrc_client.exceptions import ValidationError

SORT_ORDERS = ('ascending', 'descending')
FMT_OPTION_KEYS = ('groups_max_depth', 'groups_start')
GROUPS_START_VALUES = ('current', 'top')
USER_STRING_FIELDS = ('session_id', 'client_id', 'user_id', 'user_ip', 'user_agent')

QueryPairs = List[Tuple[str, str]]


@dataclass
class UserContext:
    """Per-call identity overrides, merged over the client configuration"""
    session_id: Optional[str] = None
    client_id: Optional[str] = None
    user_id: Optional[str] = None
    segments: Optional[Sequence[str]] = None
    test_cells: Optional[Mapping[str, str]] = None
    user_ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union['UserContext', Mapping[str, Any], None]) -> 'UserContext':
        if value is None:
            return cls()
        if isinstance(value, Mapping):
            unknown = set(value) - set(cls.__dataclass_fields__)
            if unknown:
                raise ValidationError(f"Unknown user parameter: `{sorted(unknown)[0]}`")
            value = cls(**value)
        if not isinstance(value, cls):
            raise ValidationError('user_parameters must be a UserContext or a mapping')
        value.validate()
        return value

    def validate(self) -> None:
        for name in USER_STRING_FIELDS:
            field_value = getattr(self, name)
            if field_value is not None and not isinstance(field_value, str):
                raise ValidationError(f'user_parameters[{name}] must be a string')

        if self.segments is not None:
            if not isinstance(self.segments, (list, tuple)) or not all(isinstance(s, str) for s in self.segments):
                raise ValidationError('user_parameters[segments] must be a list of strings')

        if self.test_cells is not None:
            if not isinstance(self.test_cells, Mapping) or \
                    not all(isinstance(k, str) and isinstance(v, str) for k, v in self.test_cells.items()):
                raise ValidationError('user_parameters[test_cells] must be a mapping of strings')

    def merged_with(self, config: ClientConfig) -> Dict[str, Any]:
        """Resolve identity fields, call-scoped values take precedence"""
        return {
            'session_id': self.session_id or config.session_id,
            'client_id': self.client_id or config.client_id,
            'user_id': self.user_id or config.user_id,
            'segments': list(self.segments) if self.segments else list(config.segments),
            'test_cells': dict(self.test_cells) if self.test_cells else dict(config.test_cells),
            'user_ip': self.user_ip,
            'user_agent': self.user_agent,
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_term(value: Any, name: str = 'query') -> None:
    if not value or not isinstance(value, str):
        raise ValidationError(f'{name} is a required parameter of type string')


def validate_identifier(value: Any, name: str) -> None:
    """Path identifiers are non-empty strings or integers"""
    if _is_int(value):
        return
    if not value or not isinstance(value, str):
        raise ValidationError(f'{name} is a required parameter of type string')


def validate_positive_int(value: Any, name: str) -> None:
    if not _is_int(value) or value < 1:
        raise ValidationError(f'{name} must be a positive integer')


def validate_filters(filters: Any) -> None:
    if not isinstance(filters, Mapping):
        raise ValidationError('filters must be an object mapping facet names to lists of values')

    for facet, values in filters.items():
        if not isinstance(facet, str) or not facet:
            raise ValidationError('filters keys must be non-empty strings')
        if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
            raise ValidationError(f'filters[{facet}] must be a list of values')
        if not values:
            raise ValidationError(f'filters[{facet}] must not be empty')
        for value in values:
            if not isinstance(value, (str, int, float, bool)):
                raise ValidationError(f'filters[{facet}] values must be strings or numbers')


def validate_fmt_options(fmt_options: Any) -> None:
    if not isinstance(fmt_options, Mapping):
        raise ValidationError('fmt_options must be an object')

    for key, value in fmt_options.items():
        if key not in FMT_OPTION_KEYS:
            raise ValidationError(f'Unknown format option: `{key}`')
        if key == 'groups_max_depth' and not _is_int(value):
            raise ValidationError('fmt_options[groups_max_depth] must be an integer')
        if key == 'groups_start' and value not in GROUPS_START_VALUES:
            raise ValidationError(
                f"fmt_options[groups_start] must be one of: {', '.join(GROUPS_START_VALUES)}"
            )


def validate_results_per_section(results_per_section: Any) -> None:
    if not isinstance(results_per_section, Mapping):
        raise ValidationError('results_per_section must be an object mapping sections to integers')
    for section, count in results_per_section.items():
        if not isinstance(section, str) or not section:
            raise ValidationError('results_per_section keys must be non-empty strings')
        validate_positive_int(count, f'results_per_section[{section}]')


def validate_request_parameters(section=None, page=None, results_per_page=None, filters=None,
                                sort_by=None, sort_order=None, fmt_options=None,
                                collection_id=None, num_results=None, results_per_section=None,
                                item_ids=None, term=None) -> None:
    """
    Check the optional request parameters shared by the search style endpoints

    Raises:
        ValidationError: naming the first offending parameter
    """
    if section is not None and not isinstance(section, str):
        raise ValidationError('section must be a string')
    if page is not None:
        validate_positive_int(page, 'page')
    if results_per_page is not None:
        validate_positive_int(results_per_page, 'results_per_page')
    if num_results is not None:
        validate_positive_int(num_results, 'num_results')
    if filters is not None:
        validate_filters(filters)
    if sort_by is not None and not isinstance(sort_by, str):
        raise ValidationError('sort_by must be a string')
    if sort_order is not None and sort_order not in SORT_ORDERS:
        raise ValidationError(f"sort_order must be one of: {', '.join(SORT_ORDERS)}")
    if fmt_options is not None:
        validate_fmt_options(fmt_options)
    if collection_id is not None and not isinstance(collection_id, str):
        raise ValidationError('collection_id must be a string')
    if results_per_section is not None:
        validate_results_per_section(results_per_section)
    if item_ids is not None:
        ids = [item_ids] if isinstance(item_ids, str) else item_ids
        if not isinstance(ids, (list, tuple)) or not ids or not all(isinstance(i, str) and i for i in ids):
            raise ValidationError('item_ids must be a string or a list of strings')
    if term is not None and not isinstance(term, str):
        raise ValidationError('term must be a string')


def clean_value(value: Any) -> Any:
    """Replace non-breaking spaces with regular ones"""
    if isinstance(value, str):
        return value.replace('\u00a0', ' ')
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(clean_value(value))


def flatten_params(params: Mapping[str, Any]) -> QueryPairs:
    """
    Flatten nested params into ordered key/value pairs

    Top level lists repeat the key (``us=a&us=b``), nested mappings use
    bracket notation and lists inside them get a ``[]`` suffix
    (``filters[color][]=red``).
    """
    pairs: QueryPairs = []

    def _walk(prefix: str, value: Any, nested: bool) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            for key, sub_value in value.items():
                _walk(f'{prefix}[{key}]', sub_value, True)
        elif isinstance(value, (list, tuple)):
            key = f'{prefix}[]' if nested else prefix
            for item in value:
                pairs.append((key, _stringify(item)))
        else:
            pairs.append((prefix, _stringify(value)))

    for key, value in params.items():
        _walk(key, value, False)

    return pairs


def serialize_params(params: Mapping[str, Any]) -> str:
    return urlencode(flatten_params(params), quote_via=quote)


def encode_path_segment(value: Any) -> str:
    return quote(str(value), safe='')


def build_query_params(config: ClientConfig, user: Dict[str, Any], section=None, page=None,
                       results_per_page=None, filters=None, sort_by=None, sort_order=None,
                       fmt_options=None, collection_id=None, num_results=None,
                       results_per_section=None, item_ids=None, term=None) -> Dict[str, Any]:
    """
    Build the ordered query parameter mapping for a request

    Args:
        config (ClientConfig): Client configuration
        user (dict): Identity fields resolved by ``UserContext.merged_with``
    """
    query_params: Dict[str, Any] = {
        'c': config.version,
        'key': config.api_key,
        'i': user['client_id'],
        's': user['session_id'],
    }

    for cell_name, cell_value in user['test_cells'].items():
        query_params[f'ef-{cell_name}'] = cell_value

    if user['segments']:
        query_params['us'] = list(user['segments'])

    if user['user_id']:
        query_params['ui'] = user['user_id']

    if term:
        query_params['term'] = term
    if item_ids:
        query_params['item_id'] = [item_ids] if isinstance(item_ids, str) else list(item_ids)
    if section:
        query_params['section'] = section
    if page:
        query_params['page'] = page
    if results_per_page:
        query_params['num_results_per_page'] = results_per_page
    if num_results:
        query_params['num_results'] = num_results
    if results_per_section:
        for section_name, count in results_per_section.items():
            query_params[f'num_results_{section_name}'] = count
    if filters:
        query_params['filters'] = {facet: list(values) for facet, values in filters.items()}
    if sort_by:
        query_params['sort_by'] = sort_by
    if sort_order:
        query_params['sort_order'] = sort_order
    if fmt_options:
        query_params['fmt_options'] = dict(fmt_options)
    if collection_id:
        query_params['collection_id'] = collection_id

    query_params['_dt'] = current_timestamp()
    return query_params


def current_timestamp() -> int:
    return int(time.time() * 1000)


def build_url(base_url: str, path_segments: Iterable[Any], query_params: Mapping[str, Any]) -> str:
    path = '/'.join(encode_path_segment(segment) for segment in path_segments)
    query_string = serialize_params(query_params)
    return f'{base_url}/{path}?{query_string}' if query_string else f'{base_url}/{path}'
