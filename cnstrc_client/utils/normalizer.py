import copy
from typing import Any, Iterator, List, Optional

from cnstrc_client.exceptions import MalformedResponseError


def _lookup(data: Any, path: str) -> Any:
    current = data
    for part in path.split('.'):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _result_collections(data: dict) -> Iterator[List[Any]]:
    """Yield every result-bearing list in a response body"""
    containers = [data]
    if isinstance(data.get('response'), dict):
        containers.append(data['response'])

    for container in containers:
        results = container.get('results')
        if isinstance(results, list):
            yield results

        sections = container.get('sections')
        if isinstance(sections, dict):
            for items in sections.values():
                if isinstance(items, list):
                    yield items


def normalize_response(data: Any, require: Optional[str] = None, operation: str = 'request') -> Any:
    """
    Copy the top-level ``result_id`` onto every result item

    Args:
        data: Parsed JSON body
        require (str): Dotted path that must hold the result collection,
            e.g. ``response.results``; absent means the shape is optional
        operation (str): Name used in the malformed response message

    Returns:
        A new augmented structure; ``data`` is left untouched
    """
    if require is not None:
        expected = _lookup(data, require)
        if not isinstance(expected, (list, dict)):
            raise MalformedResponseError(f'{operation} response data is malformed')

    if not isinstance(data, dict):
        return data

    normalized = copy.deepcopy(data)
    result_id = normalized.get('result_id')
    if not result_id:
        return normalized

    for items in _result_collections(normalized):
        for item in items:
            if isinstance(item, dict):
                item['result_id'] = result_id

    return normalized
