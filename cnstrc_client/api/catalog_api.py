import json
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import aiohttp

from .base_client import BaseClient
from cnstrc_client.auth.authenticator import Authenticator
from cnstrc_client.exceptions import ValidationError
from cnstrc_client.utils.params import (
    build_url,
    current_timestamp,
    validate_identifier,
    validate_positive_int,
    validate_term,
)

logger = logging.getLogger(__name__)

CATALOG_FILES = ('items', 'variations', 'item_groups')

def _require_payload(value: Any, name: str, allow_list: bool = False):
    allowed = (Mapping, list, tuple) if allow_list else (Mapping,)
    if not isinstance(value, allowed):
        kind = 'an object or a list' if allow_list else 'an object'
        raise ValidationError(f'{name} is a required parameter and must be {kind}')

def _pagination(page=None, results_per_page=None) -> Dict[str, Any]:
    if page is not None:
        validate_positive_int(page, 'page')
    if results_per_page is not None:
        validate_positive_int(results_per_page, 'results_per_page')
    return {'num_results_per_page': results_per_page, 'page': page}

class CatalogAPI(BaseClient):
    """
    Catalog management calls. Every request is authorized with the
    ``api_token`` as HTTP basic auth.

    The HTTP verbs are the remote API contract: plain adds are POST while
    add-or-update calls are PUT (items) or PATCH (item groups) with
    ``force=1``.
    """

    async def _send(self, method: str, path_segments: Sequence[Any], operation: str, body: Any = None,
                    query: Optional[Dict[str, Any]] = None, base_path: str = 'v1',
                    include_version: bool = True, multipart: bool = False):
        config = self.config
        headers = Authenticator(config).get_headers(basic_auth=True)

        query_params: Dict[str, Any] = {}
        if include_version:
            query_params['c'] = config.version
        query_params['key'] = config.api_key
        query_params['_dt'] = current_timestamp()
        for key, value in (query or {}).items():
            if value is not None:
                query_params[key] = value

        url = build_url(config.service_url, [base_path, *path_segments], query_params)

        payload = body
        if body is not None and not multipart:
            headers['Content-Type'] = 'application/json'
            payload = json.dumps(body)

        return await self._make_request(
            method,
            str(path_segments[0]),
            url,
            config=config,
            headers=headers,
            body=payload,
            operation=operation,
            allow_empty=True
        )

    # Items

    async def add_item(self, item):
        """
        Add an item to the index

        Args:
            item (dict): Item details, at least ``item_name`` and ``section``
        """
        _require_payload(item, 'item')
        return await self._send('POST', ['item'], 'add_item', body=item)

    async def add_or_update_item(self, item):
        """Add an item, replacing it if it already exists"""
        _require_payload(item, 'item')
        return await self._send('PUT', ['item'], 'add_or_update_item', body=item, query={'force': 1})

    async def remove_item(self, item):
        """Remove an item, identified by ``item_name`` or ``id`` and ``section``"""
        _require_payload(item, 'item')
        return await self._send('DELETE', ['item'], 'remove_item', body=item)

    async def modify_item(self, item):
        """Modify an existing item, ``new_item_name`` renames it"""
        _require_payload(item, 'item')
        return await self._send('PUT', ['item'], 'modify_item', body=item)

    async def add_item_batch(self, items):
        """
        Add multiple items to the index

        Args:
            items (dict): ``{"items": [...], "section": "Products"}``
        """
        _require_payload(items, 'items')
        return await self._send('POST', ['batch_items'], 'add_item_batch', body=items)

    async def add_or_update_item_batch(self, items):
        _require_payload(items, 'items')
        return await self._send('PUT', ['batch_items'], 'add_or_update_item_batch', body=items,
                                query={'force': 1})

    async def remove_item_batch(self, items):
        _require_payload(items, 'items')
        return await self._send('DELETE', ['batch_items'], 'remove_item_batch', body=items)

    async def get_item(self, item_id=None, section=None, page=None, results_per_page=None):
        """
        Get one item by id, or page through all items of a section

        Args:
            item_id (str): Item id, omit to list items
            section (str): Section the items belong to
            page (int): Page number
            results_per_page (int): Number of items per page
        """
        path = ['item']
        if item_id is not None:
            validate_identifier(item_id, 'item_id')
            path.append(item_id)
        if section is not None and not isinstance(section, str):
            raise ValidationError('section must be a string')

        query = _pagination(page, results_per_page)
        query['section'] = section
        return await self._send('GET', path, 'get_item', query=query)

    # Item groups

    async def add_item_groups(self, groups):
        """
        Add item groups

        Args:
            groups (dict): ``{"item_groups": [{"id": ..., "name": ..., "parent_id": ...}]}``
        """
        _require_payload(groups, 'groups')
        return await self._send('POST', ['item_groups'], 'add_item_groups', body=groups)

    async def get_item_group(self, group_id):
        validate_identifier(group_id, 'group_id')
        return await self._send('GET', ['item_groups', group_id], 'get_item_group')

    async def add_or_update_item_groups(self, groups):
        _require_payload(groups, 'groups')
        return await self._send('PATCH', ['item_groups'], 'add_or_update_item_groups', body=groups,
                                query={'force': 1})

    async def modify_item_group(self, group_id, group):
        """Modify the name or parent of an item group"""
        validate_identifier(group_id, 'group_id')
        _require_payload(group, 'group')
        body = {k: v for k, v in group.items() if k != 'id'}
        return await self._send('PUT', ['item_groups', group_id], 'modify_item_group', body=body)

    async def remove_item_groups(self):
        """Remove all item groups of the index"""
        return await self._send('DELETE', ['item_groups'], 'remove_item_groups')

    # One way synonyms

    async def add_one_way_synonym(self, phrase, synonym=None):
        """
        Add a one way synonym, ``phrase`` expands to ``child_phrases``

        Args:
            phrase (str): Parent phrase
            synonym (dict): ``{"child_phrases": [{"phrase": ...}]}``
        """
        validate_term(phrase, 'phrase')
        body = dict(synonym or {})
        return await self._send('POST', ['one_way_synonyms', phrase], 'add_one_way_synonym', body=body,
                                base_path='v2')

    async def modify_one_way_synonym(self, phrase, synonym=None):
        validate_term(phrase, 'phrase')
        body = dict(synonym or {})
        return await self._send('PUT', ['one_way_synonyms', phrase], 'modify_one_way_synonym', body=body,
                                base_path='v2')

    async def get_one_way_synonyms(self, phrase=None, page=None, results_per_page=None):
        if phrase is not None and not isinstance(phrase, str):
            raise ValidationError('phrase must be a string')
        query = _pagination(page, results_per_page)
        query['phrase'] = phrase
        return await self._send('GET', ['one_way_synonyms'], 'get_one_way_synonyms', query=query,
                                base_path='v2')

    async def get_one_way_synonym(self, phrase):
        validate_term(phrase, 'phrase')
        return await self._send('GET', ['one_way_synonyms', phrase], 'get_one_way_synonym', base_path='v2')

    async def remove_one_way_synonyms(self, params=None):
        """Remove all one way synonyms"""
        return await self._send('DELETE', ['one_way_synonyms'], 'remove_one_way_synonyms', body=params,
                                base_path='v2')

    # Synonym groups

    async def add_synonym_group(self, group):
        """
        Add a synonym group

        Args:
            group (dict): ``{"synonyms": ["0% milk", "skim milk"]}``
        """
        _require_payload(group, 'group')
        return await self._send('POST', ['synonym_groups'], 'add_synonym_group', body=group)

    async def modify_synonym_group(self, group_id, group):
        validate_identifier(group_id, 'group_id')
        _require_payload(group, 'group')
        body = {k: v for k, v in group.items() if k != 'group_id'}
        return await self._send('PUT', ['synonym_groups', group_id], 'modify_synonym_group', body=body)

    async def get_synonym_groups(self, phrase=None, page=None, results_per_page=None):
        if phrase is not None and not isinstance(phrase, str):
            raise ValidationError('phrase must be a string')
        query = _pagination(page, results_per_page)
        query['phrase'] = phrase
        return await self._send('GET', ['synonym_groups'], 'get_synonym_groups', query=query,
                                include_version=False)

    async def get_synonym_group(self, group_id):
        validate_identifier(group_id, 'group_id')
        return await self._send('GET', ['synonym_groups', group_id], 'get_synonym_group',
                                include_version=False)

    async def remove_synonym_groups(self, params=None):
        """Remove synonym groups, all of them when no ``group_id`` is given"""
        return await self._send('DELETE', ['synonym_groups'], 'remove_synonym_groups', body=params)

    async def remove_synonym_group(self, group_id):
        validate_identifier(group_id, 'group_id')
        return await self._send('DELETE', ['synonym_groups', group_id], 'remove_synonym_group')

    # Redirect rules

    async def add_redirect_rule(self, rule):
        """
        Add a redirect rule

        Args:
            rule (dict): ``{"url": ..., "matches": [{"match_type": ..., "pattern": ...}]}``
        """
        _require_payload(rule, 'rule')
        return await self._send('POST', ['redirect_rules'], 'add_redirect_rule', body=rule)

    async def get_redirect_rules(self, query=None, status=None, page=None, results_per_page=None):
        for name, value in (('query', query), ('status', status)):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f'{name} must be a string')
        params = _pagination(page, results_per_page)
        params['query'] = query
        params['status'] = status
        return await self._send('GET', ['redirect_rules'], 'get_redirect_rules', query=params,
                                include_version=False)

    async def get_redirect_rule(self, redirect_rule_id):
        validate_identifier(redirect_rule_id, 'redirect_rule_id')
        return await self._send('GET', ['redirect_rules', redirect_rule_id], 'get_redirect_rule',
                                include_version=False)

    async def modify_redirect_rule(self, redirect_rule_id, rule):
        """Replace a redirect rule"""
        validate_identifier(redirect_rule_id, 'redirect_rule_id')
        _require_payload(rule, 'rule')
        return await self._send('PUT', ['redirect_rules', redirect_rule_id], 'modify_redirect_rule', body=rule)

    async def update_redirect_rule(self, redirect_rule_id, rule):
        """Partially update a redirect rule"""
        validate_identifier(redirect_rule_id, 'redirect_rule_id')
        _require_payload(rule, 'rule')
        return await self._send('PATCH', ['redirect_rules', redirect_rule_id], 'update_redirect_rule', body=rule)

    async def remove_redirect_rule(self, redirect_rule_id):
        validate_identifier(redirect_rule_id, 'redirect_rule_id')
        return await self._send('DELETE', ['redirect_rules', redirect_rule_id], 'remove_redirect_rule')

    # Catalog files

    @staticmethod
    def _catalog_form(files: Dict[str, Any]) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for name in CATALOG_FILES:
            content = files.get(name)
            if content is None:
                continue
            if not isinstance(content, (bytes, bytearray, str)) and not hasattr(content, 'read'):
                raise ValidationError(f'{name} must be bytes, a string or a file object')
            form.add_field(name, content, filename=f'{name}.csv', content_type='application/octet-stream')

        if not any(files.get(name) is not None for name in CATALOG_FILES):
            raise ValidationError(
                'At least one file of "items", "variations", "item_groups" is required to be in form-data'
            )
        return form

    async def replace_catalog(self, items=None, variations=None, item_groups=None, section='Products'):
        """
        Replace the catalog of a section with the uploaded CSV files

        Args:
            items: CSV content for items (bytes, str or file object)
            variations: CSV content for variations
            item_groups: CSV content for item groups
            section (str): Section to replace
        """
        form = self._catalog_form({'items': items, 'variations': variations, 'item_groups': item_groups})
        logger.info(f"Replacing catalog for section {section}")
        return await self._send('PUT', ['catalog'], 'replace_catalog', body=form, query={'section': section},
                                multipart=True)

    async def update_catalog(self, items=None, variations=None, item_groups=None, section='Products'):
        """Update the catalog of a section with the uploaded CSV files"""
        form = self._catalog_form({'items': items, 'variations': variations, 'item_groups': item_groups})
        logger.info(f"Updating catalog for section {section}")
        return await self._send('PATCH', ['catalog'], 'update_catalog', body=form, query={'section': section},
                                multipart=True)
