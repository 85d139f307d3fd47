from .base_client import BaseClient
from cnstrc_client.utils.params import validate_term

class BrowseAPI(BaseClient):
    async def get_browse_results(self, filter_name, filter_value, section=None, page=None,
                                 results_per_page=None, filters=None, sort_by=None, sort_order=None,
                                 fmt_options=None, collection_id=None, user_parameters=None):
        """
        Retrieve results for a browse page, no search term involved

        Args:
            filter_name (str): Facet or group to browse by, e.g. "group_id"
            filter_value (str): Value of the facet or group
            section (str): Section to browse within
            page (int): Page number of results
            results_per_page (int): Number of results per page
            filters (dict): Additional facet name to list of values
            sort_by (str): Sort field
            sort_order (str): "ascending" or "descending"
            fmt_options (dict): Format options
            collection_id (str): Restrict results to a collection
            user_parameters (UserContext|dict): Per-request identity overrides
        """
        validate_term(filter_name, 'filter_name')
        validate_term(filter_value, 'filter_value')

        return await self._get_results(
            ['browse', filter_name, filter_value],
            'get_browse_results',
            user_parameters=user_parameters,
            section=section,
            page=page,
            results_per_page=results_per_page,
            filters=filters,
            sort_by=sort_by,
            sort_order=sort_order,
            fmt_options=fmt_options,
            collection_id=collection_id
        )
