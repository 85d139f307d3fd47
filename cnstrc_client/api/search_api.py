from .base_client import BaseClient
from cnstrc_client.utils.params import validate_term

class SearchAPI(BaseClient):
    async def get_search_results(self, query, section=None, page=None, results_per_page=None,
                                 filters=None, sort_by=None, sort_order=None, fmt_options=None,
                                 collection_id=None, user_parameters=None):
        """
        Retrieve search results for a query

        Args:
            query (str): Search term
            section (str): Section to search within, e.g. "Products"
            page (int): Page number of results
            results_per_page (int): Number of results per page
            filters (dict): Facet name to list of values
            sort_by (str): Sort field
            sort_order (str): "ascending" or "descending"
            fmt_options (dict): Format options, ``groups_max_depth`` and ``groups_start``
            collection_id (str): Restrict results to a collection
            user_parameters (UserContext|dict): Session, client, user id, segments,
                test cells, user ip and user agent for this request

        Returns:
            dict: Response body with ``result_id`` stamped on every result
        """
        validate_term(query)

        return await self._get_results(
            ['search', query],
            'get_search_results',
            user_parameters=user_parameters,
            require='response.results',
            section=section,
            page=page,
            results_per_page=results_per_page,
            filters=filters,
            sort_by=sort_by,
            sort_order=sort_order,
            fmt_options=fmt_options,
            collection_id=collection_id
        )
