from .base_client import BaseClient
from cnstrc_client.utils.params import validate_term

class AutocompleteAPI(BaseClient):
    async def get_autocomplete_results(self, query, num_results=None, results_per_section=None,
                                       filters=None, user_parameters=None):
        """
        Retrieve autocomplete suggestions grouped by section

        Args:
            query (str): Partial search term
            num_results (int): Total number of results to return
            results_per_section (dict): Number of results (value) per section (key)
            filters (dict): Facet name to list of values
            user_parameters (UserContext|dict): Per-request identity overrides
        """
        validate_term(query)

        return await self._get_results(
            ['autocomplete', query],
            'get_autocomplete_results',
            user_parameters=user_parameters,
            require='sections',
            num_results=num_results,
            results_per_section=results_per_section,
            filters=filters
        )
