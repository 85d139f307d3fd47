from .base_client import BaseClient
from cnstrc_client.utils.params import validate_term

class RecommendationsAPI(BaseClient):
    async def get_recommendation_results(self, pod_id, item_ids=None, num_results=None, section=None,
                                         term=None, filters=None, user_parameters=None):
        """
        Retrieve recommendations for a pod

        Args:
            pod_id (str): Recommendation pod identifier
            item_ids (str|list): Item(s) to base the recommendations on
            num_results (int): Number of results to return
            section (str): Section to recommend from
            term (str): Search term, for query based pods
            filters (dict): Facet name to list of values
            user_parameters (UserContext|dict): Per-request identity overrides
        """
        validate_term(pod_id, 'pod_id')

        return await self._get_results(
            ['recommendations', 'v1', 'pods', pod_id],
            'get_recommendation_results',
            user_parameters=user_parameters,
            item_ids=item_ids,
            num_results=num_results,
            section=section,
            term=term,
            filters=filters
        )
