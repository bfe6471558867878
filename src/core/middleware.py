"""Core middleware."""
from django.utils.cache import patch_cache_control


class NoStoreAPIMiddleware:
    """Force no-store headers on API responses so dashboards never show stale indicators."""

    API_PREFIX = "/api/"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if request.path.startswith(self.API_PREFIX):
            patch_cache_control(
                response,
                private=True,
                no_cache=True,
                no_store=True,
                must_revalidate=True,
                max_age=0,
            )
            response["Pragma"] = "no-cache"
            response["Expires"] = "0"

        return response
