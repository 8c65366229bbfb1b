from django.http import JsonResponse


class ApiNotFoundMiddleware:
    """Return the JSON error envelope for unknown ``/api/`` routes."""
    API_PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        path = request.path or ''
        if (
            response.status_code == 404
            and path.startswith(self.API_PREFIX)
            and not response.get('Content-Type', '').startswith('application/json')
        ):
            return JsonResponse(
                {'success': False, 'message': 'Route not found', 'path': request.get_full_path()},
                status=404,
            )
        return response
