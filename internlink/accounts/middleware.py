from backend.gateway import get_backend

from .auth_context import AuthContext


class AuthContextMiddleware:
    """Attach an initialized ``AuthContext`` as ``request.auth`` for the request's lifetime."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        provider = get_backend().identity(request.session)
        request.auth = AuthContext(provider).initialize()
        try:
            return self.get_response(request)
        finally:
            request.auth.teardown()
