from backend.client import is_using_mock_auth


def current_user_nav(request):
    auth = getattr(request, "auth", None)
    return {
        "current_user": auth.user if auth else None,
        "auth_loading": auth.loading if auth else False,
        "using_mock_auth": is_using_mock_auth(),
    }
