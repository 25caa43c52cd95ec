from pantrix.core.remote import RemoteViews
from pantrix.core.state import AppState

# One status record per AI-backed view, shared by every request.
remote_views = RemoteViews()


def get_state() -> AppState:
    """AppState over the active DB (honours override_db_path and DB_PATH)."""
    return AppState()


def get_remote_views() -> RemoteViews:
    return remote_views
