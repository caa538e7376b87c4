from little_lemon.profile.models import ProfileRecord
from little_lemon.profile.store import ProfileStore

__all__ = ["ProfileRecord", "ProfileStore"]
