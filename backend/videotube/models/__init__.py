from videotube.models.user import User

__all__ = [
    "User",
]
