from .image import Image
from .like import Like
from .user import User

__all__ = [
    "Image",
    "Like",
    "User",
]
