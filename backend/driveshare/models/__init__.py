from .user import User
from .file import File
from .share import ShareLink
