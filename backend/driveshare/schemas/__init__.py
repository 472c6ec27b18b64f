from .common import Message
from .token import Token, TokenPayload
from .user import User, UserCreate, UserLogin, Owner
from .file import File, FileCreate, FileList, UploadedFile, UploadResponse, VisibilityResponse
from .share import (
    ShareLink, ShareLinkCreate, ShareLinkCreated, ShareLinkList,
    SharedFile, SharedFileInfo, SharedFileRef, SharedLinkInfo,
)
