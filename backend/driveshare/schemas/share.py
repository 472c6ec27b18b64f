from typing import Any, List, Optional
from datetime import datetime

from pydantic import Field

from .common import CamelModel
from .user import Owner

class ShareLinkCreate(CamelModel):
    # Left untyped so JSON true or "5" reach the share link store, which
    # accepts whole numbers of days only
    expires_in: Any
    one_time_use: bool = False

# Owner facing view with the computed validity flags
class ShareLink(CamelModel):
    id: int
    url: str
    expires_at: datetime
    one_time_use: bool
    access_count: int
    last_accessed_at: Optional[datetime] = None
    has_expired: bool
    is_valid: bool

class ShareLinkCreated(CamelModel):
    success: bool = True
    message: str
    additional_info: str
    share_link: ShareLink

class SharedFileRef(CamelModel):
    id: int
    name: str

class ShareLinkList(CamelModel):
    success: bool = True
    file: SharedFileRef
    share_links: List[ShareLink] = Field(default_factory=list)

# Public info for the share page (hide owner-only details)
class SharedFile(CamelModel):
    original_name: str
    size: int
    mimetype: str
    description: str = ""
    uploaded_by: Optional[Owner] = None

class SharedLinkInfo(CamelModel):
    expires_at: datetime
    one_time_use: bool
    access_count: int

class SharedFileInfo(CamelModel):
    success: bool = True
    file: SharedFile
    link: SharedLinkInfo
