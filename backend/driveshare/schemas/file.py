from typing import List, Optional
from datetime import datetime

from .common import CamelModel
from .user import Owner

# Properties collected by the upload endpoint
class FileCreate(CamelModel):
    original_name: str
    filename: str
    path: str
    size: int
    mimetype: str
    is_public: bool = False
    description: str = ""

# Summary returned right after an upload
class UploadedFile(CamelModel):
    id: int
    original_name: str
    size: int
    upload_date: datetime
    is_public: bool

class UploadResponse(CamelModel):
    success: bool = True
    message: str = "File uploaded successfully"
    file: UploadedFile

# Properties to return to client
class File(CamelModel):
    id: int
    original_name: str
    size: int
    mimetype: str
    description: str = ""
    is_public: bool
    download_count: int
    upload_date: datetime
    uploaded_by: Optional[Owner] = None

class FileList(CamelModel):
    success: bool = True
    files: List[File]

class VisibilityResponse(CamelModel):
    success: bool = True
    message: str
    is_public: bool
