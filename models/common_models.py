from typing import Any, Dict, List, Optional
from pydantic import BaseModel

class UploadedFile(BaseModel):
    field_name: str
    original_name: str
    stored_name: str         # <basename><timestamp ms><ext>
    destination: str
    path: str
    content_type: Optional[str] = None
    size: int

class UploadResult(BaseModel):
    files: List[UploadedFile] = []
    fields: Dict[str, Any] = {}

class RequestInfo(BaseModel):
    method: str
    path: str
    url: str
    query: Dict[str, Any]
    headers: Dict[str, str]
    client_ip: Optional[str] = None
    cookies: Dict[str, Any]
    signed_cookies: Dict[str, Any]
    body: Any = None
    session_id: Optional[str] = None
    session: Dict[str, Any] = {}

class ResponseDemo(BaseModel):
    message: str
    name: Optional[str] = None
    session_id: Optional[str] = None
