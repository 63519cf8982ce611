import base64
from typing import Any

from fastapi import APIRouter, Request, Response

import config
from logger import get_logger
from middlewares.cookie_parser import set_signed_cookie
from models.common_models import RequestInfo, ResponseDemo

logger = get_logger(__name__)

router = APIRouter(tags=["demo"])


def _jsonable_body(body: Any) -> Any:
    if isinstance(body, bytes):
        return {"type": "bytes", "length": len(body), "base64": base64.b64encode(body).decode("ascii")}
    return body


@router.get("/")
async def index():
    logger.info("run Get / request")
    # Always handed to the error handler
    raise Exception("Error")


@router.post("/req", response_model=RequestInfo)
async def inspect_request(request: Request):
    """Echo back what the pipeline attached to the request."""
    session = getattr(request.state, "session", None)
    return RequestInfo(
        method=request.method,
        path=request.url.path,
        url=str(request.url),
        query=dict(request.query_params),
        headers=dict(request.headers),
        client_ip=request.client.host if request.client else None,
        cookies=getattr(request.state, "cookies", {}),
        signed_cookies=getattr(request.state, "signed_cookies", {}),
        body=_jsonable_body(getattr(request.state, "body", None)),
        session_id=session.id if session is not None else None,
        session=dict(session) if session is not None else {},
    )


@router.post("/res", response_model=ResponseDemo, status_code=201)
async def demo_response(request: Request, response: Response):
    """
    Store a name in the session and in a signed cookie.
    {"logout": true} destroys the session and clears the cookie instead.
    """
    body = request.state.body if isinstance(request.state.body, dict) else {}
    session = request.state.session

    if body.get("logout"):
        session.destroy()
        response.delete_cookie("name", path="/")
        response.status_code = 200
        return ResponseDemo(message="logged out")

    name = str(body.get("name") or "guest")
    session["name"] = name
    set_signed_cookie(response, "name", name, config.SECRET, httponly=True, path="/")
    response.headers["X-Demo"] = "res"
    logger.info("response_demo", name=name, session_id=session.id)
    return ResponseDemo(message="ok", name=name, session_id=session.id)
