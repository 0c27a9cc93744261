"""
Explicit request state handed to views and form controllers.

`RequestContext` carries everything the lifecycle reads from the transport:
the request method, the submitted form fields, a CGI-style server
environment and the session, if one exists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from fastapi import Request


class RequestContext(BaseModel):
    """
    Snapshot of one inbound request.

    Example:
        >>> ctx = RequestContext(method="post", fields={"name": "Ada"})
        >>> ctx.method
        'POST'
        >>> ctx.has_session
        False
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    fields: dict[str, str] = Field(default_factory=dict)
    server: dict[str, Any] = Field(default_factory=dict)
    session: dict[str, Any] | None = None

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        return value.upper()

    @property
    def has_session(self) -> bool:
        return self.session is not None

    def get_field(self, name: str) -> str | None:
        return self.fields.get(name)

    @classmethod
    async def from_request(cls, request: Request) -> RequestContext:
        """
        Build a context from a FastAPI/Starlette request.

        Form fields are only read for requests that carry a body. Repeated
        keys keep their last value. Uploaded files are ignored.
        """
        fields: dict[str, str] = {}
        if request.method not in ("GET", "HEAD", "OPTIONS"):
            form_data = await request.form()
            for key, value in form_data.multi_items():
                if isinstance(value, str):
                    fields[key] = value

        session = None
        if "session" in request.scope:
            session = dict(request.session)

        return cls(
            method=request.method,
            fields=fields,
            server=build_server_environment(request),
            session=session,
        )


def build_server_environment(request: Request) -> dict[str, Any]:
    """
    Flatten request metadata into CGI-style keys (`REQUEST_METHOD`,
    `HTTP_USER_AGENT`, ...), which is what templates read from `_server`.
    """
    url = request.url
    environ: dict[str, Any] = {
        "REQUEST_METHOD": request.method,
        "REQUEST_URI": f"{url.path}?{url.query}" if url.query else url.path,
        "SCRIPT_NAME": request.scope.get("root_path", ""),
        "PATH_INFO": url.path,
        "QUERY_STRING": url.query,
        "SERVER_NAME": url.hostname or "",
        "SERVER_PORT": str(url.port or ""),
        "SERVER_PROTOCOL": f"HTTP/{request.scope.get('http_version', '1.1')}",
        "REQUEST_SCHEME": url.scheme,
    }
    if request.client is not None:
        environ["REMOTE_ADDR"] = request.client.host
        environ["REMOTE_PORT"] = str(request.client.port)

    for key, value in request.headers.items():
        environ["HTTP_" + key.upper().replace("-", "_")] = value

    return environ
