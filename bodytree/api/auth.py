from __future__ import annotations

from fastapi import HTTPException, Request

from bodytree.services.runtime import RuntimeContext

TOKEN_HEADER = "x-access-token"


def _presented_token(request: Request) -> str:
    return (
        request.headers.get(TOKEN_HEADER)
        or request.query_params.get("token")
        or request.cookies.get("portal_token")
        or ""
    )


def require_runtime(request: Request) -> RuntimeContext:
    """Route dependency: checks the access token against the live config."""
    runtime: RuntimeContext = request.app.state.runtime
    expected = runtime.config_store.config.server.token
    if expected and _presented_token(request) != expected:
        raise HTTPException(status_code=401, detail="invalid token")
    return runtime
