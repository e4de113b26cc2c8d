"""Redirect and registration routes."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from goto_links.store import UpsertMode

router = APIRouter()

# Characters that may stay as-is in a Location header
_LOCATION_SAFE = ":/?#[]@!$&'()*+,;=%~"


async def read_target(request: Request, max_size: int) -> str:
    """Read the raw request body as a target URL.

    The body is consumed chunk by chunk so an oversize payload is refused
    before it is fully buffered.
    """
    body = bytearray()
    async for chunk in request.stream():
        if len(body) + len(chunk) > max_size:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="overflow")
        body.extend(chunk)

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"invalid request body: {e}",
        )


async def _register(request: Request, identifier: Optional[str], mode: UpsertMode) -> PlainTextResponse:
    store = request.app.state.store
    config = request.app.state.config

    target = await read_target(request, config.max_payload_bytes)
    effect = await run_in_threadpool(store.upsert, target, identifier, mode)
    return PlainTextResponse(effect.describe())


@router.get("/", response_class=PlainTextResponse)
async def index():
    """Liveness probe."""
    return PlainTextResponse("goto")


@router.post("/", response_class=PlainTextResponse)
async def create_derived(request: Request):
    """Register the body URL under an identifier derived from it."""
    return await _register(request, None, UpsertMode.CREATE_ONLY)


@router.get("/{identifier}")
async def browse(request: Request, identifier: str):
    """Redirect to the target registered for an identifier."""
    store = request.app.state.store

    target = await run_in_threadpool(store.lookup, identifier)
    if target is None:
        return PlainTextResponse("not found", status_code=status.HTTP_404_NOT_FOUND)

    return Response(
        content=f"redirecting to {target} ...",
        status_code=status.HTTP_302_FOUND,
        headers={"Location": quote(target, safe=_LOCATION_SAFE)},
        media_type="text/plain",
    )


@router.post("/{identifier}", response_class=PlainTextResponse)
async def create(request: Request, identifier: str):
    """Register the body URL under an identifier that must not exist yet."""
    return await _register(request, identifier, UpsertMode.CREATE_ONLY)


@router.put("/{identifier}", response_class=PlainTextResponse)
async def update(request: Request, identifier: str):
    """Register the body URL under an identifier, replacing any previous target."""
    return await _register(request, identifier, UpsertMode.UPDATE_ONLY)
