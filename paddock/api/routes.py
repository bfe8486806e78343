from __future__ import annotations

import redis
from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status

from paddock.api.deps import get_redis, get_registry
from paddock.api.models import (
    InputRequest,
    InputResultResponse,
    PathResponse,
    RecentInputsResponse,
    SessionCreateRequest,
    SessionResponse,
)
from paddock.runtime import SessionRegistry, SessionRuntime, create_runtime
from paddock.websocket_hub import HubRenderer, hub

router = APIRouter()


def _require_runtime(registry: SessionRegistry, session_id: str) -> SessionRuntime:
    runtime = registry.get(session_id)
    if runtime is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return runtime


def _session_response(runtime: SessionRuntime) -> SessionResponse:
    machine = runtime.machine
    handler = runtime.handler
    return SessionResponse(
        session_id=runtime.session_id,
        current_state=machine.current_state,
        history=list(machine.history),
        available_inputs=list(machine.available_inputs()),
        available_transitions=list(machine.available_transitions()),
        help_text=machine.help_text(),
        text_buffer=handler.text_buffer,
        option_list=list(handler.option_list),
        queue_depth=handler.queue_depth,
    )


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: str) -> None:
    await hub.connect(session_id, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(session_id, websocket)
    except Exception:
        await hub.disconnect(session_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    renderer = HubRenderer(hub)
    runtime = create_runtime(r=r, renderer=renderer, profile=payload.profile, seed=payload.seed)
    renderer.bind(runtime)
    await registry.add(runtime)
    return _session_response(runtime)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session_route(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionResponse:
    return _session_response(_require_runtime(registry, session_id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> Response:
    runtime = await registry.remove(session_id)
    if runtime is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    runtime.handler.cancel_pending()
    await hub.close_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/input", response_model=InputResultResponse)
async def session_input_route(
    session_id: str,
    payload: InputRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> InputResultResponse:
    runtime = _require_runtime(registry, session_id)
    result = await runtime.handler.process_input(payload.input)
    return InputResultResponse.model_validate(result.as_dict())


@router.get("/sessions/{session_id}/path", response_model=PathResponse)
async def session_path_route(
    session_id: str,
    target: str = Query(..., min_length=1),
    registry: SessionRegistry = Depends(get_registry),
) -> PathResponse:
    runtime = _require_runtime(registry, session_id)
    machine = runtime.machine
    if not machine.table.has_state(target):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown state: {target}")

    source = machine.current_state
    path = machine.find_path(source, target) if source is not None else None
    return PathResponse(source=source, target=target, path=path)


@router.get("/sessions/{session_id}/inputs", response_model=RecentInputsResponse)
async def session_inputs_route(
    session_id: str,
    limit: int = Query(10, ge=1, le=100),
    registry: SessionRegistry = Depends(get_registry),
) -> RecentInputsResponse:
    runtime = _require_runtime(registry, session_id)
    records = runtime.handler.recent_inputs(limit)
    return RecentInputsResponse(
        inputs=[{"input": r.input, "timestamp": r.timestamp.isoformat(), "state": r.state} for r in records]
    )
