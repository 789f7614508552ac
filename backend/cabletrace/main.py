"""
FastAPI application for the cable trace backend.

Streams geolocated traceroute hops, keeps a trace history, plans cable
routes between hops and drives one live, animated trace session whose
drawing commands are streamed to a browser map client.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Body, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, AsyncIterator, Callable, List, Optional
import asyncio
import logging

from .animation import TraceSession
from .config import MAP_STYLES, settings
from .database import SessionLocal, get_db, init_db
from .errors import DataUnavailable, MalformedRecord, TraceError
from .models import Trace, TraceStatus, TracerouteHop
from .routing import CableGraph, PairPlan, RoutePlanner, build_cable_graph, load_cables, load_landings
from .schemas import (
    DatasetStatus,
    Hop,
    MapStyleResponse,
    RouteRequest,
    RouteResponse,
    SessionCreate,
    SessionStatus,
    StyleUpdate,
    TraceDetailResponse,
    TraceListResponse,
    parse_hop_record,
)
from .schemas.trace import validate_target_value
from .trace import END_EVENT, format_sse, stream_hops

logger = logging.getLogger(__name__)

HopSource = Callable[[str], AsyncIterator[Hop]]

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def load_network() -> Optional[CableGraph]:
    """Load the configured datasets and build the cable graph; None if unavailable."""
    try:
        landings = load_landings(settings.landings_path)
        cables = load_cables(settings.cables_path)
    except DataUnavailable as e:
        logger.warning(f"Cable datasets unavailable, routing falls back to direct lines: {e}")
        return None
    return build_cable_graph(
        cables,
        landings,
        proximity_threshold_km=settings.proximity_threshold_km,
        precision=settings.coordinate_precision,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    init_db()
    logger.info("Database initialized")

    # A preloaded network (tests, embedding) wins over the configured files
    if getattr(app.state, "network", None) is None:
        app.state.network = load_network()
    app.state.session = None
    app.state.session_task = None
    logger.info(f"{settings.app_name} ready")

    yield

    # Shutdown
    await stop_session(app)
    logger.info("Live session stopped")


# Create FastAPI app with lifespan
app = FastAPI(
    title=settings.app_name,
    description="Traceroute hops animated along submarine cable routes",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_network(request: Request) -> Optional[CableGraph]:
    """Shared read-only cable graph, or None when the datasets failed to load."""
    return getattr(request.app.state, "network", None)


def get_trace_source() -> HopSource:
    """Hop producer used by the trace stream and live sessions."""
    return stream_hops


def get_live_session(request: Request) -> TraceSession:
    session = getattr(request.app.state, "session", None)
    if session is None or session.closed:
        raise HTTPException(status_code=404, detail="No live session")
    return session


# ============================================================================
# Trace Endpoints
# ============================================================================


async def trace_events(target: str, source: HopSource) -> AsyncIterator[str]:
    """Run one trace, persist it and frame every hop as a server-sent event."""
    db = SessionLocal()
    trace = Trace(target=target, status=TraceStatus.RUNNING, started_at=datetime.utcnow())
    db.add(trace)
    db.commit()
    db.refresh(trace)
    logger.info(f"Trace {trace.id} to {target} started")

    try:
        async for hop in source(target):
            db.add(
                TracerouteHop(
                    trace_id=trace.id,
                    hop_number=hop.hop,
                    ip=hop.ip,
                    city=hop.city,
                    country=hop.country,
                    latitude=hop.lat,
                    longitude=hop.lon,
                    org=hop.org,
                    error=hop.error,
                )
            )
            trace.hop_count = (trace.hop_count or 0) + 1
            db.commit()
            yield format_sse(hop.model_dump(exclude_none=True))
        trace.status = TraceStatus.COMPLETED
    except TraceError as e:
        logger.error(f"Trace {trace.id} to {target} failed: {e}")
        trace.status = TraceStatus.FAILED
        trace.error_message = str(e)
        yield format_sse({"error": str(e)}, event="error")
    finally:
        if trace.status == TraceStatus.RUNNING:
            trace.status = TraceStatus.FAILED
            trace.error_message = "Stream closed before traceroute finished"
        trace.completed_at = datetime.utcnow()
        db.commit()
        db.close()

    yield END_EVENT


@app.get("/api/trace")
async def stream_trace(target: str = settings.default_target, source: HopSource = Depends(get_trace_source)):
    """
    Trace a target and stream its hops as server-sent events.
    Each hop is one ``data:`` event; the stream ends with ``event: end``.
    """
    try:
        target = validate_target_value(target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StreamingResponse(trace_events(target, source), media_type="text/event-stream", headers=SSE_HEADERS)


@app.get("/api/traces", response_model=TraceListResponse)
async def list_traces(skip: int = 0, limit: int = 50, db: Session = Depends(get_db)):
    """
    List recorded traces.
    Returns most recent traces first.
    """
    query = db.query(Trace)
    traces = query.order_by(Trace.created_at.desc(), Trace.id.desc()).offset(skip).limit(limit).all()
    return {
        "traces": traces,
        "total": query.count(),
        "page": skip // limit + 1 if limit else 1,
        "page_size": limit,
    }


@app.get("/api/traces/{trace_id}", response_model=TraceDetailResponse)
async def get_trace(trace_id: int, db: Session = Depends(get_db)):
    """
    Get a recorded trace including its hops.
    """
    trace = db.query(Trace).filter(Trace.id == trace_id).first()

    if not trace:
        raise HTTPException(status_code=404, detail="Trace not found")

    return trace


@app.delete("/api/traces/{trace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trace(trace_id: int, db: Session = Depends(get_db)):
    """Delete a trace and its hops."""
    trace = db.query(Trace).filter(Trace.id == trace_id).first()

    if not trace:
        raise HTTPException(status_code=404, detail="Trace not found")

    # Cascade removes the hops
    db.delete(trace)
    db.commit()


# ============================================================================
# Dataset & Route Endpoints
# ============================================================================


@app.get("/api/datasets", response_model=DatasetStatus)
async def get_datasets(network: Optional[CableGraph] = Depends(get_network)):
    """Summary of the loaded cable network."""
    if network is None:
        return DatasetStatus(loaded=False)
    return DatasetStatus(
        loaded=True,
        landing_count=len(network.coord_map),
        cable_count=network.cable_count,
        vertex_count=len(network.adjacency),
        edge_count=network.edge_count,
        dropped_cables=network.dropped_cables,
        fallback_mode=network.is_empty,
    )


@app.get("/api/styles", response_model=List[MapStyleResponse])
async def list_styles():
    """Selectable map styles."""
    return [MapStyleResponse(key=key, **style) for key, style in MAP_STYLES.items()]


def plan_to_response(plan: PairPlan, network: Optional[CableGraph]) -> dict:
    """Serialize a PairPlan, naming resolved landings from the graph."""
    names = network.landing_names if network is not None else {}

    def landing(resolved):
        if resolved is None:
            return None
        return {"key": resolved.key, "name": names.get(resolved.key), "distance_km": resolved.distance_km}

    return {
        "index": plan.index,
        "source_hop": plan.source.hop,
        "target_hop": plan.target.hop,
        "decision": plan.decision.value,
        "reason": plan.reason.value if plan.reason else None,
        "source_landing": landing(plan.source_landing),
        "target_landing": landing(plan.target_landing),
        "path": plan.path,
        "cables": plan.cables,
        "segments": [
            {
                "kind": segment.kind.value,
                "cable_name": segment.cable_name,
                "coordinates": [list(c) for c in segment.coordinates],
            }
            for segment in plan.segments
        ],
        "description": plan.describe(),
    }


@app.post("/api/route", response_model=RouteResponse)
async def plan_route(request: RouteRequest, network: Optional[CableGraph] = Depends(get_network)):
    """
    Plan the route between consecutive hops without animating it.
    Returns one entry per hop pair with its routing decision and segments.
    """
    planner = RoutePlanner(network, search_limit=settings.path_search_limit)
    pairs = [plan_to_response(plan, network) for plan in planner.plan_route(request.hops)]
    return {
        "fallback_mode": planner.fallback_mode,
        "pairs": pairs,
        "segment_count": sum(len(pair["segments"]) for pair in pairs),
    }


# ============================================================================
# Live Session Endpoints
# ============================================================================


async def feed_session(session: TraceSession, source: HopSource) -> None:
    """Background task: stream hops of the session target into the session."""
    try:
        async for hop in source(session.target):
            try:
                session.add_hop(hop)
            except MalformedRecord as e:
                logger.warning(f"Skipping hop from live trace to {session.target}: {e}")
    except TraceError as e:
        logger.error(f"Live trace to {session.target} failed: {e}")
        session.finish(str(e))
        return
    session.finish()
    logger.info(f"Live trace to {session.target} finished with {len(session.hops)} hops")


async def stop_session(app: FastAPI) -> None:
    """Cancel the hop feed and close the live session, if any."""
    task = getattr(app.state, "session_task", None)
    session = getattr(app.state, "session", None)
    app.state.session_task = None
    app.state.session = None
    if task is not None and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    if session is not None:
        await session.close()


@app.post("/api/session", response_model=SessionStatus, status_code=status.HTTP_201_CREATED)
async def start_session(
    data: SessionCreate,
    request: Request,
    source: HopSource = Depends(get_trace_source),
    network: Optional[CableGraph] = Depends(get_network),
):
    """
    Start a live trace session, replacing any previous one.
    Hops are traced in the background and animated as they arrive.
    """
    await stop_session(request.app)

    session = TraceSession(
        data.target,
        network=network,
        style=data.style,
        animation_steps=settings.animation_steps,
        frame_seconds=settings.animation_frame_seconds,
        pause_seconds=settings.segment_pause_seconds,
    )
    await session.open()
    request.app.state.session = session
    request.app.state.session_task = asyncio.create_task(feed_session(session, source))
    return session.status()


@app.get("/api/session", response_model=SessionStatus)
async def get_session(session: TraceSession = Depends(get_live_session)):
    """Live session status: hops so far and the routing decision of every pair."""
    return session.status()


@app.put("/api/session/style", response_model=SessionStatus)
async def update_session_style(data: StyleUpdate, session: TraceSession = Depends(get_live_session)):
    """Rebuild the map with a new style and replay the route onto it."""
    await session.restyle(data.style)
    return session.status()


@app.post("/api/session/replay", response_model=SessionStatus)
async def replay_session(session: TraceSession = Depends(get_live_session)):
    """Clear the drawn route and animate it again from the first pair."""
    await session.replay()
    return session.status()


@app.post("/api/session/hops", response_model=SessionStatus)
async def push_session_hops(records: Any = Body(...), session: TraceSession = Depends(get_live_session)):
    """
    Append externally collected hop records to the live session.
    Accepts one record or a list; malformed or out-of-order records are skipped.
    """
    if not isinstance(records, list):
        records = [records]
    for raw in records:
        try:
            session.add_hop(parse_hop_record(raw))
        except MalformedRecord as e:
            logger.warning(f"Skipping hop record: {e}")
    return session.status()


@app.delete("/api/session", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(request: Request):
    """Stop the live session and release its map surface."""
    await stop_session(request.app)


async def session_events(session: TraceSession, poll_seconds: float = 0.05) -> AsyncIterator[str]:
    """
    Stream the session's drawing commands, following it across restyles.

    Each surface replays its command history on subscription; the stream
    ends once the session is closed.
    """
    surface = None
    while True:
        if session.surface is None or session.surface is surface:
            if session.closed:
                break
            await asyncio.sleep(poll_seconds)
            continue
        surface = session.surface
        queue = surface.subscribe(replay=True)
        try:
            while True:
                command = await queue.get()
                yield format_sse(command)
                if command["op"] == "destroy":
                    break
        finally:
            surface.unsubscribe(queue)
        if session.closed:
            break

    yield END_EVENT


@app.get("/api/session/events")
async def stream_session_events(session: TraceSession = Depends(get_live_session)):
    """Server-sent drawing commands for a browser map client."""
    return StreamingResponse(session_events(session), media_type="text/event-stream", headers=SSE_HEADERS)


# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "cabletrace-api", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
