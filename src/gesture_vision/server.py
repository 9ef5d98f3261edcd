"""WebSocket streaming server for live gesture recognition.

Runs the gesture engine on the server's webcam (or on landmark frames posted
by a remote detector) and pushes the current gesture, history, fps and status
to all connected WebSocket clients as JSON messages.

Usage:
    gesture-vision serve
    # or
    uvicorn gesture_vision.server:app --host 0.0.0.0 --port 8765
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager, suppress
from typing import Callable, Optional

try:
    from fastapi import FastAPI, WebSocket, WebSocketDisconnect
    from fastapi.responses import HTMLResponse, PlainTextResponse
    from pydantic import BaseModel
    _HAS_FASTAPI = True
except ImportError:
    _HAS_FASTAPI = False

if not _HAS_FASTAPI:
    raise ImportError("FastAPI required. Install with: pip install fastapi uvicorn")

from gesture_vision import __version__
from gesture_vision.capture import CameraSource, CaptureError
from gesture_vision.config import Settings
from gesture_vision.engine import EngineOutput, EngineStatus, GestureEngine
from gesture_vision.landmarks import SUPPORTED_GESTURES, HandFrame
from gesture_vision.metrics import MetricsCollector

logger = logging.getLogger("gesture_vision.server")


# --- State ---

class ServerState:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.engine = GestureEngine(self.settings.engine)
        self.metrics = MetricsCollector()
        self.clients: set[WebSocket] = set()
        self.capture_task: Optional[asyncio.Task] = None
        self.source: Optional[str] = None

state = ServerState()


def configure(settings: Settings):
    """Replace the server state with one built from `settings`."""
    global state
    state.engine.stop()
    state = ServerState(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    state.engine.stop()
    await _cancel_capture()


app = FastAPI(title="GestureVision", version=__version__, lifespan=lifespan)


class FramePayload(BaseModel):
    landmarks: Optional[list[list[float]]] = None
    handedness: Optional[str] = None
    captured_at: Optional[float] = None


@app.get("/")
async def index():
    output = state.engine.output()
    return HTMLResponse(
        "<h1>GestureVision</h1>"
        f"<p>Status: {output.status_message}</p>"
        f"<p>Current gesture: {output.gesture.label.display_name}</p>"
    )


# --- API endpoints ---

@app.get("/api/status")
async def api_status():
    output = state.engine.output()
    return {
        "running": output.running,
        "status": output.status.value,
        "status_message": output.status_message,
        "source": state.source,
        "fps": output.fps,
        "clients": len(state.clients),
        "gesture": output.gesture.to_dict(),
    }


@app.get("/api/gestures")
async def list_gestures():
    return {
        "gestures": [
            {"label": label.value, "display_name": label.display_name, "motion": label.is_motion}
            for label in SUPPORTED_GESTURES
        ]
    }


@app.get("/api/history")
async def gesture_history():
    return {"history": [e.to_dict() for e in state.engine.history]}


@app.post("/api/start")
async def start_session(source: str = "camera"):
    """Start recognition from the server camera or from posted frames."""
    if state.engine.running or state.engine.status is EngineStatus.AWAITING_PERMISSION:
        return await api_status()
    if source not in ("camera", "remote"):
        return PlainTextResponse(f"Unknown source: {source}", status_code=400)

    # a loop left over from a previous session must not outlive it
    await _cancel_capture()

    if source == "remote":
        state.source = "remote"
        state.engine.start()
    else:
        state.source = "camera"
        state.engine.await_permission()
        state.capture_task = asyncio.create_task(capture_loop())

    await broadcast_output(state.engine.output())
    return await api_status()


@app.post("/api/stop")
async def stop_session():
    state.engine.stop()
    await _cancel_capture()
    state.source = None
    await broadcast_output(state.engine.output())
    return await api_status()


@app.post("/api/frames")
async def post_frame(payload: FramePayload):
    """Feed one landmark frame produced by a remote detector."""
    captured_at = payload.captured_at if payload.captured_at is not None else time.time()
    frame = HandFrame.from_points(payload.landmarks, payload.handedness, captured_at)
    output = handle_frame(frame, latency_start=time.monotonic())
    await broadcast_output(output)
    return output.to_dict()


# --- Prometheus metrics ---

@app.get("/metrics")
async def metrics():
    state.metrics.set_connections(len(state.clients))
    return PlainTextResponse(
        state.metrics.render(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


# --- WebSocket ---

@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    state.clients.add(ws)
    logger.info(f"Client connected ({len(state.clients)} total)")

    try:
        await ws.send_json({
            "type": "connected",
            "gestures": [label.value for label in SUPPORTED_GESTURES],
            "state": state.engine.output().to_dict(),
        })

        while True:
            try:
                msg = await asyncio.wait_for(ws.receive_text(), timeout=30)
                data = json.loads(msg)
                if data.get("type") == "ping":
                    await ws.send_json({"type": "pong", "server_time": time.time()})
                elif data.get("type") == "get_state":
                    await ws.send_json({"type": "state", **state.engine.output().to_dict()})
            except asyncio.TimeoutError:
                await ws.send_json({"type": "ping"})
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.debug(f"WebSocket error: {e}")
    finally:
        state.clients.discard(ws)
        logger.info(f"Client disconnected ({len(state.clients)} total)")


async def broadcast(message: dict):
    """Send message to all clients."""
    if not state.clients:
        return
    dead = set()
    payload = json.dumps(message)
    for ws in state.clients:
        try:
            await ws.send_text(payload)
        except Exception:
            dead.add(ws)
    state.clients -= dead


async def broadcast_output(output: EngineOutput):
    await broadcast({"type": "state", **output.to_dict()})


async def _cancel_capture():
    """Cancel the camera loop, if one is active, and wait for it to release the camera."""
    task = state.capture_task
    state.capture_task = None
    if task is None or task.done():
        return
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task


def handle_frame(frame: HandFrame, latency_start: float) -> EngineOutput:
    """Run one frame through the engine and record metrics."""
    output = state.engine.process(frame)
    if output.emitted:
        state.metrics.record_gesture(output.emitted.label.value)
    if output.running:
        state.metrics.record_frame(time.monotonic() - latency_start, frame.has_hand, output.fps)
    return output


# --- Camera capture loop ---

async def capture_loop(source_factory: Optional[Callable[[], CameraSource]] = None):
    """Main loop: read camera frames, run the engine, broadcast results."""
    factory = source_factory or (lambda: CameraSource(state.settings.capture))

    logger.info("Starting camera capture...")
    try:
        source = factory()
        source.open()
    except (CaptureError, ImportError) as e:
        logger.error(f"Camera unavailable: {e}")
        state.engine.fail()
        await broadcast_output(state.engine.output())
        return

    state.engine.start()
    await broadcast_output(state.engine.output())

    try:
        while state.engine.running:
            t_start = time.monotonic()
            frame = source.read()
            if frame is None:
                await asyncio.sleep(0.01)
                continue

            output = handle_frame(frame, t_start)
            await broadcast_output(output)
            await asyncio.sleep(0.001)
    except CaptureError as e:
        logger.error(f"Capture failed: {e}")
        state.engine.fail()
        await broadcast_output(state.engine.output())
    finally:
        source.close()
        logger.info("Capture loop stopped")


# --- CLI entry point ---

def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="GestureVision WebSocket Server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8765, help="Port")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
