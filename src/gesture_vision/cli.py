"""GestureVision CLI, the main entry point for all operations.

Usage:
    gesture-vision run       Recognize gestures live from the camera
    gesture-vision serve     Start the WebSocket server
    gesture-vision record    Record landmark frames from the camera
    gesture-vision replay    Replay a recorded session through the engine
    gesture-vision labels    List the supported gestures
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from gesture_vision.config import Settings, load_settings

app = typer.Typer(
    name="gesture-vision",
    help="🤚 Real-time hand gesture recognition from hand landmarks.",
    add_completion=False,
)


def _setup(config: Optional[str], log_level: str) -> Settings:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config is None:
        return Settings()

    path = Path(config)
    if not path.exists():
        typer.echo(f"❌ Config file not found: {config}", err=True)
        raise typer.Exit(1)
    try:
        return load_settings(path)
    except ValueError as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)


def _format_event(event) -> str:
    return f"{event.label.display_name} (confidence: {event.confidence:.0%})"


@app.command()
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    camera: Optional[int] = typer.Option(None, help="Camera device index"),
    duration: float = typer.Option(0, help="Run duration in seconds (0 = until Ctrl+C)"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Recognize gestures live from the camera and print transitions."""
    from dataclasses import replace

    from gesture_vision.capture import CameraSource, CaptureError
    from gesture_vision.engine import GestureEngine

    settings = _setup(config, log_level)
    capture_config = settings.capture
    if camera is not None:
        capture_config = replace(capture_config, camera_index=camera)

    engine = GestureEngine(settings.engine)
    engine.await_permission()
    source = CameraSource(capture_config)
    try:
        source.open()
    except CaptureError as e:
        engine.fail()
        typer.echo(f"❌ {engine.status_message} ({e})", err=True)
        raise typer.Exit(1)

    engine.start()
    typer.echo(f"🎥 {engine.status_message} Press Ctrl+C to stop")
    start = time.monotonic()

    try:
        for frame in source.frames():
            output = engine.process(frame)
            if output.emitted:
                typer.echo(f"   🤚 {_format_event(output.emitted)}  [{output.fps:.1f} FPS]")
            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    except CaptureError as e:
        engine.fail()
        typer.echo(f"\n❌ {engine.status_message} ({e})", err=True)
        raise typer.Exit(1)
    finally:
        engine.stop()
        source.close()

    typer.echo("\n✅ Stopped.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8765, help="Port"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Start the WebSocket gesture streaming server."""
    import uvicorn

    from gesture_vision import server

    settings = _setup(config, log_level)
    server.configure(settings)

    typer.echo(f"🚀 Starting GestureVision server on {host}:{port}")
    typer.echo(f"   POST http://{host}:{port}/api/start to begin recognition")
    uvicorn.run(server.app, host=host, port=port, log_level=log_level)


@app.command()
def record(
    output: str = typer.Option("recording.json", "-o", help="Output file path"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    camera: Optional[int] = typer.Option(None, help="Camera device index"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
):
    """Record hand landmark frames from the camera."""
    from dataclasses import replace

    from gesture_vision.capture import CameraSource, CaptureError
    from gesture_vision.recorder import GestureRecorder

    settings = _setup(config, "warning")
    capture_config = settings.capture
    if camera is not None:
        capture_config = replace(capture_config, camera_index=camera)

    source = CameraSource(capture_config)
    try:
        source.open()
    except CaptureError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    recorder = GestureRecorder()
    typer.echo(f"🎥 Recording from camera {capture_config.camera_index}...")
    typer.echo("   Press Ctrl+C to stop")
    recorder.start()

    start = time.monotonic()
    try:
        for frame in source.frames():
            recorder.add_frame(frame)
            if recorder.frame_count % 30 == 0:
                elapsed = time.monotonic() - start
                typer.echo(f"\r   Frames: {recorder.frame_count} | Duration: {elapsed:.1f}s", nl=False)
            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    except CaptureError as e:
        typer.echo(f"\n❌ {e}", err=True)
    finally:
        recorder.stop()
        source.close()

    typer.echo(f"\n\n📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s)")
    recorder.save(output)
    typer.echo(f"💾 Saved to: {output}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to recording file"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier"),
    realtime: bool = typer.Option(False, help="Play at original timing"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to settings YAML"),
):
    """Replay a recorded session through the gesture engine."""
    from gesture_vision.engine import GestureEngine
    from gesture_vision.recorder import GesturePlayer

    settings = _setup(config, "warning")

    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = GesturePlayer.load(path)
    typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")

    engine = GestureEngine(settings.engine)
    engine.start()
    gesture_count = 0

    frames = player.play_realtime(speed=speed) if realtime else player.play()
    for frame in frames:
        output = engine.process(frame)
        if output.emitted:
            gesture_count += 1
            typer.echo(f"   🤚 {_format_event(output.emitted)}")

    engine.stop()
    typer.echo(f"\n✅ Replay complete. {gesture_count} gestures detected.")


@app.command()
def labels():
    """List the gestures the engine can report."""
    from gesture_vision.landmarks import SUPPORTED_GESTURES

    for label in SUPPORTED_GESTURES:
        kind = "motion" if label.is_motion else "static"
        typer.echo(f"{label.value:12s} {label.display_name:12s} ({kind})")


def main():
    app()


if __name__ == "__main__":
    main()
