from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
from rich.console import Console
from tqdm import tqdm

from motiontrack.export.measurements import export_tracks_json, tracks_to_measurements
from motiontrack.inputs.video_input import VideoInput
from motiontrack.perception.detection.resource import DetectorInitError
from motiontrack.runtime.session import TrackingSession
from motiontrack.runtime.track_event_logger import TrackEventLogger
from motiontrack.utils.config import get, load_config
from motiontrack.utils.logger import setup_logger
from motiontrack.visualization.overlay import draw_hud, draw_tracks


def make_run_dir(base_dir: str | Path) -> Path:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(base_dir) / f"run_{ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def open_writer(vin: VideoInput, path: Path, codec: str = "mp4v") -> cv2.VideoWriter:
    """Open an output writer sized like the input; the input is stopped if the writer cannot open."""
    fourcc = cv2.VideoWriter_fourcc(*codec)
    writer = cv2.VideoWriter(str(path), fourcc, vin.meta.fps, (vin.meta.width, vin.meta.height))
    if not writer.isOpened():
        vin.stop()
        raise RuntimeError(f"Could not open VideoWriter ({codec}). Try a different codec/container.")
    return writer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="motiontrack - object tracking for motion studies")
    parser.add_argument("--config", default=None, help="Path to YAML config (defaults built in)")
    parser.add_argument("--input", required=True, help="Path to input video")
    parser.add_argument("--classes", nargs="*", default=None, help="Only track these classes")
    parser.add_argument("--matching", choices=["greedy", "hungarian"], default=None, help="Override tracking.matching")
    parser.add_argument("--no-trails", action="store_true", help="Do not draw history trails")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    cfg: Dict[str, Any] = load_config(args.config)
    if args.classes is not None:
        cfg["filter"]["classes"] = args.classes
    if args.matching:
        cfg["tracking"]["matching"] = args.matching
    if args.no_trails:
        cfg["overlay"]["show_trails"] = False

    run_dir = make_run_dir(get(cfg, "runtime.output_dir", "results"))
    logger = setup_logger(log_dir=run_dir, level=get(cfg, "runtime.log_level", "INFO"))

    console = Console()
    console.print(f"[bold]motiontrack[/bold] run dir: {run_dir}")

    vin = VideoInput(args.input)
    logger.info("Input video: %s", args.input)

    save_video = bool(get(cfg, "runtime.save_video", True))
    save_metrics = bool(get(cfg, "runtime.save_metrics", True))
    overlay_enabled = bool(get(cfg, "overlay.enabled", True))
    show_trails = bool(get(cfg, "overlay.show_trails", True))
    show_hud = bool(get(cfg, "overlay.show_hud", True))
    event_logger = TrackEventLogger(run_dir) if get(cfg, "runtime.save_events", True) else None

    writer = None
    out_video_path = run_dir / "output.mp4"
    if save_video and vin.meta:
        writer = open_writer(vin, out_video_path)

    session = TrackingSession(cfg, logger, frame_rate=vin.fps)
    try:
        session.start()
    except DetectorInitError as e:
        console.print(f"[bold red]Detector not ready:[/bold red] {e}")
        vin.stop()
        return 1

    metrics: Dict[str, Any] = {
        "input": {"path": args.input, "meta": vin.meta.__dict__ if vin.meta else {}},
        "tracking": cfg.get("tracking", {}),
        "frames": [],
    }
    last = None
    total = vin.meta.frame_count if vin.meta and vin.meta.frame_count > 0 else None
    frames = ((frame_id, packet.frame) for frame_id, packet in vin.frames())

    try:
        for tick in tqdm(session.run(frames), total=total, desc="Tracking"):
            last = tick
            timestamp_s = tick.frame_id / vin.fps

            if writer is not None:
                render = tick.frame
                if overlay_enabled:
                    render = draw_tracks(render, tick.state, show_trails=show_trails)
                    if show_hud:
                        render = draw_hud(render, tick.runtime.fps, tick.stats.counts_by_class, tick.warnings)
                writer.write(render)

            if event_logger is not None:
                event_logger.log(tick.frame_id, timestamp_s, tick.state, tick.created, tick.retired)

            if save_metrics:
                metrics["frames"].append(
                    {
                        "frame_id": tick.frame_id,
                        "fps": tick.runtime.fps,
                        "stages_ms": tick.runtime.stages_ms,
                        "warnings": tick.warnings,
                        "detection_count": len(tick.detections),
                        "track_count": tick.stats.total_count,
                        "created": len(tick.created),
                        "retired": len(tick.retired),
                        "detection_failed": tick.detection_failed,
                        "counts_by_class": tick.stats.counts_by_class,
                    }
                )
    except KeyboardInterrupt:
        session.stop()
        logger.info("Interrupted; finishing current run")
    finally:
        session.close()
        vin.stop()
        if writer is not None:
            writer.release()

    if save_metrics:
        metrics["detection_failures"] = session.detection_failures
        metrics_path = run_dir / "metrics.json"
        metrics_path.write_text(json.dumps(metrics, indent=2), encoding="utf-8")
        logger.info("Saved metrics: %s", metrics_path)

    if last is not None:
        export_tracks_json(run_dir / "tracks.json", last.state, last.stats, video_src=args.input)
        # first_seen is on the video timeline, so "now" is the last processed frame's time.
        video_now_s = last.frame_id / vin.fps
        measurements = tracks_to_measurements(
            last.state,
            current_time_s=video_now_s,
            now=video_now_s,
            fps=float(get(cfg, "export.fps", 30.0)),
            category=get(cfg, "export.category", "Value-added"),
            therblig=get(cfg, "export.therblig", "Transport"),
        )
        (run_dir / "measurements.json").write_text(json.dumps(measurements, indent=2), encoding="utf-8")
        console.print(f"Exported {len(measurements)} tracks; {last.summary()}")

    if writer is not None:
        logger.info("Saved video: %s", out_video_path)
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
