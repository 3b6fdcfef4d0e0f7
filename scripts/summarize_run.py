#!/usr/bin/env python3
import json
import sys
from pathlib import Path
from statistics import mean, median


def safe_mean(xs):
    xs = [x for x in xs if x is not None]
    return mean(xs) if xs else None


def pct(n, d):
    return (100.0 * n / d) if d else 0.0


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/summarize_run.py results/run_YYYYMMDD_HHMMSS")
        sys.exit(1)

    run_dir = Path(sys.argv[1])
    metrics_path = run_dir / "metrics.json"
    if not metrics_path.exists():
        raise FileNotFoundError(f"Missing: {metrics_path}")

    m = json.loads(metrics_path.read_text())
    frames = m.get("frames", [])
    n = len(frames)
    if n == 0:
        print("No frames found in metrics.json")
        return

    fps_vals = [f.get("fps") for f in frames if f.get("fps") is not None]
    det_ms = [f.get("stages_ms", {}).get("detection") for f in frames]
    trk_ms = [f.get("stages_ms", {}).get("tracking") for f in frames]
    track_counts = [f.get("track_count", 0) for f in frames]
    created = sum(f.get("created", 0) for f in frames)
    retired = sum(f.get("retired", 0) for f in frames)
    failed = sum(1 for f in frames if f.get("detection_failed"))

    class_frames = {}
    for f in frames:
        for name, count in (f.get("counts_by_class") or {}).items():
            if count:
                class_frames[name] = class_frames.get(name, 0) + 1

    print("\n============== MOTIONTRACK RUN SUMMARY ==============")
    print(f"Run dir: {run_dir}")
    print(f"Frames: {n}")
    if fps_vals:
        print(f"FPS  avg={mean(fps_vals):.2f}  med={median(fps_vals):.2f}  min={min(fps_vals):.2f}  max={max(fps_vals):.2f}")
    else:
        print("FPS: (missing)")

    print("\nLatency (ms) (avg):")
    sm = safe_mean(det_ms)
    print(f"  detection: {sm:.2f}" if sm is not None else "  detection: (missing)")
    sm = safe_mean(trk_ms)
    print(f"  tracking:  {sm:.3f}" if sm is not None else "  tracking:  (missing)")

    print("\nTracks:")
    print(f"  active avg={mean(track_counts):.2f}  max={max(track_counts)}")
    print(f"  created={created}  retired={retired}")
    print(f"  detection failures: {failed}/{n} ({pct(failed, n):.1f}%)")

    if class_frames:
        print("\nClass presence (frames with >=1 track):")
        for name, c in sorted(class_frames.items(), key=lambda kv: -kv[1]):
            print(f"  {name:14s}: {c:5d} ({pct(c, n):.1f}%)")
    print("=====================================================\n")


if __name__ == "__main__":
    main()
