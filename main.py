import argparse
import asyncio
import os
import time
from typing import Dict, List, Optional

import cv2
from tqdm import tqdm

from filtercam.camera import CameraSource
from filtercam.config import load_and_merge, setup_logging
from filtercam.session import FilterSession
from filtercam.types import CATEGORIES, OverlayPlacement
from filtercam.writers import PlacementWriter, build_record

LAYER_COLORS = {
    "head": (0, 200, 255),
    "eyes": (255, 120, 0),
    "frame": (0, 255, 0),
}


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Live face filter preview")
    p.add_argument("--config", default=None, help="Optional YAML config path")
    p.add_argument("--camera", type=int, default=None, help="Camera index for cv2.VideoCapture")
    p.add_argument("--width", type=int, default=None, help="Video width in pixels")
    p.add_argument("--height", type=int, default=None, help="Video height in pixels")
    p.add_argument(
        "--register",
        action="append",
        default=[],
        metavar="VALUE:LABEL:IMAGE[:CATEGORY]",
        help="Register an extra filter (repeatable)",
    )
    p.add_argument("--headless", action="store_true", help="Run without a preview window")
    p.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    p.add_argument("--output-dir", default=None, help="Write placements.json + summary.yaml here")
    p.add_argument("--log-level", default=None, help="Override log level (e.g., INFO, DEBUG)")
    return p.parse_args()


def parse_register(spec: str) -> Dict[str, str]:
    """Parse VALUE:LABEL:IMAGE[:CATEGORY]; IMAGE may itself contain colons."""
    parts = spec.split(":", 2)
    if len(parts) < 3:
        raise SystemExit(f"--register expects VALUE:LABEL:IMAGE[:CATEGORY], got {spec!r}")
    value, label, rest = parts
    image, category = rest, "eyes"
    head, sep, tail = rest.rpartition(":")
    if sep and tail in CATEGORIES:
        image, category = head, tail
    return {"value": value, "label": label, "image": image, "category": category}


def draw_overlays(frame, placements: List[OverlayPlacement], status: str):
    vis = frame.copy()
    for pl in placements:
        color = LAYER_COLORS.get(pl.layer, (255, 255, 255))
        if pl.layer == "frame":
            cv2.rectangle(vis, (0, 0), (int(pl.width) - 1, int(pl.height) - 1), color, 4)
            continue
        center = (pl.x + pl.width / 2.0, pl.y + pl.height / 2.0)
        box = cv2.boxPoints((center, (pl.width, pl.height), pl.rotation_deg)).astype("int32")
        cv2.polylines(vis, [box], True, color, 2)
        cv2.putText(vis, pl.layer, (int(pl.x), int(pl.y) - 4), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)
    cv2.putText(vis, status, (10, vis.shape[0] - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)
    return vis


def handle_key(key: int, session: FilterSession) -> bool:
    """Apply a preview key press. Returns False when the user asked to quit."""
    if key == ord("q"):
        return False
    step = session.layout.pitch / 2.0
    if key in (ord("a"), ord("d")):
        session.strip.scroll_by(-step if key == ord("a") else step)
        session.selection.on_scroll()
    elif key == ord(" ") and session.entries:
        idx = session.layout.closest_to_center(session.strip.scroll_left, len(session.entries))
        session.selection.tap(session.entries[idx].instance_id)
    return True


def loop_delay(headless: bool, frame, interval: float) -> float:
    """Seconds the UI loop yields per pass.

    The preview is paced by waitKey, so it only yields while frames arrive.
    Without a frame there is nothing to show, so wait a full interval.
    """
    if headless or frame is None:
        return interval
    return 0.0


async def run(cfg: dict, headless: bool, duration: Optional[float]) -> None:
    vid = cfg.get("video", {})
    out_dir = cfg.get("paths", {}).get("output_dir")
    writer = PlacementWriter(out_dir, cfg) if out_dir else None

    with CameraSource(vid.get("capture_index", 0), vid.get("width", 640), vid.get("height", 480)) as cam:
        if not cam.opened:
            raise SystemExit(f"Failed to open camera {cam.index}")
        bar = tqdm(total=100, desc="Loading model", unit="%")
        bar_open = True

        def on_progress(value: int) -> None:
            bar.n = value
            bar.refresh()

        session = FilterSession(cfg, cam, on_progress=on_progress)
        started = time.monotonic()
        last_detections = 0
        async with session:
            while True:
                frame = cam.grab()
                # Let the detection loop and timers run
                await asyncio.sleep(loop_delay(headless, frame, session.loop.frame_interval))

                if bar_open and (session.progress.done or session.progress.failed):
                    bar.close()
                    bar_open = False

                placements = session.placements()
                stats = session.loop.stats
                if writer is not None and stats.detections != last_detections:
                    last_detections = stats.detections
                    writer.add(build_record(stats.detections, session.active_filter, placements, len(session.faces)))

                if not headless:
                    if frame is not None:
                        active = session.active_filter
                        if session.detector_failed:
                            status = "model failed to load"
                        elif not session.detector_ready:
                            status = f"loading {session.progress.value}%"
                        else:
                            status = f"{active.label if active else '-'} | faces: {len(session.faces)}"
                        cv2.imshow("filtercam", draw_overlays(frame, placements, status))
                    # Keep the window responsive even while no frames arrive
                    if not handle_key(cv2.waitKey(1) & 0xFF, session):
                        break

                if duration is not None and time.monotonic() - started >= duration:
                    break
            loop_stats = session.loop.stats

        if bar_open:
            bar.close()
    if not headless:
        cv2.destroyAllWindows()

    if writer is not None:
        summary = writer.finalize(loop_stats)
        print("Summary:", summary)


def main():
    # Reduce TF/MediaPipe verbosity if desired
    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

    args = parse_args()

    cli_overrides: dict = {"video": {}, "runtime": {}, "paths": {}}
    if args.camera is not None:
        cli_overrides["video"]["capture_index"] = args.camera
    if args.width is not None:
        cli_overrides["video"]["width"] = args.width
    if args.height is not None:
        cli_overrides["video"]["height"] = args.height
    if args.output_dir:
        cli_overrides["paths"]["output_dir"] = args.output_dir
    if args.log_level:
        cli_overrides["runtime"]["log_level"] = args.log_level

    cfg = load_and_merge(args.config, cli_overrides)
    if args.register:
        cfg["filters"] = list(cfg.get("filters") or []) + [parse_register(s) for s in args.register]

    setup_logging(cfg.get("runtime", {}).get("log_level", "INFO"))

    try:
        asyncio.run(run(cfg, args.headless, args.duration))
    except KeyboardInterrupt:
        print("Interrupted")


if __name__ == "__main__":
    main()
