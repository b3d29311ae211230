"""
OSC preflight guard: deterministic connectivity checks for AbletonOSC before
running a batch of commands.

Returns structured diagnostics so callers get actionable error messages
instead of bare timeouts. The client itself never retries; ``attempts`` here
re-invokes the whole probe.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List, Optional

from .client import OscHandle
from .errors import OscClientError

NUM_TRACKS_ADDRESS = "/live/song/get/num_tracks"


# ---------------------------------------------------------------------------
# Individual check primitives
# ---------------------------------------------------------------------------

async def check_osc_bridge(handle: OscHandle,
                           attempts: int = 1,
                           delay_s: float = 1.5) -> Dict[str, Any]:
    """Verify AbletonOSC is answering.

    Args:
        handle: Handle to probe (created lazily on first check).
        attempts: Max probes.
        delay_s: Seconds between probes.

    Returns:
        ``{"ok": bool, "latency_ms": float|None, "attempts_used": int,
           "local_port": int|None, "message": str}``
    """
    last_error: Optional[str] = None
    local_port: Optional[int] = None
    for i in range(1, attempts + 1):
        t0 = time.monotonic()
        try:
            client = await handle.client()
            local_port = client.local_port
            ok = await client.test_connection()
        except OscClientError as exc:
            ok = False
            last_error = str(exc)
        elapsed_ms = (time.monotonic() - t0) * 1000
        if ok:
            return {
                "ok": True,
                "latency_ms": round(elapsed_ms, 1),
                "attempts_used": i,
                "local_port": local_port,
                "message": f"AbletonOSC responding ({elapsed_ms:.0f} ms, attempt {i}/{attempts})",
            }
        if i < attempts:
            await asyncio.sleep(delay_s)

    detail = f": {last_error}" if last_error else ""
    return {
        "ok": False,
        "latency_ms": None,
        "attempts_used": attempts,
        "local_port": local_port,
        "message": f"AbletonOSC unreachable after {attempts} attempt(s){detail}",
    }


async def check_track_accessible(handle: OscHandle, track_index: int) -> Dict[str, Any]:
    """Verify a specific track index exists in the open set.

    Args:
        handle: Handle to query.
        track_index: 0-based track index.

    Returns:
        ``{"ok": bool, "track_count": int|None, "message": str}``
    """
    try:
        count = await handle.query(NUM_TRACKS_ADDRESS, [], as_type=int)
    except OscClientError as exc:
        return {"ok": False, "track_count": None,
                "message": f"{NUM_TRACKS_ADDRESS} failed: {exc}"}
    if not 0 <= track_index < count:
        return {
            "ok": False,
            "track_count": count,
            "message": f"track_index {track_index} out of range (project has {count} tracks)",
        }
    return {
        "ok": True,
        "track_count": count,
        "message": f"Track {track_index} accessible ({count} tracks in project)",
    }


# ---------------------------------------------------------------------------
# Composite preflight
# ---------------------------------------------------------------------------

async def run_preflight(handle: OscHandle,
                        track_index: Optional[int] = None,
                        attempts: int = 1,
                        delay_s: float = 1.5) -> Dict[str, Any]:
    """Run all preflight checks and return a combined report.

    Checks run in dependency order; later checks are skipped once one fails
    so the caller gets the *first* actionable failure.

    Returns:
        ``{"ok": bool, "checks": [...], "failure_type": str|None,
           "message": str}``
    """
    checks: List[Dict[str, Any]] = []

    bridge = await check_osc_bridge(handle, attempts=attempts, delay_s=delay_s)
    checks.append({"name": "osc_bridge", **bridge})
    if not bridge["ok"]:
        return _build_report(checks, "osc_unreachable_preflight")

    if track_index is not None:
        track = await check_track_accessible(handle, track_index)
        checks.append({"name": "track_accessible", **track})
        if not track["ok"]:
            return _build_report(checks, "track_unreachable")

    return _build_report(checks, None)


def _build_report(checks: List[Dict[str, Any]],
                  failure_type: Optional[str]) -> Dict[str, Any]:
    ok = failure_type is None
    if ok:
        msg = f"All {len(checks)} preflight checks passed"
    else:
        failed = [c for c in checks if not c.get("ok")]
        msg = failed[0]["message"] if failed else "Unknown preflight failure"
    return {
        "ok": ok,
        "checks": checks,
        "failure_type": failure_type,
        "message": msg,
    }
