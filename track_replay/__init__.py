"""
Track Replay - virtual-time replay of time-stamped spatial tracks

Drives a live set of identified entities from a windowed event source:
- A virtual clock with play/pause/seek/speed
- A driver that polls forward windows and snapshots on backward seeks
- Per-layer reconciliation of upsert/remove/clear deltas
"""

__version__ = "0.1.0"
