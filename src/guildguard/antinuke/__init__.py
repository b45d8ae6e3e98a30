"""
Anti-nuke detection and safe mode.

- **event_window.py**: Generic sliding-window event counter.
- **detector.py**: Per-kind thresholds over destructive events.
- **safe_mode.py**: Normal/SafeMode state machine and lockdown sweep.
"""
