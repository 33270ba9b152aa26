def format_countdown(seconds: float) -> str:
    """Render remaining time as ``SS.cc`` (whole seconds, then hundredths)."""
    hundredths = int(round(max(0.0, float(seconds)) * 100))
    return f"{hundredths // 100:02d}.{hundredths % 100:02d}"


def format_elapsed(seconds: float) -> str:
    """Render an elapsed Color Match time as ``M:SS.t``."""
    tenths = int(round(max(0.0, float(seconds)) * 10))
    minutes, rest = divmod(tenths, 600)
    return f"{minutes}:{rest // 10:02d}.{rest % 10}"
