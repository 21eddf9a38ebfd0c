def _check(seconds: int):
    if seconds < 0:
        raise ValueError(f"时长不能为负: {seconds}")


def format_duration(seconds: int) -> str:
    """紧凑格式：有小时时为 "1h 5m"，否则 "5m"（不足一分钟为 "0m"）"""
    _check(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_stopwatch(seconds: int) -> str:
    """计时器显示格式：H:MM:SS，不足一小时为 M:SS"""
    _check(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
