from timeit import default_timer as timer


def time_function_call(f, *args, **kwargs):
    """Call `f` and return its result together with the elapsed wall time in seconds."""
    start = timer()
    result = f(*args, **kwargs)
    return result, timer() - start


def format_time(seconds):
    """Human readable duration of a layout or drawing step: '12 ms', '3s', '1m 5s', '2h 0m 7s'."""
    if seconds < 1:
        return f"{int(seconds * 1000)} ms"
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = int(seconds % 60)
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


def format_count(n):
    """Short form of a number of nodes: 950 nodes -> '950', 12_345 nodes -> '12.3K'."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(n)
