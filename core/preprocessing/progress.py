# core/preprocessing/progress.py
import threading
from tqdm import tqdm

class ProgressTracker:
    """Thread-safe progress counter with an optional tqdm bar.

    Workers call update() concurrently; the count is guarded by a lock so
    the final total is exact regardless of completion order. With
    enabled=False nothing is rendered but the count is still kept.
    """

    def __init__(self, total_items, unit="items", enabled=True):
        self.total = total_items
        self.processed = 0
        self._lock = threading.Lock()
        self._bar = tqdm(total=total_items, unit=unit, unit_scale=True) if enabled else None

    def update(self, count=1):
        """Advance the counter by count."""
        with self._lock:
            self.processed += count
            if self._bar is not None:
                self._bar.update(count)

    def complete(self, message=None):
        """Close the bar and print an optional completion line."""
        with self._lock:
            if self._bar is None:
                return
            self._bar.close()
            self._bar = None
        if message:
            print(f"  ✓ {message}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # complete() is never reached on error; just close the bar
        if exc_type is not None:
            with self._lock:
                if self._bar is not None:
                    self._bar.close()
                    self._bar = None
        return False
