"""Shared test helpers: a manual clock implementing the canvas timer interface, event factories."""

from types import SimpleNamespace
from typing import Any, Callable, List, Optional, Tuple


class ManualTimer:
    """Stand-in for matplotlib's TimerBase driven by a ManualClock."""

    def __init__(self, clock: "ManualClock", interval: int):
        self.clock = clock
        self.interval = interval
        self.single_shot = False
        self.callbacks: List[Tuple[Callable, tuple, dict]] = []
        self.due: Optional[int] = None
        self.stopped = False

    def add_callback(self, func, *args, **kwargs):
        self.callbacks.append((func, args, kwargs))
        return func

    def start(self, interval: Optional[int] = None):
        if interval is not None:
            self.interval = interval
        self.stopped = False
        self.due = self.clock.now + self.interval
        self.clock._schedule(self)

    def stop(self):
        self.stopped = True
        self.due = None
        self.clock._unschedule(self)

    def fire(self):
        for func, args, kwargs in list(self.callbacks):
            func(*args, **kwargs)


class ManualClock:
    """Deterministic time source. Timers only fire inside advance()."""

    def __init__(self):
        self.now = 0
        self.created: List[ManualTimer] = []
        self._scheduled: List[Tuple[int, int, ManualTimer]] = []
        self._seq = 0

    def __call__(self, interval: int) -> ManualTimer:
        return self.new_timer(interval)

    def new_timer(self, interval: int = 0) -> ManualTimer:
        timer = ManualTimer(self, interval)
        self.created.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return len(self._scheduled)

    def _schedule(self, timer: ManualTimer):
        self._unschedule(timer)
        self._seq += 1
        self._scheduled.append((timer.due, self._seq, timer))

    def _unschedule(self, timer: ManualTimer):
        self._scheduled = [entry for entry in self._scheduled if entry[2] is not timer]

    def advance(self, ms: int):
        """Move time forward, firing every timer that falls due on the way in order."""
        target = self.now + ms
        while True:
            due = [entry for entry in self._scheduled if entry[0] <= target]
            if not due:
                break
            entry = min(due, key=lambda e: (e[0], e[1]))
            self._scheduled.remove(entry)
            timer = entry[2]
            self.now = entry[0]
            if not timer.single_shot:
                timer.due = self.now + timer.interval
                self._schedule(timer)
            else:
                timer.due = None
            timer.fire()
        self.now = target


def mouse_event(ax, x: Optional[float], y: Optional[float], button: Any = 1,
                key: Optional[str] = None, dblclick: bool = False,
                px: Optional[Tuple[float, float]] = None):
    """Minimal matplotlib-like mouse event in data coordinates."""
    pixel = px if px is not None else (0.0, 0.0)
    return SimpleNamespace(
        inaxes=ax if x is not None else None,
        xdata=x,
        ydata=y,
        x=pixel[0],
        y=pixel[1],
        button=button,
        key=key,
        dblclick=dblclick,
        step=0,
    )


def key_event(ax, key: str):
    return SimpleNamespace(key=key, inaxes=ax, xdata=None, ydata=None, x=0.0, y=0.0)


def node(node_id: str, x: float = 0.0, y: float = 0.0, **extra) -> dict:
    data = {"id": node_id, "position": {"x": x, "y": y}}
    data.update(extra)
    return data


def edge(edge_id: str, source: str, target: str, **extra) -> dict:
    data = {"id": edge_id, "source": source, "target": target}
    data.update(extra)
    return data
