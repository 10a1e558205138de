"""Selection/filter state and its timers."""

from actornet.state.controller import DetailPanel, ViewController, ViewSnapshot
from actornet.state.scheduling import Animator, Debouncer, ease_out_cubic

__all__ = [
    "Animator",
    "Debouncer",
    "DetailPanel",
    "ViewController",
    "ViewSnapshot",
    "ease_out_cubic",
]
