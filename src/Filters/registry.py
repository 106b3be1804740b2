from typing import Any, Callable, Dict

from Filters.identity_filter import IdentityFilter
from Filters.stem_filter import StemFilter

# name -> zero-arg factory; the pipeline calls the factory once per worker
FILTERS: Dict[str, Dict[str, Any]] = {
    "stem": {"factory": StemFilter, "description": "Snowball English stemming, lowercased"},
    "identity": {"factory": IdentityFilter, "description": "Pass lines through unchanged"},
}


class FunctionFilter:
    """Adapts a pure str -> str function to the filter interface."""
    def __init__(self, fn: Callable[[str], str]):
        self.fn = fn
        self.stage_name = getattr(fn, "__name__", "function")

    def process(self, text: str) -> str:
        return self.fn(text)


def function_filter(fn: Callable[[str], str]) -> Callable[[], FunctionFilter]:
    return lambda: FunctionFilter(fn)


def get_filter_factory(name: str) -> Callable[[], Any]:
    meta = FILTERS.get(name)
    if meta is None:
        raise ValueError(f"Unknown filter: {name!r} (available: {', '.join(sorted(FILTERS))})")
    return meta["factory"]
