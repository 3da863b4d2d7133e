"""dailyvoice - daily quote narration with word-level highlighting."""

__version__ = "0.1.0"
__all__ = ["narrate"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "narrate":
        from .core import narrate

        return narrate
    raise AttributeError(f"module 'dailyvoice' has no attribute {name!r}")
