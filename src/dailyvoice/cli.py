"""Typer CLI definition for dailyvoice."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from .alignment import find_display_words_at_time
from .cache import LayeredCache, StoreKind
from .config import load_config
from .core import list_available_voices, load_alignment, narrate, render_highlight
from .tts.errors import TTSAPIError, TTSAuthError

app = typer.Typer(help="Narrate daily quotes with word-level highlighting")
cache_app = typer.Typer(help="Inspect and maintain the layered cache")
app.add_typer(cache_app, name="cache")

STORE_HELP = "Store: ephemeral, persistent or session (all if omitted)"


def configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def fail(message: str, error: Exception, debug: bool) -> typer.Exit:
    """Print an error and return the exit to raise."""
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}: {error}", err=True)
    return typer.Exit(1)


def process_text_input(text: str | None) -> str:
    """Return the text to narrate.

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")
    return text


def parse_store(store: str | None) -> StoreKind | None:
    if store is None:
        return None
    try:
        return StoreKind(store)
    except ValueError:
        choices = ", ".join(kind.value for kind in StoreKind)
        raise typer.BadParameter(
            f"Unknown store {store!r}. Choose from: {choices}"
        ) from None


def open_cache(enabled: bool) -> LayeredCache | None:
    return LayeredCache.open() if enabled else None


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to narrate"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Save audio and alignment instead of playing"
    ),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID (from config if omitted)"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Narration provider (from config if omitted)"
    ),
    highlight_range: int | None = typer.Option(
        None, "-r", "--range", min=0, help="Words highlighted around the spoken word"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable caching"),
    no_highlight: bool = typer.Option(
        False, "--no-highlight", help="Play without live highlighting"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
) -> None:
    """Narrate text, playing it with live word highlighting or saving it."""
    configure_logging(debug)

    config = load_config()
    provider = provider or config.tts.provider
    voice = voice or config.tts.voice
    if highlight_range is None:
        highlight_range = config.highlight.range
    cache_enabled = config.cache.enabled and not no_cache

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except (OSError, UnicodeDecodeError) as e:
                raise fail(f"Unable to read {file}", e, debug) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        narration_text = process_text_input(text)
    except ValueError as e:
        raise fail("Invalid input", e, debug) from None

    display_words = narration_text.split()

    def show_frame(active: list[int]) -> None:
        typer.echo("\r\033[2K" + render_highlight(display_words, active), nl=False)

    on_frame = None if no_highlight or output else show_frame

    try:
        narration = asyncio.run(
            narrate(
                narration_text,
                provider=provider,
                voice=voice,
                output=output,
                highlight_range=highlight_range,
                cache=open_cache(cache_enabled),
                on_frame=on_frame,
                provider_options={
                    "model_id": config.tts.model,
                    "output_format": config.tts.output_format,
                },
            )
        )
    except TTSAuthError as e:
        raise fail("Authentication failed", e, debug) from None
    except TTSAPIError as e:
        raise fail("Narration failed", e, debug) from None
    except KeyError as e:
        raise fail("Unknown provider", e, debug) from None
    except ValueError as e:
        raise fail("Invalid input", e, debug) from None
    except OSError as e:
        raise fail("Failed to save narration", e, debug) from None
    except RuntimeError as e:
        raise fail("Failed to play audio", e, debug) from None

    if on_frame is not None:
        typer.echo("")
    if narration.audio_path:
        typer.echo(f"Audio saved to {narration.audio_path}")
        typer.echo(f"Alignment saved to {narration.alignment_path}")


@app.command()
def align(
    alignment_file: Path = typer.Argument(..., help="Alignment JSON file"),
    text: str | None = typer.Option(
        None, "-t", "--text", help="Source text (read from the file if omitted)"
    ),
    at: int | None = typer.Option(
        None, "--at", min=0, help="Show the highlight at this playback time (ms)"
    ),
    highlight_range: int = typer.Option(
        2, "-r", "--range", min=0, help="Words highlighted around the spoken word"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose errors"),
) -> None:
    """Print word timings from an alignment file."""
    configure_logging(debug)

    try:
        source_text, words = load_alignment(alignment_file, text)
    except (OSError, ValueError) as e:
        raise fail(f"Unable to read {alignment_file}", e, debug) from None

    if not words:
        typer.echo("No words could be aligned", err=True)
        raise typer.Exit(1)

    if at is None:
        for i, word in enumerate(words):
            typer.echo(f"{i:>4}  {word.start_time:>7}  {word.end_time:>7}  {word.word}")
        return

    display_words = source_text.split() or [word.word for word in words]
    active = find_display_words_at_time(words, display_words, at, highlight_range)
    typer.echo(render_highlight(display_words, active))


@app.command()
def voices(
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Narration provider (from config if omitted)"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the voice cache"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose errors"),
) -> None:
    """List available voices."""
    configure_logging(debug)

    config = load_config()
    provider = provider or config.tts.provider
    cache = open_cache(config.cache.enabled and not no_cache)

    try:
        available = asyncio.run(list_available_voices(provider, cache))
    except Exception as e:
        raise fail("Failed to list voices", e, debug) from None

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")


@cache_app.command("stats")
def cache_stats() -> None:
    """Show entry counts per store."""
    stats = LayeredCache.open().stats()
    typer.echo(f"ephemeral:  {stats.memory_entries}")
    typer.echo(f"persistent: {stats.persistent_entries}")
    typer.echo(f"session:    {stats.session_entries}")


@cache_app.command("clear")
def cache_clear(
    store: str | None = typer.Option(None, "-s", "--store", help=STORE_HELP),
) -> None:
    """Remove cache-owned entries."""
    kind = parse_store(store)
    cache = LayeredCache.open()
    for target in [kind] if kind else list(StoreKind):
        cache.clear(target)
    typer.echo(f"Cleared {kind.value if kind else 'all'} cache")


@cache_app.command("invalidate")
def cache_invalidate(
    patterns: list[str] = typer.Argument(..., help="Substrings of keys to remove"),
) -> None:
    """Remove every entry whose key contains one of the patterns."""
    LayeredCache.open().invalidate(patterns)
    typer.echo(f"Invalidated entries matching: {', '.join(patterns)}")


@cache_app.command("sweep")
def cache_sweep(
    store: str | None = typer.Option(None, "-s", "--store", help=STORE_HELP),
) -> None:
    """Delete expired and unreadable entries."""
    removed = LayeredCache.open().sweep_expired(parse_store(store))
    typer.echo(f"Removed {removed} expired entries")
