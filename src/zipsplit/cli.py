"""CLI implementation for zipsplit."""

import base64
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from . import open_split
from .core.model import Result, SegmentInfo
from .core.util import result_asdict

app = typer.Typer(add_completion=False, help="Inspect split zip archives as one seekable stream.")


def _normalise(src: str) -> str:
    parsed_url = urlparse(src)
    if parsed_url.scheme and parsed_url.netloc:  # It's a URL
        return src
    return str(Path(src).resolve())


def _segment_infos(channel) -> list[SegmentInfo]:
    if hasattr(channel, "describe"):
        return channel.describe()
    # a lone segment is not wrapped
    return [SegmentInfo(0, str(getattr(channel, "name", "")), channel.size, 0)]


def inspect_source(src: str) -> Result:
    """Open one split archive and summarise its segments."""
    channel = open_split(_normalise(src))
    try:
        infos = _segment_infos(channel)
        data = {
            "source": src,
            "size": channel.size,
            "segment_count": len(infos),
            "segments": [asdict(info) for info in infos],
        }
        return Result(True, data, None, getattr(channel, "bytes_fetched", 0))
    finally:
        channel.close()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log segment discovery and validation"),
):
    """Inspect split zip archives (.z01, .z02, ..., .zip)."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")


@app.command()
def info(
    sources: list[str] = typer.Argument(..., help="Last segments (.zip) of split archives"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
):
    """Show the segments of one or many split archives."""
    results: list[Result] = []
    for src in sources:
        try:
            res = inspect_source(src)
        except Exception as e:
            res = Result(success=False, data=None, error=str(e), bytes_fetched=0)
        results.append(res)

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        if len(sources) == 1 and not jsonl:
            json.dump(result_asdict(results[0]), sink, indent=2)
            sink.write("\n")
        else:
            for res in results:
                sink.write(json.dumps(result_asdict(res)))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    if any(not r.success for r in results):
        raise typer.Exit(code=1)


@app.command()
def peek(
    source: str = typer.Argument(..., help="Last segment (.zip) of a split archive"),
    disk: int = typer.Option(0, "--disk", min=0, help="Disk number (0-based segment index)"),
    offset: int = typer.Option(0, "--offset", min=0, help="Offset relative to the start of the disk"),
    length: int = typer.Option(64, "--length", min=1, help="Number of bytes to read"),
):
    """Read bytes at a (disk, offset) coordinate and print them as Base64."""
    try:
        channel = open_split(_normalise(source))
    except Exception as e:
        typer.echo(json.dumps({"success": False, "error": str(e)}))
        raise typer.Exit(code=1)

    try:
        if hasattr(channel, "seek_to_disk_offset"):
            position = channel.seek_to_disk_offset(disk, offset)
        elif disk == 0:
            position = channel.seek(offset)
        else:
            raise ValueError(f"Disk number {disk} out of range: archive has 1 segment")
        data = channel.read(length)
        res = Result(True, {
            "position": position,
            "disk": disk,
            "offset": offset,
            "peek_bytes_b64": base64.b64encode(data).decode(),
        }, None, len(data))
    except Exception as e:
        res = Result(False, None, str(e), 0)
    finally:
        channel.close()

    typer.echo(json.dumps(result_asdict(res), indent=2))
    if not res.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
