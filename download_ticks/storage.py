"""JSON file persistence for downloaded klines."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from download_ticks.errors import DataFileEmptyError, DataFileError
from download_ticks.models import Kline

logger = logging.getLogger(__name__)

_KLINE_LIST = TypeAdapter(list[Kline])


def read_klines(path: Path) -> list[Kline]:
    """Read klines from a JSON file.

    Args:
        path: File written by ``write_klines`` (or an older release).

    Returns:
        Klines in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataFileError: If the file is not a JSON list of klines.
    """
    data = Path(path).read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DataFileError(f"Invalid klines data in {path}: not UTF-8 text ({e})") from e
    if not text.strip():
        return []
    try:
        return _KLINE_LIST.validate_json(text)
    except ValidationError as e:
        raise DataFileError(f"Invalid klines data in {path}: {e}") from e


def write_klines(path: Path, klines: list[Kline]) -> None:
    """Write klines to ``path`` as a JSON array.

    The file is replaced atomically so an interrupted download never
    leaves a truncated file behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = _KLINE_LIST.dump_json(klines)

    mode = _file_mode(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _file_mode(path: Path) -> int:
    # mkstemp creates 0600 files; keep the existing mode or the umask default.
    try:
        return os.stat(path).st_mode & 0o777
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def dump_klines(klines: list[Kline], indent: int | None = None) -> str:
    """Serialize klines to a JSON string."""
    return json.dumps(_KLINE_LIST.dump_python(klines, mode="json"), indent=indent)


def last_close_time(path: Path) -> datetime:
    """Close time of the last kline saved in ``path``.

    Used to resume a download from the last saved point.

    Raises:
        DataFileEmptyError: If the file holds no klines.
    """
    klines = read_klines(path)
    if not klines:
        raise DataFileEmptyError(f"Data from file is empty: {path}")
    return klines[-1].close_time


def merge_klines(existing: list[Kline], new: list[Kline]) -> list[Kline]:
    """Merge two kline lists, de-duplicated by open time and sorted.

    When both lists contain a candle with the same open time, the one
    from ``new`` wins.
    """
    unique = {k.open_time: k for k in existing}
    for kline in new:
        unique[kline.open_time] = kline
    return sorted(unique.values(), key=lambda k: k.open_time)
