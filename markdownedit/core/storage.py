from __future__ import annotations

from datetime import datetime
import logging
import os
from pathlib import Path
import shutil
from uuid import uuid4

from .errors import FileReadError, FileWriteError

logger = logging.getLogger("markdownedit.storage")

IMAGE_DIRECTORY_NAME = "img"
_IMAGE_EXTENSIONS = {"png", "jpg", "gif", "webp", "bmp", "svg"}


def read_text_file(path: str | os.PathLike[str]) -> str:
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        logger.warning("Reading %s failed: %s", file_path, exc)
        raise FileReadError(file_path, exc) from exc

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Reading %s failed: %s", file_path, exc)
        raise FileReadError(file_path, exc) from exc


def _ensure_parent(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Creating parent directories of %s failed: %s", path, exc)
        raise FileWriteError(path, exc, step="create_dir") from exc


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    temp_path = path.parent / f".{path.name}.{os.getpid()}.{uuid4().hex}.tmp"
    try:
        with temp_path.open("wb") as file:
            file.write(data)
            file.flush()
            os.fsync(file.fileno())
        os.replace(temp_path, path)
    except OSError as exc:
        logger.warning("Writing %s failed: %s", path, exc)
        raise FileWriteError(path, exc, step="write") from exc
    finally:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.debug("Could not remove temporary file %s", temp_path)


def write_text_file(path: str | os.PathLike[str], content: str) -> None:
    """Write ``content`` to ``path`` as UTF-8, creating missing parent folders.

    The file is replaced atomically, so a failed save never leaves a
    half-written document behind.
    """
    target = Path(path)
    _ensure_parent(target)
    _atomic_write_bytes(target, content.encode("utf-8"))


def write_binary_file(path: str | os.PathLike[str], data: bytes) -> None:
    target = Path(path)
    _ensure_parent(target)
    _atomic_write_bytes(target, data)


def copy_file(source: str | os.PathLike[str], target: str | os.PathLike[str]) -> None:
    target_path = Path(target)
    _ensure_parent(target_path)
    try:
        shutil.copy2(source, target_path)
    except OSError as exc:
        logger.warning("Copying %s to %s failed: %s", source, target_path, exc)
        raise FileWriteError(target_path, exc, step="copy") from exc


def normalize_image_extension(name: str, mime_type: str = "") -> str:
    _, dot, extension = name.rpartition(".")
    extension = extension.lower() if dot else ""
    if extension == "jpeg":
        extension = "jpg"
    if extension in _IMAGE_EXTENSIONS:
        return extension

    by_mime = {
        "image/png": "png",
        "image/jpeg": "jpg",
        "image/gif": "gif",
        "image/webp": "webp",
        "image/bmp": "bmp",
        "image/svg+xml": "svg",
    }
    return by_mime.get(mime_type.lower(), "png")


def build_image_asset_path(
    document_path: str | os.PathLike[str],
    extension: str,
    now: datetime | None = None,
) -> tuple[Path, str]:
    """Return the absolute target for a new image asset and its markdown source.

    Images live in an ``img`` folder next to the document and are named by
    timestamp plus a short random suffix, e.g. ``img/20240131T101500-3fa2b1.png``.
    """
    stamp = (now or datetime.now()).strftime("%Y%m%dT%H%M%S")
    file_name = f"{stamp}-{uuid4().hex[:6]}.{normalize_image_extension('.' + extension)}"
    target = Path(document_path).parent / IMAGE_DIRECTORY_NAME / file_name
    return target, f"{IMAGE_DIRECTORY_NAME}/{file_name}"


def ensure_markdown_suffix(path: str | os.PathLike[str]) -> Path:
    result = Path(path)
    if result.suffix.lower() != ".md":
        result = result.with_suffix(".md")
    return result


def suggest_untitled_path(directory: Path) -> Path:
    candidate = directory / "Untitled.md"
    counter = 1
    while candidate.exists():
        counter += 1
        candidate = directory / f"Untitled {counter}.md"
    return candidate
