"""File download and archive extraction for exports."""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from wegli.domain.config.retry import RetryPolicy
from wegli.domain.errors import DownloadError, UnzipError
from wegli.infrastructure.http_client import RequestDescriptor, RequestExecutor

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "file.zip"
CHUNK_SIZE = 64 * 1024


def filename_from_url(url: str) -> str:
    """Last path segment of ``url``, or DEFAULT_FILENAME if there is none"""
    segment = unquote(urlparse(url).path.rsplit("/", 1)[-1])
    return segment or DEFAULT_FILENAME


def download_to_dir(
    directory: Path,
    url: str,
    executor: RequestExecutor,
    policy: Optional[RetryPolicy] = None,
) -> Path:
    """Stream ``url`` into ``directory``.

    Args:
        directory: Target directory (must exist)
        url: Absolute http(s) URL of the file
        executor: Executor used for the request
        policy: Retry policy for the request

    Returns:
        Path of the written file

    Raises:
        DownloadError: Invalid URL, broken stream or I/O failure
        WegliError: Request errors from the executor propagate unchanged
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise DownloadError(f"URL parse error: {url!r}")

    file_path = Path(directory) / filename_from_url(url)
    response = executor.execute(RequestDescriptor("GET", url, stream=True), policy)
    try:
        with open(file_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                f.write(chunk)
    except requests.exceptions.RequestException as e:
        file_path.unlink(missing_ok=True)
        raise DownloadError(f"download of {url} failed: {e}") from e
    except OSError as e:
        file_path.unlink(missing_ok=True)
        raise DownloadError(f"could not write {file_path}: {e}") from e
    finally:
        response.close()

    logger.info(f"Downloaded {url} to {file_path}")
    return file_path


def _enclosed_path(target_dir: Path, member_name: str) -> Optional[Path]:
    """Resolve an archive member below target_dir, None if it would escape it"""
    root = target_dir.resolve()
    candidate = (root / member_name).resolve()
    if candidate == root or root not in candidate.parents:
        return None
    return candidate


def unzip_archive(zip_path: Path, target_dir: Path) -> None:
    """Extract ``zip_path`` into ``target_dir``.

    Members whose names would land outside ``target_dir`` are skipped.

    Raises:
        UnzipError: Invalid archive or I/O failure
    """
    try:
        with zipfile.ZipFile(zip_path) as archive:
            for info in archive.infolist():
                out_path = _enclosed_path(Path(target_dir), info.filename)
                if out_path is None:
                    logger.warning(f"Skipping archive member outside target dir: {info.filename}")
                    continue
                if info.is_dir():
                    out_path.mkdir(parents=True, exist_ok=True)
                    continue
                out_path.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, open(out_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except zipfile.BadZipFile as e:
        raise UnzipError(f"invalid zip archive {zip_path}: {e}") from e
    except OSError as e:
        raise UnzipError(f"could not extract {zip_path}: {e}") from e
