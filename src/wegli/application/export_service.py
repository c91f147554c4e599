"""Export service - downloads the latest notice export and reads its CSV"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from wegli.domain.errors import ExportNotFoundError
from wegli.domain.models.export import Export, ExportNotice
from wegli.infrastructure.download import download_to_dir, unzip_archive

if TYPE_CHECKING:
    from wegli.infrastructure.wegli.client import WegliClient

logger = logging.getLogger(__name__)


def latest_export(exports: List[Export]) -> Optional[Export]:
    """Newest export by creation time, None for an empty list"""
    if not exports:
        return None
    return max(exports, key=lambda export: export.created_at)


def find_csv(directory: Path) -> Optional[Path]:
    """First .csv file (case-insensitive) directly inside ``directory``"""
    for entry in sorted(Path(directory).iterdir()):
        if entry.is_file() and entry.name.lower().endswith(".csv"):
            return entry
    return None


def read_export_notices(csv_path: Path) -> List[ExportNotice]:
    """Read the notices of an extracted export CSV

    Raises:
        ConversionError: If a row cannot be converted
    """
    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        return [ExportNotice.from_json(row) for row in csv.DictReader(f)]


class ExportService:
    """Downloads notice exports through a WegliClient"""

    def __init__(self, client: "WegliClient"):
        self.client = client

    def download_latest_export(self, path: Path, public: bool = False, unzip: bool = True) -> Path:
        """Download the newest export into ``path``

        Args:
            path: Existing directory for the archive (and extracted files)
            public: Use the public exports instead of the user's ones
            unzip: Extract the archive and return the CSV inside

        Returns:
            Path to the zip archive, or to the extracted CSV if ``unzip``

        Raises:
            ExportNotFoundError: No export available, or no CSV in the archive
            DownloadError: Download failed
            UnzipError: Extraction failed
        """
        exports = self.client.get_exports(public=public)
        export = latest_export(exports)
        if export is None:
            raise ExportNotFoundError("no export found")
        logger.info(f"Latest export: {export.download.filename} ({export.created_at.isoformat()})")

        archive_path = download_to_dir(
            path, export.download.url, self.client.executor, self.client.retry_policy
        )
        if not unzip:
            return archive_path

        unzip_archive(archive_path, path)
        csv_path = find_csv(path)
        if csv_path is None:
            raise ExportNotFoundError(f"could not find csv in: {path}")
        logger.info(f"Extracted export to {csv_path}")
        return csv_path
