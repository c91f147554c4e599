"""Typed models of weg.li API resources."""

from wegli.domain.models.charge import Charge
from wegli.domain.models.district import District
from wegli.domain.models.export import Export, ExportDownload, ExportNotice, ExportType
from wegli.domain.models.notice import Notice, NoticePhoto, NoticeStatus

__all__ = [
    "Charge",
    "District",
    "Export",
    "ExportDownload",
    "ExportNotice",
    "ExportType",
    "Notice",
    "NoticePhoto",
    "NoticeStatus",
]
