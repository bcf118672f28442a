from .walk_service import WalkService
from .index_service import IndexService
from .duplicate_service import DuplicateService
from .report_service import ReportService


__all__ = [
    'WalkService',
    'IndexService',
    'DuplicateService',
    'ReportService',
]
