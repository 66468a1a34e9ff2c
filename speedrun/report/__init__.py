"""Report package initialization."""
from .report_renderer import ReportRenderer, format_bytes

__all__ = ['ReportRenderer', 'format_bytes']
