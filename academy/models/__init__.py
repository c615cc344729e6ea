"""
Models Package

Exports all models for easy importing.
"""

from academy.models.site_config import SiteConfig, EDITABLE_FIELDS, editable_changes
from academy.models.inquiry import (
    Inquiry, InquiryValidationError, PROGRAM_CLASSES, build_inquiry, sort_recent,
)
from academy.models.document import Document

__all__ = [
    'SiteConfig',
    'EDITABLE_FIELDS',
    'editable_changes',
    'Inquiry',
    'InquiryValidationError',
    'PROGRAM_CLASSES',
    'build_inquiry',
    'sort_recent',
    'Document',
]
