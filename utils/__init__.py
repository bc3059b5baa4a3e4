"""
Utilities for the hub pipeline.

- errors.py: Error taxonomy
- frontmatter.py: YAML header blocks of hub and agent artifacts
- validation.py: Integrity checks of finished hubs
- enhanced_logger.py: JSON run trace with redraft similarity tracking
"""

from utils.errors import (
    HubError,
    NotFound,
    ProviderError,
    StructuralDefect,
    ArtifactParseError,
    RetryBudgetExceeded
)
from utils.frontmatter import ContentFrontmatter, parse_frontmatter, render_frontmatter, parse_writer_ids
from utils.validation import ValidationReport, check_content, check_integrity
from utils.enhanced_logger import HubRunLogger, get_logger, set_logger, quick_rouge

__all__ = [
    'HubError', 'NotFound', 'ProviderError', 'StructuralDefect',
    'ArtifactParseError', 'RetryBudgetExceeded',
    'ContentFrontmatter', 'parse_frontmatter', 'render_frontmatter', 'parse_writer_ids',
    'ValidationReport', 'check_content', 'check_integrity',
    'HubRunLogger', 'get_logger', 'set_logger', 'quick_rouge'
]
