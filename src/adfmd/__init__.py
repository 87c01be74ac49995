"""Atlassian Document Format to Markdown conversion."""

import logging

from .config import ConverterSettings, build_settings
from .converter import DocumentConverter, convert
from .errors import AdfMdError, ConfigError, DocumentDecodeError, ExternalRendererError
from .logging_config import configure_logging
from .models import DocumentNode, Mark
from .renderer import render

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AdfMdError",
    "ConfigError",
    "ConverterSettings",
    "DocumentConverter",
    "DocumentDecodeError",
    "DocumentNode",
    "ExternalRendererError",
    "Mark",
    "build_settings",
    "configure_logging",
    "convert",
    "render",
]
