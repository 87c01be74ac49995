"""Entry point that turns loosely-typed ADF field values into Markdown.

Values are classified once (:func:`adfmd.models.normalize_input`), then
handed to an ordered list of renderer strategies. The first strategy that
succeeds wins; the builtin renderer always runs last and cannot fail.
"""
from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Protocol

from .config import ConverterSettings, build_settings
from .errors import DocumentDecodeError, ExternalRendererError
from .models import Empty, RawString, Tree, dump_raw, normalize_input
from .renderer import render

LOGGER = logging.getLogger(__name__)


class RendererStrategy(Protocol):
    """Something that can render a decoded document or raise ``ExternalRendererError``."""

    name: str

    def render(self, document: Tree) -> str:  # pragma: no cover - protocol
        ...


class BuiltinRenderer:
    """The pure recursive renderer from :mod:`adfmd.renderer`."""

    name = "builtin"

    def __init__(self, max_depth: int = 10) -> None:
        self.max_depth = max_depth

    def render(self, document: Tree) -> str:
        return render(document.node, max_depth=self.max_depth)


class ExternalToolRenderer:
    """Pipe the JSON document through an ``adf2md``-style executable.

    The tool reads ADF JSON on stdin and writes Markdown to stdout. A missing
    executable, a timeout, a non-zero exit status or an OS error all raise
    :class:`ExternalRendererError`.
    """

    name = "external"

    def __init__(self, command: str = "adf2md", timeout: float = 5.0) -> None:
        self.command = command
        self.timeout = timeout

    def render(self, document: Tree) -> str:
        executable = shutil.which(self.command)
        if not executable:
            raise ExternalRendererError(
                f"{self.command} not found", context={"command": self.command}
            )

        try:
            payload = json.dumps(document.payload, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as exc:
            raise ExternalRendererError(
                "Document could not be encoded as JSON", context={"command": self.command}
            ) from exc

        try:
            result = subprocess.run(
                [executable],
                input=payload,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExternalRendererError(
                f"{self.command} timed out after {self.timeout}s",
                context={"command": self.command, "timeout": self.timeout},
            ) from exc
        except (OSError, UnicodeError) as exc:
            raise ExternalRendererError(
                f"{self.command} could not be executed: {exc}",
                context={"command": self.command},
            ) from exc

        if result.returncode != 0:
            raise ExternalRendererError(
                f"{self.command} conversion failed with exit code {result.returncode}",
                context={"command": self.command, "returncode": result.returncode},
            )
        return result.stdout.strip()


def default_strategies(settings: ConverterSettings) -> List[RendererStrategy]:
    """Return the renderer chain described by ``settings``."""

    strategies: List[RendererStrategy] = []
    if settings.use_external_renderer:
        strategies.append(
            ExternalToolRenderer(settings.external_renderer, settings.external_timeout)
        )
    strategies.append(BuiltinRenderer(settings.max_depth))
    return strategies


class DocumentConverter:
    """Convert ADF field values (dict, string or ``None``) to Markdown."""

    def __init__(
        self,
        settings: ConverterSettings | None = None,
        strategies: Optional[Iterable[RendererStrategy]] = None,
    ) -> None:
        self.settings = settings or ConverterSettings()
        if strategies is None:
            self.strategies = default_strategies(self.settings)
        else:
            self.strategies = list(strategies)

    @classmethod
    def from_config(
        cls,
        overrides: Mapping[str, Any] | None = None,
        *,
        config_path: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "DocumentConverter":
        """Build a converter from YAML, environment and explicit overrides."""

        return cls(build_settings(overrides, config_path=config_path, env=env))

    def convert(self, value: Any) -> str:
        """Return Markdown for ``value``; never raises."""

        try:
            document = normalize_input(value, max_depth=self.settings.max_depth)
        except DocumentDecodeError as exc:
            LOGGER.warning(
                "Value is not an ADF document; returning raw text",
                extra={"path": exc.context.get("path"), "value_type": type(value).__name__},
            )
            return dump_raw(value)

        if isinstance(document, Empty):
            return self.settings.empty_placeholder
        if isinstance(document, RawString):
            return document.text

        for strategy in self.strategies:
            try:
                markdown = strategy.render(document)
            except ExternalRendererError as exc:
                LOGGER.debug(
                    "Renderer unavailable, falling back",
                    extra={"renderer": strategy.name, "reason": str(exc)},
                )
                continue
            LOGGER.debug("Rendered document", extra={"renderer": strategy.name})
            return markdown

        return render(document.node, max_depth=self.settings.max_depth)


_DEFAULT_CONVERTER = DocumentConverter()


def convert(value: Any, *, settings: ConverterSettings | None = None) -> str:
    """Convert an ADF field value to Markdown.

    ``None``, ``""`` and ``"null"`` become ``"No description"``; other
    strings pass through unchanged; mappings are rendered; anything that is
    not a valid document comes back as its JSON text.
    """

    converter = _DEFAULT_CONVERTER if settings is None else DocumentConverter(settings)
    return converter.convert(value)


__all__ = [
    "BuiltinRenderer",
    "DocumentConverter",
    "ExternalToolRenderer",
    "RendererStrategy",
    "convert",
    "default_strategies",
]
