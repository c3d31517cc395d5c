"""Entry points for expanding prompt templates"""

import os
from collections.abc import Sequence
from pathlib import Path

import aiofiles

from copa.config.global_ignore import load_global_excludes
from copa.config.settings import Settings, get_settings
from copa.errors import TemplateReadError
from copa.resources.selector import ResourceSelector
from copa.utils.mixins import LoggerMixin
from copa.web.url_fetcher import URLContentFetcher

from .evaluator import TemplateEvaluator, TokenCounter
from .models import PlaceholderNode, PlaceholderOptions, ProcessResult
from .parser import TemplateParser


class PromptProcessor(LoggerMixin):
    """Parse and evaluate templates with a shared set of collaborators"""

    def __init__(
        self,
        settings: Settings | None = None,
        token_counter: TokenCounter | None = None,
        selector: ResourceSelector | None = None,
        fetcher: URLContentFetcher | None = None,
        global_excludes: Sequence[str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.parser = TemplateParser()
        self.evaluator = TemplateEvaluator(
            selector=selector,
            fetcher=fetcher,
            token_counter=token_counter,
            parser=self.parser,
            settings=self.settings,
        )
        self._global_excludes = list(global_excludes) if global_excludes is not None else None

    @property
    def global_excludes(self) -> list[str]:
        """Exclude patterns applied to every placeholder, loaded once"""
        if self._global_excludes is None:
            self._global_excludes = load_global_excludes(self.settings)
            self.logger.debug("Global excludes loaded", patterns=self._global_excludes)
        return self._global_excludes

    async def process_prompt_file(self, path: str | Path) -> ProcessResult:
        """Expand the template stored at ``path``.

        Placeholders resolve relative to the template's directory.

        Raises:
            TemplateReadError: the template itself cannot be read
        """
        template_path = Path(os.path.abspath(path))
        try:
            async with aiofiles.open(template_path, encoding="utf-8") as f:
                template = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error("Failed to read template", path=str(template_path), error=str(e))
            raise TemplateReadError(f"Cannot read template {path}: {e}") from e

        self.logger.info("Processing template", path=str(template_path))
        return await self.process_template(
            template, template_path.parent, stack=(template_path,)
        )

    async def process_template(
        self,
        template: str,
        base_path: str | Path,
        stack: tuple[Path, ...] = (),
    ) -> ProcessResult:
        """Expand template text with placeholders resolved against ``base_path``"""
        nodes, warnings = self.parser.parse(template)
        result = await self.evaluator.evaluate(
            nodes, Path(base_path), warnings, self.global_excludes, stack
        )
        self.logger.info(
            "Template processed",
            total_tokens=result.total_tokens,
            included=len(result.included_files),
            warnings=len(result.warnings),
        )
        return result

    async def copy_resource(
        self, path: str | Path, exclude: Sequence[str] = ()
    ) -> ProcessResult:
        """Wrap every file selected under ``path`` as if it were a lone placeholder"""
        target = Path(os.path.abspath(path))
        base_path = target.parent if target.is_file() else target
        node = PlaceholderNode(
            original=f"{{{{@{path}}}}}",
            resource=str(target),
            options=PlaceholderOptions(ignore_patterns=tuple(exclude)),
        )
        return await self.evaluator.evaluate(
            [node], base_path, [], self.global_excludes
        )


async def process_prompt_file(
    path: str | Path, settings: Settings | None = None
) -> ProcessResult:
    """Expand the template at ``path`` with default collaborators"""
    return await PromptProcessor(settings=settings).process_prompt_file(path)
