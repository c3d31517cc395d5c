"""Evaluate parsed template nodes into a single prompt"""

import os
from collections.abc import Callable, Sequence
from functools import partial
from pathlib import Path

import aiofiles

from copa.config.settings import Settings, get_settings
from copa.errors import ResourceNotFoundError, TemplateRecursionError
from copa.resources.reader import read_text
from copa.resources.selector import ResourceSelector
from copa.resources.transformer import (
    file_label,
    format_directory_tree,
    format_fence,
    format_file,
    format_web_page,
    remove_imports,
    supports_import_stripping,
    truncate_at_marker,
)
from copa.resources.tree import build_tree, render_tree
from copa.utils.mixins import LoggerMixin
from copa.utils.tokens import count_tokens
from copa.web.url_fetcher import URLContentFetcher

from .models import (
    FenceNode,
    PlaceholderNode,
    PlaceholderType,
    ProcessResult,
    ResolvedFile,
    TemplateNode,
    TextNode,
)
from .parser import TemplateParser

TokenCounter = Callable[[str], int]
Included = dict[str, int]


def relative_label(path: Path, base_path: Path) -> str:
    """POSIX path of ``path`` relative to ``base_path``"""
    return Path(os.path.relpath(path, base_path)).as_posix()


class TemplateEvaluator(LoggerMixin):
    """Expand placeholders in source order, accumulating warnings"""

    def __init__(
        self,
        selector: ResourceSelector | None = None,
        fetcher: URLContentFetcher | None = None,
        token_counter: TokenCounter | None = None,
        parser: TemplateParser | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.selector = selector or ResourceSelector()
        self._fetcher = fetcher
        self.count_tokens = token_counter or partial(
            count_tokens, model=self.settings.token_model
        )
        self.parser = parser or TemplateParser()

    @property
    def fetcher(self) -> URLContentFetcher:
        if self._fetcher is None:
            self._fetcher = URLContentFetcher(self.settings)
        return self._fetcher

    async def evaluate(
        self,
        nodes: Sequence[TemplateNode],
        base_path: str | Path,
        warnings: list[str],
        global_excludes: Sequence[str] = (),
        stack: tuple[Path, ...] = (),
    ) -> ProcessResult:
        """
        Evaluate ``nodes`` against ``base_path``.

        Args:
            nodes: parsed template nodes
            base_path: directory placeholder paths are resolved against
            warnings: accumulator shared with nested evaluations
            global_excludes: exclude patterns applied to every selection
            stack: templates currently being evaluated, outermost first

        Returns:
            The expanded content with per-label and total token counts
        """
        content, included = await self._evaluate_nodes(
            nodes, Path(base_path), warnings, global_excludes, stack
        )
        return ProcessResult(
            content=content,
            warnings=warnings,
            included_files=included,
            total_tokens=self.count_tokens(content),
        )

    async def _evaluate_nodes(
        self,
        nodes: Sequence[TemplateNode],
        base_path: Path,
        warnings: list[str],
        global_excludes: Sequence[str],
        stack: tuple[Path, ...],
    ) -> tuple[str, Included]:
        buffer: list[str] = []
        included: Included = {}

        for node in nodes:
            if isinstance(node, TextNode):
                buffer.append(node.content)
            elif isinstance(node, FenceNode):
                body, fenced = await self._evaluate_nodes(
                    node.children, base_path, warnings, global_excludes, stack
                )
                buffer.append(format_fence(body))
                included.update(fenced)
            else:
                piece, resolved = await self._evaluate_placeholder(
                    node, base_path, warnings, global_excludes, stack
                )
                buffer.append(piece)
                included.update(resolved)

        return "".join(buffer), included

    async def _evaluate_placeholder(
        self,
        node: PlaceholderNode,
        base_path: Path,
        warnings: list[str],
        global_excludes: Sequence[str],
        stack: tuple[Path, ...],
    ) -> tuple[str, Included]:
        try:
            match node.options.type:
                case PlaceholderType.FILE:
                    return await self._resolve_files(
                        node, base_path, warnings, global_excludes
                    )
                case PlaceholderType.DIRECTORY:
                    return await self._resolve_directory(
                        node, base_path, global_excludes
                    )
                case PlaceholderType.EVAL:
                    return await self._resolve_eval(
                        node, base_path, warnings, global_excludes, stack
                    )
                case PlaceholderType.WEB:
                    return await self._resolve_web(node)
        except ResourceNotFoundError as e:
            self._warn(warnings, f"Warning: Error processing placeholder {node.original}: {e}")
            return "", {}
        except Exception as e:
            self.logger.debug(
                "Placeholder failed", placeholder=node.original, error=str(e), exc_info=True
            )
            self._warn(warnings, f"Warning: Error processing placeholder {node.original}: {e}")
            return f"[Error processing placeholder: {node.resource} - {e}]", {}
        raise AssertionError(f"unhandled placeholder type {node.options.type}")

    def _warn(self, warnings: list[str], message: str) -> None:
        self.logger.debug("Template warning", warning=message)
        warnings.append(message)

    async def _select(
        self,
        node: PlaceholderNode,
        target: Path,
        global_excludes: Sequence[str],
    ) -> list[Path]:
        exclude = [*node.options.ignore_patterns, *global_excludes]
        files = await self.selector.select(
            target, node.options.include_patterns, exclude
        )
        if files is None:
            raise ResourceNotFoundError(f"Path not found: {node.resource}")
        return files

    async def read_files(self, files: Sequence[Path], base_path: Path) -> list[ResolvedFile]:
        """Read selected files, truncated at their ignore-below marker"""
        resolved = []
        for path in files:
            content = truncate_at_marker(await read_text(path))
            resolved.append(ResolvedFile(relative_label(path, base_path), path, content))
        return resolved

    async def _resolve_files(
        self,
        node: PlaceholderNode,
        base_path: Path,
        warnings: list[str],
        global_excludes: Sequence[str],
    ) -> tuple[str, Included]:
        options = node.options
        files = await self._select(node, base_path / node.resource, global_excludes)
        if not files:
            raise ResourceNotFoundError(f"No files matched {node.resource}")

        if options.clean and len(files) > 1:
            self._warn(
                warnings,
                f"Warning: ':clean' concatenates {len(files)} files without "
                f"separators in {node.original}.",
            )

        pieces: list[str] = []
        included: Included = {}
        for file in await self.read_files(files, base_path):
            content = file.content
            strip = options.remove_imports and supports_import_stripping(file.relative_path)
            if strip:
                content = remove_imports(content)

            piece = content if options.clean else format_file(file.relative_path, content, strip)
            pieces.append(piece)
            included[file_label(file.relative_path, options.clean, strip)] = self.count_tokens(piece)

        return "".join(pieces), included

    async def _resolve_directory(
        self,
        node: PlaceholderNode,
        base_path: Path,
        global_excludes: Sequence[str],
    ) -> tuple[str, Included]:
        target = Path(os.path.abspath(base_path / node.resource))
        files = await self._select(node, target, global_excludes)
        root = target.parent if target.is_file() else target

        tree = build_tree(root.name, (relative_label(path, root) for path in files))
        piece = format_directory_tree(node.resource, render_tree(tree))
        return piece, {f"{node.resource} (directory tree)": self.count_tokens(piece)}

    async def _resolve_eval(
        self,
        node: PlaceholderNode,
        base_path: Path,
        warnings: list[str],
        global_excludes: Sequence[str],
        stack: tuple[Path, ...],
    ) -> tuple[str, Included]:
        target = Path(os.path.abspath(base_path / node.resource))
        if not target.is_file():
            raise ResourceNotFoundError(f"Template not found: {node.resource}")

        if target in stack:
            chain = " -> ".join(path.name for path in (*stack, target))
            raise TemplateRecursionError(f"Template cycle detected: {chain}")
        if len(stack) >= self.settings.max_eval_depth:
            raise TemplateRecursionError(
                f"Template nesting exceeds {self.settings.max_eval_depth} levels"
            )

        async with aiofiles.open(target, encoding="utf-8") as f:
            template = await f.read()

        nodes, parse_warnings = self.parser.parse(template)
        for message in parse_warnings:
            self._warn(warnings, message)

        self.logger.debug("Evaluating nested template", template=str(target), depth=len(stack))
        content, nested = await self._evaluate_nodes(
            nodes, target.parent, warnings, global_excludes, (*stack, target)
        )

        if not nested:
            return content, {f"eval:{node.resource}": self.count_tokens(content)}
        return content, {f"eval:{node.resource}:{label}": tokens for label, tokens in nested.items()}

    async def _resolve_web(self, node: PlaceholderNode) -> tuple[str, Included]:
        page = await self.fetcher.fetch(node.resource)
        if node.options.clean:
            return page.text, {f"{node.resource} (web page, clean)": self.count_tokens(page.text)}
        piece = format_web_page(node.resource, page.text)
        return piece, {f"{node.resource} (web page)": self.count_tokens(piece)}
