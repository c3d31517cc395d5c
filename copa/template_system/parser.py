"""Template tokenizer: literal text, placeholders and fenced regions"""

import re

from copa.utils.mixins import LoggerMixin
from copa.utils.text import suggest

from .models import (
    FenceNode,
    PlaceholderNode,
    PlaceholderOptions,
    PlaceholderType,
    TemplateNode,
    TextNode,
)

TEMPLATE_IGNORE_BELOW = "{{!IGNORE_BELOW}}"
FENCE_OPEN = "{{{"
FENCE_CLOSE = "}}}"

PLACEHOLDER_RE = re.compile(r"\{\{@(.*?)\}\}")
_COMMENT_LINE_RE = re.compile(r"^[ \t]*\{\{![^}\n]*\}\}[ \t]*(?:\r?\n|\Z)", re.MULTILINE)
_COMMENT_RE = re.compile(r"\{\{![^}\n]*\}\}")
_AUTO_FENCE_RE = re.compile(r"\{\{\{[ \t]*@([^{}\n]+?)[ \t]*\}\}\}")
_URL_PORT_RE = re.compile(r"\d+(?:/.*)?")

KEYWORDS = ("dir", "eval", "clean", "remove-imports")
_PRIMARY = {"dir": PlaceholderType.DIRECTORY, "eval": PlaceholderType.EVAL}


def is_url(resource: str) -> bool:
    return resource.startswith(("http://", "https://"))


def split_resource(body: str) -> tuple[str, str]:
    """Split a placeholder body into ``(resource, options)``.

    The split happens on the last ``:`` that is neither a ``://`` scheme
    separator nor a URL port.
    """
    index = body.rfind(":")
    if index <= 0 or body.startswith("://", index):
        return body.strip(), ""

    resource, options = body[:index], body[index + 1 :]
    if is_url(body) and (resource in ("http", "https") or _URL_PORT_RE.fullmatch(options)):
        return body.strip(), ""
    return resource.strip(), options


def resolve_options(
    original: str,
    resource: str,
    requested: list[str],
    clean: bool,
    remove_imports: bool,
    include: list[str],
    exclude: list[str],
) -> tuple[PlaceholderOptions, list[str]]:
    """Turn raw option flags into consistent ``PlaceholderOptions``.

    ``requested`` holds ``dir``/``eval`` keywords in the order they appeared;
    the first one wins.
    """
    warnings: list[str] = []
    primary = requested[0] if requested else None

    if len(set(requested)) > 1:
        warnings.append(
            f"Warning: ':dir' and ':eval' cannot be combined in {original}; "
            f"using ':{primary}'."
        )

    if is_url(resource):
        if primary is not None:
            warnings.append(
                f"Warning: ':{primary}' is not supported for web resources in "
                f"{original}; treating it as a web page."
            )
        kind = PlaceholderType.WEB
    elif primary is not None:
        kind = _PRIMARY[primary]
    else:
        kind = PlaceholderType.FILE

    if kind in (PlaceholderType.DIRECTORY, PlaceholderType.EVAL):
        for flag, enabled in (("clean", clean), ("remove-imports", remove_imports)):
            if enabled:
                warnings.append(
                    f"Warning: ':{flag}' is ignored with ':{primary}' in {original}."
                )
        clean = remove_imports = False

    options = PlaceholderOptions(
        type=kind,
        clean=clean,
        remove_imports=remove_imports,
        ignore_patterns=tuple(exclude),
        include_patterns=tuple(include),
    )
    return options, warnings


class TemplateParser(LoggerMixin):
    """Turn raw template text into an ordered node list"""

    def parse(self, template: str) -> tuple[list[TemplateNode], list[str]]:
        """Parse a template, returning its nodes and any option warnings"""
        warnings: list[str] = []
        text = self.strip_comments(self.truncate(template))
        text = _AUTO_FENCE_RE.sub(lambda m: "{{{ {{@" + m.group(1) + "}} }}}", text)

        nodes: list[TemplateNode] = []
        cursor = 0
        for start, end in self.fence_spans(text):
            nodes.extend(self._parse_segment(text[cursor:start], warnings))
            body = text[start + len(FENCE_OPEN) : end - len(FENCE_CLOSE)]
            children = self._parse_segment(body, warnings)
            nodes.append(FenceNode(tuple(children)))
            cursor = end
        nodes.extend(self._parse_segment(text[cursor:], warnings))

        self.logger.debug("Template parsed", nodes=len(nodes), warnings=len(warnings))
        return nodes, warnings

    def fence_spans(self, text: str) -> list[tuple[int, int]]:
        """Locate ``{{{ ... }}}`` regions.

        A closing ``}}}`` that overlaps a placeholder's own ``}}`` belongs to
        the placeholder, so ``{{{ {{@a.txt}}}}}`` closes after the placeholder.
        """
        spans: list[tuple[int, int]] = []
        start = text.find(FENCE_OPEN)
        while start != -1:
            cursor = start + len(FENCE_OPEN)
            while True:
                close = text.find(FENCE_CLOSE, cursor)
                if close == -1:
                    return spans
                placeholder = PLACEHOLDER_RE.search(text, cursor)
                if placeholder is None or placeholder.start() >= close:
                    break
                cursor = placeholder.end()

            end = close + len(FENCE_CLOSE)
            spans.append((start, end))
            start = text.find(FENCE_OPEN, end)
        return spans

    def truncate(self, template: str) -> str:
        """Cut the template at the first ignore-below marker outside a placeholder"""
        spans = [m.span() for m in PLACEHOLDER_RE.finditer(template)]
        start = template.find(TEMPLATE_IGNORE_BELOW)
        while start != -1:
            if not any(s <= start < e for s, e in spans):
                return template[:start]
            start = template.find(TEMPLATE_IGNORE_BELOW, start + 1)
        return template

    def strip_comments(self, template: str) -> str:
        """Remove ``{{! ... }}`` comments; comment-only lines vanish entirely"""
        return _COMMENT_RE.sub("", _COMMENT_LINE_RE.sub("", template))

    def _parse_segment(self, text: str, warnings: list[str]) -> list[TemplateNode]:
        nodes: list[TemplateNode] = []
        cursor = 0
        for match in PLACEHOLDER_RE.finditer(text):
            body = match.group(1)
            if not body.strip():
                continue
            if match.start() > cursor:
                nodes.append(TextNode(text[cursor : match.start()]))
            nodes.append(self.parse_placeholder(match.group(0), body, warnings))
            cursor = match.end()
        if cursor < len(text):
            nodes.append(TextNode(text[cursor:]))
        return nodes

    def parse_placeholder(
        self, original: str, body: str, warnings: list[str]
    ) -> PlaceholderNode:
        """Parse the inside of one ``{{@...}}`` directive"""
        resource, options_string = split_resource(body)

        requested: list[str] = []
        clean = remove_imports = False
        include: list[str] = []
        exclude: list[str] = []

        for token in (t.strip() for t in options_string.split(",")):
            if not token:
                continue
            if token in _PRIMARY:
                requested.append(token)
            elif token == "clean":
                clean = True
            elif token == "remove-imports":
                remove_imports = True
            elif token.startswith("+"):
                if token[1:]:
                    include.append(token[1:])
            elif token.startswith("-"):
                if token[1:]:
                    exclude.append(token[1:])
            elif "*" in token:
                exclude.append(token)
            else:
                hint = suggest(token, KEYWORDS)
                message = f"Warning: Unknown option ':{token}' in {original}."
                if hint:
                    message += f" Did you mean ':{hint}'?"
                warnings.append(message)

        options, option_warnings = resolve_options(
            original, resource, requested, clean, remove_imports, include, exclude
        )
        warnings.extend(option_warnings)
        return PlaceholderNode(original=original, resource=resource, options=options)
