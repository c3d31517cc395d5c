"""Prompt template parsing and evaluation"""

from .engine import PromptProcessor, process_prompt_file
from .evaluator import TemplateEvaluator
from .models import (
    FenceNode,
    PlaceholderNode,
    PlaceholderOptions,
    PlaceholderType,
    ProcessResult,
    ResolvedFile,
    TemplateNode,
    TextNode,
)
from .parser import TemplateParser, resolve_options, split_resource

__all__ = [
    "FenceNode",
    "PlaceholderNode",
    "PlaceholderOptions",
    "PlaceholderType",
    "ProcessResult",
    "PromptProcessor",
    "ResolvedFile",
    "TemplateEvaluator",
    "TemplateNode",
    "TemplateParser",
    "TextNode",
    "process_prompt_file",
    "resolve_options",
    "split_resource",
]
