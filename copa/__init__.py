"""copa - assemble prompt templates into a single LLM-ready text blob"""

__version__ = "1.4.0"

from copa.template_system import (  # noqa: E402
    ProcessResult,
    PromptProcessor,
    process_prompt_file,
)

__all__ = [
    "__version__",
    "ProcessResult",
    "PromptProcessor",
    "process_prompt_file",
]
