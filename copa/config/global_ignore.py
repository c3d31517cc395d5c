"""Default exclude patterns shared by every placeholder"""

from pathlib import Path

from copa.config.settings import Settings, get_settings
from copa.utils.error_handler import safe_with_default


@safe_with_default("read global config", default_value="")
def read_ignore_line(config_path: Path) -> str:
    """Return the value of the ``ignore:`` line of a copa config file.

    A missing file is not an error; any other read failure is logged and
    treated as an empty value.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""

    for line in content.splitlines():
        if line.startswith("ignore:"):
            return line.split(":", 1)[1].strip()
    return ""


def split_patterns(value: str) -> list[str]:
    """Split a comma-separated pattern string, dropping blanks"""
    return [part.strip() for part in value.split(",") if part.strip()]


def load_global_excludes(settings: Settings | None = None) -> list[str]:
    """Collect the exclude patterns applied to every resource selection.

    Sources, in order: the ``ignore:`` line of ``settings.config_path`` and the
    ``COPA_IGNORE`` setting.
    """
    settings = settings or get_settings()
    patterns = split_patterns(read_ignore_line(settings.config_path))
    for pattern in split_patterns(settings.ignore):
        if pattern not in patterns:
            patterns.append(pattern)
    return patterns
