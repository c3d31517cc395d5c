"""
Shared fixtures and collection settings.

- Every test runs with an isolated copa config (no real ``~/.copa``)
- The project root is added to ``sys.path`` so ``import copa`` resolves
- Token counting is replaced by a deterministic word count
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


def fake_count_tokens(text: str) -> int:
    """Whitespace-separated word count, stable across tokenizer versions"""
    return len(text.split())


@pytest.fixture(autouse=True)
def _test_env(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point settings at an empty config and reset the settings cache."""
    from copa.config import clear_settings_cache

    config_dir = tmp_path_factory.mktemp("copa-config")
    monkeypatch.setenv("COPA_CONFIG_PATH", str(config_dir / ".copa"))
    monkeypatch.setenv("COPA_IGNORE", "")
    monkeypatch.setenv("COPA_LOG_LEVEL", "WARNING")

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def token_counter() -> Callable[[str], int]:
    return fake_count_tokens


@pytest.fixture
def processor():
    """PromptProcessor with a fake token counter and no global excludes."""
    from copa.template_system import PromptProcessor

    return PromptProcessor(token_counter=fake_count_tokens, global_excludes=[])


@pytest.fixture
def write_files(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Create files from a ``{relative path: content}`` mapping under ``tmp_path``."""

    def _write(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
