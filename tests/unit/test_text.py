"""Test edit distance and option suggestions"""

import pytest

from copa.template_system.parser import KEYWORDS
from copa.utils.text import levenshtein, suggest


class TestLevenshtein:
    """Test levenshtein distance"""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("kitten", "sitting", 3),
            ("", "abc", 3),
            ("abc", "", 3),
            ("same", "same", 0),
            ("a", "A", 1),
            ("dir", "dri", 2),
        ],
    )
    def test_distance(self, a: str, b: str, expected: int) -> None:
        assert levenshtein(a, b) == expected

    def test_symmetric(self) -> None:
        assert levenshtein("remove-imports", "remove-import") == levenshtein(
            "remove-import", "remove-imports"
        )


class TestSuggest:
    """Test "did you mean" suggestions"""

    def test_close_typo(self) -> None:
        assert suggest("clen", KEYWORDS) == "clean"
        assert suggest("remove-import", KEYWORDS) == "remove-imports"
        assert suggest("evl", KEYWORDS) == "eval"

    def test_nothing_close_enough(self) -> None:
        assert suggest("xyzzy", KEYWORDS) is None

    def test_max_distance(self) -> None:
        assert suggest("dri", KEYWORDS, max_distance=1) is None
        assert suggest("dri", KEYWORDS, max_distance=2) == "dir"
