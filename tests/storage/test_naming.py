"""
tests/storage/test_naming.py

Tests for UniqueNameGenerator.
"""

import re

from filestore.storage.naming import UniqueNameGenerator

NAME_RE = re.compile(r"^file-(\d+)-(\d+)\.png$")


class TestUniqueNameGenerator:

    def test_format(self) -> None:
        name = UniqueNameGenerator().generate("file", "png")
        match = NAME_RE.match(name)
        assert match is not None
        assert int(match.group(2)) < 1_000_000_000

    def test_empty_extension_has_no_trailing_dot(self) -> None:
        name = UniqueNameGenerator().generate("avatar", "")
        assert name.startswith("avatar-")
        assert not name.endswith(".")
        assert "." not in name

    def test_names_generated_back_to_back_are_distinct(self) -> None:
        gen = UniqueNameGenerator()
        names = {gen.generate("file", "png") for _ in range(1000)}
        assert len(names) == 1000

    def test_timestamp_is_non_decreasing(self) -> None:
        gen = UniqueNameGenerator()
        first = int(NAME_RE.match(gen.generate("file", "png")).group(1))
        second = int(NAME_RE.match(gen.generate("file", "png")).group(1))
        assert second >= first
