"""Chapter tree read from Matroska (mka/mkv/webm) chapter metadata.

The EBML reader itself lives elsewhere; it hands over a forest of
:class:`MatroskaChapter` nodes which this module turns into names and
chapter marks.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

__all__ = ["MatroskaChapter", "MatroskaChapterName", "chapter_marks"]

_NS_PER_MS = 1_000_000


@dataclass(frozen=True)
class MatroskaChapterName:
    """A chapter display string and the languages it is written in."""

    name: str
    languages: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.languages, frozenset):
            object.__setattr__(self, "languages", frozenset(self.languages))


@dataclass(frozen=True)
class MatroskaChapter:
    """One chapter atom with its nested sub chapters.

    Attributes:
        start_time: Offset into the containing media in nanoseconds.
        names: Display strings in declaration order.
        children: Nested chapters, same shape.
    """

    start_time: int
    names: tuple[MatroskaChapterName, ...] = ()
    children: tuple[MatroskaChapter, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(self, "children", tuple(self.children))

    def get_name(self, *preferred_languages: str) -> str | None:
        """Return the best display name for the given language preference.

        Preferred languages are tried in order; the first name tagged with
        one of them wins. Without a match the first declared name is used,
        and ``None`` is returned when the chapter has no names at all.
        """
        for language in preferred_languages:
            for chapter_name in self.names:
                if language in chapter_name.languages:
                    return chapter_name.name
        if self.names:
            return self.names[0].name
        return None


def chapter_marks(chapters: Iterable[MatroskaChapter], *preferred_languages: str) -> dict[int, str]:
    """Flatten a chapter forest into a ``{start_ms: name}`` mark map.

    Nodes are visited depth first, parents before their children. When two
    nodes start at the same millisecond the first one visited keeps the slot.
    """
    marks: dict[int, str] = {}

    def _visit(nodes: Iterable[MatroskaChapter]) -> None:
        for node in nodes:
            name = node.get_name(*preferred_languages)
            position = node.start_time // _NS_PER_MS
            if name is not None and position not in marks:
                marks[position] = name
            _visit(node.children)

    _visit(chapters)
    return dict(sorted(marks.items()))
