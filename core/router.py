"""Route table - maps inbound method + path to a backend and body strategy."""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum

from core.request_types import Backend, BodyStrategy

OBJECT_ID = r"[a-fA-F0-9]{24}"

_PARAM_PATTERNS = {
    "segment": r"[^/]+",
    "objectid": OBJECT_ID,
}
_PLACEHOLDER = re.compile(r"^\{(\w+)(?::(\w+))?\}$")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class MatchKind(IntEnum):
    """Pattern kinds, in evaluation order."""

    EXACT = 0
    TEMPLATE = 1
    PREFIX = 2


@dataclass(frozen=True)
class PathPattern:
    """A compiled path matcher."""

    template: str
    kind: MatchKind
    literal_segments: int
    _regex: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    def matches(self, path: str) -> bool:
        if self.kind is MatchKind.EXACT:
            return path == self.template
        if self.kind is MatchKind.PREFIX:
            return path == self.template or path.startswith(self.template + "/")
        return self._regex is not None and self._regex.fullmatch(path) is not None


def exact(path: str) -> PathPattern:
    """Match one literal path."""
    return PathPattern(path, MatchKind.EXACT, len(_segments(path)))


def prefix(path: str) -> PathPattern:
    """Match a path and everything below it at a segment boundary."""
    return PathPattern(path, MatchKind.PREFIX, len(_segments(path)))


def template(path: str) -> PathPattern:
    """Match a path with whole-segment placeholders, e.g. ``/users/{id}``.

    A placeholder may name a type: ``{id:objectid}`` only accepts a
    24-character hexadecimal identifier.
    """
    parts = []
    literals = 0
    for segment in _segments(path):
        placeholder = _PLACEHOLDER.match(segment)
        if placeholder is None:
            parts.append(re.escape(segment))
            literals += 1
            continue
        kind = placeholder.group(2) or "segment"
        if kind not in _PARAM_PATTERNS:
            raise ValueError(f"Unknown placeholder type {kind!r} in {path!r}")
        parts.append(f"(?P<{placeholder.group(1)}>{_PARAM_PATTERNS[kind]})")
    regex = re.compile("/" + "/".join(parts))
    return PathPattern(path, MatchKind.TEMPLATE, literals, regex)


@dataclass(frozen=True)
class Route:
    """Rule mapping an inbound method + path shape to a backend."""

    methods: frozenset[str] | None
    pattern: PathPattern
    backend: Backend
    strategy: BodyStrategy = BodyStrategy.JSON
    # Multipart bodies on this route are streamed instead of buffered
    accepts_uploads: bool = False

    def matches(self, method: str, path: str) -> bool:
        if self.methods is not None and method not in self.methods:
            return False
        return self.pattern.matches(path)

    @property
    def method_label(self) -> str:
        return "*" if self.methods is None else ",".join(sorted(self.methods))


def route(
    methods: str | Iterable[str] | None,
    pattern: PathPattern,
    backend: Backend,
    strategy: BodyStrategy = BodyStrategy.JSON,
    *,
    accepts_uploads: bool = False,
) -> Route:
    """Build a Route; ``methods=None`` matches any method."""
    if isinstance(methods, str):
        methods = [methods]
    method_set = None if methods is None else frozenset(m.upper() for m in methods)
    return Route(method_set, pattern, backend, strategy, accepts_uploads)


class RouteTable:
    """Ordered, read-only collection of routes.

    Evaluation order is derived from pattern specificity rather than from
    registration order: exact paths, then templates with more literal segments,
    then longer prefixes. Registration order only breaks remaining ties.
    """

    def __init__(self, routes: Iterable[Route]) -> None:
        indexed = list(enumerate(routes))
        indexed.sort(key=lambda item: _specificity(item[0], item[1]))
        self._routes = tuple(r for _, r in indexed)

    def resolve(self, method: str, path: str) -> Route | None:
        """Return the first route matching method + path, or None."""
        normalized = normalize_path(path)
        if normalized is None:
            return None
        method = method.upper()
        for candidate in self._routes:
            if candidate.matches(method, normalized):
                return candidate
        return None

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)


def normalize_path(path: str) -> str | None:
    """Return the path used for matching, or None if it is malformed."""
    if not path.startswith("/") or "\\" in path or _CONTROL_CHARS.search(path):
        return None
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    if path == "/":
        return path
    for segment in path[1:].split("/"):
        if segment in ("", ".", ".."):
            return None
    return path


def _specificity(index: int, candidate: Route) -> tuple[int, int, int, int]:
    pattern = candidate.pattern
    return (pattern.kind, -pattern.literal_segments, -len(pattern.template), index)


def _segments(path: str) -> list[str]:
    return [s for s in path.strip("/").split("/") if s]
