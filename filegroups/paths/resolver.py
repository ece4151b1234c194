"""Map absolute resource references to forward-slash relative paths.

Resolution never raises. Each reference walks an ordered fallback chain:
active workspace root, known alternate roots, deepest common ancestor with
the active root (when it is not degenerate), and finally the basename.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote, urlparse

if TYPE_CHECKING:
    from ..engine.interfaces import ResourceResolver

logger = logging.getLogger(__name__)

MIN_COMMON_ANCESTOR_SEGMENTS = 2
_DRIVE_SEGMENT = re.compile(r"^[A-Za-z]:$")


def split_segments(path: str) -> list[str]:
    """Split ``path`` on either separator and drop empty segments."""
    return [segment for segment in path.replace("\\", "/").split("/") if segment]


def normalize_relative_path(path: str) -> str:
    """Return ``path`` with forward slashes and no leading/trailing slash."""
    return "/".join(split_segments(path))


def ref_to_path_string(ref: str) -> str | None:
    """Return the absolute filesystem path named by ``ref`` with ``/`` separators.

    ``ref`` may be a ``file://`` URI or a plain path. Returns ``None`` for
    empty input, non-file URI schemes, or URIs that fail to parse.
    """
    if not ref or not ref.strip():
        return None
    raw = ref.strip()
    if raw.lower().startswith("file:"):
        try:
            parsed = urlparse(raw)
        except ValueError:
            return None
        path = unquote(parsed.path)
        if parsed.netloc and parsed.netloc != "localhost":
            path = f"//{parsed.netloc}{path}"
        # file:///C:/x parses to "/C:/x"
        if len(path) >= 3 and path[0] == "/" and _DRIVE_SEGMENT.match(path[1:3]):
            path = path[1:]
        return path.replace("\\", "/") or None
    if "://" in raw:
        return None
    return raw.replace("\\", "/")


def segments_to_ref(segments: Sequence[str]) -> str:
    """Build a ``file://`` URI from absolute path segments."""
    joined = "/".join(segments)
    if segments and _DRIVE_SEGMENT.match(segments[0]):
        return "file:///" + quote(joined, safe="/:")
    return "file:///" + quote(joined, safe="/")


def _relative_to(segments: list[str], root: list[str]) -> str | None:
    if not root or len(segments) <= len(root):
        return None
    if segments[: len(root)] != root:
        return None
    return "/".join(segments[len(root) :])


def _looks_relative(path: str) -> bool:
    normalized = path.replace("\\", "/")
    if normalized.startswith("/"):
        return False
    first = normalized.split("/", 1)[0]
    return not _DRIVE_SEGMENT.match(first) and "://" not in normalized


class PathResolver:
    """Resolve resource references against an active root and fallbacks.

    ``resource_resolver`` is consulted first when supplied; its answer wins
    only when it is genuinely relative (hosts commonly echo the absolute path
    back for references outside the workspace).
    """

    def __init__(
        self,
        workspace_root: str | None,
        alternate_roots: Iterable[str] = (),
        resource_resolver: ResourceResolver | None = None,
    ) -> None:
        self.workspace_root = workspace_root
        self._root_segments = split_segments(ref_to_path_string(workspace_root) or "") if workspace_root else []
        self._alternate_segments: list[list[str]] = []
        for alternate in alternate_roots:
            self.add_alternate_root(alternate)
        self._resource_resolver = resource_resolver

    def add_alternate_root(self, root: str | None) -> None:
        """Remember another root (e.g. the workspace a group was created in)."""
        if not root:
            return
        segments = split_segments(ref_to_path_string(root) or "")
        if segments and segments != self._root_segments and segments not in self._alternate_segments:
            self._alternate_segments.append(segments)

    def with_alternate_roots(self, roots: Iterable[str | None]) -> PathResolver:
        """Return a resolver sharing this one's settings plus ``roots``."""
        resolver = PathResolver(self.workspace_root, resource_resolver=self._resource_resolver)
        resolver._alternate_segments = [list(segments) for segments in self._alternate_segments]
        for root in roots:
            resolver.add_alternate_root(root)
        return resolver

    def resolve(self, ref: str) -> str | None:
        """Return the relative path for ``ref``, or ``None`` when nothing usable remains."""
        try:
            return self._resolve(ref)
        except Exception:
            logger.warning("Failed to resolve resource reference %r", ref, exc_info=True)
            return None

    def _resolve(self, ref: str) -> str | None:
        if self._resource_resolver is not None:
            try:
                candidate = self._resource_resolver.to_relative_path(ref)
            except Exception:
                logger.debug("Host resolver rejected %r", ref, exc_info=True)
                candidate = None
            if candidate and _looks_relative(candidate):
                normalized = normalize_relative_path(candidate)
                if normalized:
                    return normalized

        path = ref_to_path_string(ref)
        if path is None:
            logger.debug("Unresolvable resource reference %r", ref)
            return None
        segments = split_segments(path)
        if not segments:
            return None

        relative = _relative_to(segments, self._root_segments)
        if relative is not None:
            return relative

        for alternate in self._alternate_segments:
            relative = _relative_to(segments, alternate)
            if relative is not None:
                return relative

        common = 0
        for root_segment, segment in zip(self._root_segments, segments[:-1]):
            if root_segment != segment:
                break
            common += 1
        if common >= MIN_COMMON_ANCESTOR_SEGMENTS:
            return "/".join(segments[common:])

        logger.debug("Falling back to basename for %r", ref)
        return segments[-1]

    def to_resource_ref(self, relative_path: str) -> str | None:
        """Return a ``file://`` reference for ``relative_path`` under the active root."""
        if not self._root_segments:
            return None
        segments = split_segments(relative_path)
        if not segments:
            return None
        return segments_to_ref(self._root_segments + segments)
