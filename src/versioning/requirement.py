"""Cargo-style version requirements evaluated with ``semantic_version`` ordering."""

import operator
import re
from typing import Callable, FrozenSet, List, Optional, Tuple

import semantic_version

_COMPARATOR = re.compile(r"^(?P<op>\^|~|==|=|>=|>|<=|<|!=)?\s*(?P<ver>\S+)$")
_WILDCARD_PART = re.compile(r"(^|\.)[xX](?=\.|$)")
_PARTIAL = re.compile(
    r"^(?P<major>0|[1-9]\d*|\*)"
    r"(?:\.(?P<minor>0|[1-9]\d*|\*))?"
    r"(?:\.(?P<patch>0|[1-9]\d*|\*))?"
    r"(?P<rest>[-+].*)?$"
)

Bound = Tuple[Callable[[semantic_version.Version, semantic_version.Version], bool],
              semantic_version.Version]


def _normalize_block(block: str) -> Tuple[str, str]:
    """Split one comparator into ``(op, version)``.

    A bare version is a caret requirement unless it holds a wildcard, in
    which case it means ``=``. ``x``/``X`` wildcards become ``*``.
    """
    m = _COMPARATOR.match(block)
    if not m:
        raise ValueError(f"invalid version comparator {block!r}")
    op = m.group("op") or ""
    ver = _WILDCARD_PART.sub(r"\1*", m.group("ver"))
    if op == "==":
        op = "="
    if not op:
        op = "=" if "*" in ver else "^"
    return op, ver


def _parse_partial(text: str):
    """Parse ``1``, ``1.2``, ``1.2.*`` or a full version.

    Returns ``(major, minor, patch, version)`` where missing or wildcard parts
    are None and ``version`` is the fully parsed version when all three parts
    are present.
    """
    m = _PARTIAL.match(text)
    if not m:
        raise ValueError(f"invalid version {text!r}")
    parts: List[Optional[int]] = []
    for name in ("major", "minor", "patch"):
        value = m.group(name)
        if value is None or value == "*":
            parts.append(None)
        elif parts and parts[-1] is None:
            raise ValueError(f"invalid version {text!r}")
        else:
            parts.append(int(value))
    major, minor, patch = parts
    if patch is None:
        if m.group("rest"):
            raise ValueError(f"invalid version {text!r}")
        return major, minor, patch, None
    return major, minor, patch, semantic_version.Version(text)


def _version(major: int, minor: int = 0, patch: int = 0) -> semantic_version.Version:
    return semantic_version.Version(major=major, minor=minor, patch=patch)


def _not_equal(left, right) -> bool:
    return left < right or left > right


def _comparator_bounds(op: str, text: str) -> List[Bound]:
    """Translate one comparator into lower/upper bounds."""
    major, minor, patch, exact = _parse_partial(text)
    if major is None:
        if op != "=":
            raise ValueError(f"wildcard not allowed with {op!r}")
        return []

    low = exact if exact is not None else _version(major, minor or 0, patch or 0)
    if minor is None:
        next_up = _version(major + 1)
    elif patch is None:
        next_up = _version(major, minor + 1)
    else:
        next_up = None

    if op == "^":
        if major > 0 or minor is None:
            high = _version(major + 1)
        elif minor > 0 or patch is None:
            high = _version(0, minor + 1)
        else:
            high = _version(0, 0, patch + 1)
        return [(operator.ge, low), (operator.lt, high)]
    if op == "~":
        high = _version(major + 1) if minor is None else _version(major, minor + 1)
        return [(operator.ge, low), (operator.lt, high)]
    if op == "=":
        if next_up is not None:
            return [(operator.ge, low), (operator.lt, next_up)]
        return [(operator.ge, exact), (operator.le, exact)]
    if op == ">=":
        return [(operator.ge, low)]
    if op == ">":
        if next_up is not None:
            return [(operator.ge, next_up)]
        return [(operator.gt, exact)]
    if op == "<":
        return [(operator.lt, low)]
    if op == "<=":
        if next_up is not None:
            return [(operator.lt, next_up)]
        return [(operator.le, exact)]
    if op == "!=":
        if exact is None:
            raise ValueError(f"'!=' needs a full version, got {text!r}")
        return [(_not_equal, exact)]
    raise ValueError(f"unknown operator {op!r}")


def _prerelease_triple(block: str):
    """Return (major, minor, patch) when the comparator names a pre-release."""
    m = _COMPARATOR.match(block)
    ver = m.group("ver") if m else ""
    if "-" not in ver:
        return None
    try:
        parsed = semantic_version.Version(ver)
    except ValueError:
        return None
    return parsed.major, parsed.minor, parsed.patch


class VersionRequirement:
    """A parsed semantic-version range such as ``^1.2``, ``>=1, <2`` or ``1.*``.

    Caret, tilde and partial versions follow Cargo: ``^0`` is ``<1.0.0``,
    ``^0.0`` is ``<0.1.0`` and ``^0.0.3`` is ``<0.0.4``. Pre-release versions
    are only matched when one of the comparators itself names a pre-release
    of the same ``major.minor.patch``.
    """

    def __init__(self, text: str, bounds: List[Bound],
                 prerelease_triples: FrozenSet[Tuple[int, int, int]]):
        self._text = text
        self._bounds = bounds
        self._prerelease_triples = prerelease_triples

    @classmethod
    def parse(cls, text: str) -> "VersionRequirement":
        """Parse a requirement string; raises ValueError when malformed."""
        blocks = [b.strip() for b in text.split(",")]
        if not blocks or any(not b for b in blocks):
            raise ValueError(f"invalid version requirement {text!r}")
        bounds: List[Bound] = []
        rendered = []
        for block in blocks:
            op, ver = _normalize_block(block)
            bounds.extend(_comparator_bounds(op, ver))
            rendered.append(f"{op}{ver}")
        triples = frozenset(t for t in (_prerelease_triple(b) for b in blocks) if t)
        return cls(",".join(rendered), bounds, triples)

    def matches(self, version: semantic_version.Version) -> bool:
        if version.prerelease:
            triple = (version.major, version.minor, version.patch)
            if triple not in self._prerelease_triples:
                return False
        return all(check(version, bound) for check, bound in self._bounds)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"VersionRequirement({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionRequirement):
            return NotImplemented
        return self._text == other._text

    def __hash__(self) -> int:
        return hash(self._text)
