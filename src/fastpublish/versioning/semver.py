"""Semantic version arithmetic."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# Suffix marking a conditional bump ("patch-if")
CONDITIONAL_SUFFIX = "-if"

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


class BumpType(Enum):
    """Which version component to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


def _component(raw: str | None) -> int:
    """Parse a version component, coercing missing or non-numeric values to 0."""
    if raw is None:
        return 0
    match = _LEADING_DIGITS.match(raw)
    return int(match.group(1)) if match else 0


@dataclass(frozen=True, slots=True)
class Version:
    """A three-part semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, version: str) -> Version:
        """Parse a version string.

        Missing or non-numeric components are read as 0, so "1" parses
        as 1.0.0 and "1.x.3" as 1.0.3. Components past the third are ignored.

        Args:
            version: Version string such as "1.2.3".

        Returns:
            Parsed version.
        """
        parts = str(version).strip().split(".")
        parts += [None] * (3 - len(parts))  # type: ignore[list-item]
        return cls(_component(parts[0]), _component(parts[1]), _component(parts[2]))

    def bump(self, bump: BumpType) -> Version:
        """Return the next version for the given bump type."""
        if bump == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class BumpMode:
    """A bump type plus the "only if changed since last tag" flag.

    Attributes:
        bump: Component to increment.
        only_if_changed: Skip the release when nothing changed since the last tag.
    """

    bump: BumpType
    only_if_changed: bool = False

    @classmethod
    def parse(cls, mode: str) -> BumpMode:
        """Parse a mode string such as "minor" or "patch-if".

        Raises:
            ValueError: If the mode is not a known bump type.
        """
        name = mode.strip().lower()
        only_if_changed = name.endswith(CONDITIONAL_SUFFIX)
        if only_if_changed:
            name = name[: -len(CONDITIONAL_SUFFIX)]
        try:
            bump = BumpType(name)
        except ValueError as e:
            raise ValueError(f"Invalid bump mode: {mode!r}") from e
        return cls(bump=bump, only_if_changed=only_if_changed)

    def __str__(self) -> str:
        suffix = CONDITIONAL_SUFFIX if self.only_if_changed else ""
        return f"{self.bump.value}{suffix}"


def increase_version(version: str, bump: BumpType) -> str:
    """Bump a version string.

    Args:
        version: Current version, e.g. "1.2.3".
        bump: Component to increment.

    Returns:
        The next version string.
    """
    return str(Version.parse(version).bump(bump))
