"""Subgraph spec versions."""

from dataclasses import dataclass

from .errors import ConfigError


@dataclass(frozen=True, order=True)
class SpecVersion:
    """A `major.minor.patch` spec version token."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "SpecVersion":
        """
        Parse and check a version string against the known versions.

        Raises:
            ConfigError: If the string is malformed or not a known version
        """
        parts = str(text).strip().split(".")
        try:
            version = cls(*(int(p) for p in parts)) if len(parts) == 3 else None
        except ValueError:
            version = None
        if version not in KNOWN_VERSIONS:
            known = ", ".join(str(v) for v in KNOWN_VERSIONS)
            raise ConfigError(f"Unknown spec version `{text}`, expected one of: {known}")
        return version

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


SPEC_VERSION_0_0_4 = SpecVersion(0, 0, 4)
SPEC_VERSION_0_0_5 = SpecVersion(0, 0, 5)
SPEC_VERSION_0_0_6 = SpecVersion(0, 0, 6)
SPEC_VERSION_0_0_7 = SpecVersion(0, 0, 7)
SPEC_VERSION_0_0_8 = SpecVersion(0, 0, 8)
SPEC_VERSION_0_0_9 = SpecVersion(0, 0, 9)
SPEC_VERSION_1_0_0 = SpecVersion(1, 0, 0)
SPEC_VERSION_1_1_0 = SpecVersion(1, 1, 0)
SPEC_VERSION_1_2_0 = SpecVersion(1, 2, 0)

KNOWN_VERSIONS = (
    SPEC_VERSION_0_0_4,
    SPEC_VERSION_0_0_5,
    SPEC_VERSION_0_0_6,
    SPEC_VERSION_0_0_7,
    SPEC_VERSION_0_0_8,
    SPEC_VERSION_0_0_9,
    SPEC_VERSION_1_0_0,
    SPEC_VERSION_1_1_0,
    SPEC_VERSION_1_2_0,
)

DEFAULT_SPEC_VERSION = SPEC_VERSION_1_1_0

# Timeseries entities, aggregations and the Timestamp scalar
MIN_SPEC_VERSION_AGGREGATIONS = SPEC_VERSION_1_1_0


def supports_aggregations(version: SpecVersion) -> bool:
    return version >= MIN_SPEC_VERSION_AGGREGATIONS
