"""Compiler Argument Builder.

This module assembles the canonical javac argument list for a
CompilerRequest and resolves which language version flags to use.

Design:
    - One fixed order shared by in-process and forked invocation:
      classpath, output directory, version flags, option flags,
      user flags, source files
    - User flags are passed through untouched, in the order given
    - A release version replaces the source/target pair
"""

import os
from dataclasses import dataclass
from typing import List, Optional

NO_EXPLICIT_VERSION_WARNING = (
    "No explicit value set for target or release! "
    "To ensure the same result in the future, please add an explicit value."
)

IMPLICIT_VALUES = ("none", "class")


@dataclass(frozen=True)
class VersionDefaults:
    """Source/target pair used when nothing is configured explicitly."""

    source: str = "1.8"
    target: str = "1.8"


DEFAULT_VERSIONS = VersionDefaults()


@dataclass(frozen=True)
class ResolvedVersions:
    """Version flags chosen for one invocation."""

    source: Optional[str]
    target: Optional[str]
    release: Optional[str]
    defaulted: bool


def resolve_versions(
    source: Optional[str],
    target: Optional[str],
    release: Optional[str],
    defaults: VersionDefaults = DEFAULT_VERSIONS
) -> ResolvedVersions:
    """Pick version flags from configured values and defaults.

    Args:
        source: Configured source version, or None
        target: Configured target version, or None
        release: Configured release version, or None
        defaults: Fallback pair

    Returns:
        ResolvedVersions; ``defaulted`` is True only when none of the three
        values was configured
    """
    defaulted = source is None and target is None and release is None
    if release is not None:
        return ResolvedVersions(None, None, release, defaulted)
    return ResolvedVersions(
        source if source is not None else defaults.source,
        target if target is not None else defaults.target,
        None,
        defaulted,
    )


class FlagBuilder:
    """Builds javac arguments from a CompilerRequest.

    Example:
        >>> FlagBuilder(request).build_arguments()
        ['-classpath', 'lib/a.jar', '-d', 'target/classes', '-source', '1.8',
         '-target', '1.8', '-Xlint', 'src/main/java/App.java']
    """

    def __init__(self, request):
        """Initialize flag builder.

        Args:
            request: CompilerRequest to render
        """
        self.request = request

    def classpath_string(self) -> str:
        """Join classpath entries with the platform path separator."""
        return os.pathsep.join(str(p) for p in self.request.classpath_paths)

    def build_version_flags(self) -> List[str]:
        request = self.request
        if request.release is not None:
            return ["--release", request.release]

        flags = []
        if request.source is not None:
            flags.extend(["-source", request.source])
        if request.target is not None:
            flags.extend(["-target", request.target])
        return flags

    def build_option_flags(self) -> List[str]:
        """Flags derived from structured options (encoding, debug, ...)."""
        request = self.request
        flags = []
        if request.encoding:
            flags.extend(["-encoding", request.encoding])
        if request.debug:
            flags.append("-g")
        if not request.show_warnings:
            flags.append("-nowarn")
        if request.implicit is not None:
            flags.append(f"-implicit:{request.implicit}")
        return flags

    def build_options(self) -> List[str]:
        """Everything between the classpath flag and the source files."""
        options = ["-d", str(self.request.output_dir)]
        options.extend(self.build_version_flags())
        options.extend(self.build_option_flags())
        options.extend(self.request.extra_flags)
        return options

    def build_arguments(self) -> List[str]:
        """Full argument vector, without the executable."""
        args = ["-classpath", self.classpath_string()]
        args.extend(self.build_options())
        args.extend(str(s) for s in self.request.sources)
        return args

