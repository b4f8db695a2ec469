"""
Classpath construction from resolved dependency artifacts.

Artifacts arrive already resolved (coordinates, file, handler). This module
only decides which of them belong on a classpath and in what order:
- An artifact is used only if its handler says it is added to the classpath
- Resolution order is kept as received, since earlier entries win
- An eligible artifact without a file is an error, never skipped
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import ClasspathError

MAIN_SCOPE = "main"
TEST_SCOPE = "test"


@dataclass(frozen=True)
class ArtifactHandler:
    """Describes how an artifact type is consumed."""

    type: str
    added_to_classpath: bool = True

    def is_added_to_classpath(self) -> bool:
        return self.added_to_classpath


# Known artifact types; anything else is treated like a plain jar.
ARTIFACT_HANDLERS = {
    "jar": ArtifactHandler("jar", True),
    "test-jar": ArtifactHandler("test-jar", True),
    "ejb": ArtifactHandler("ejb", True),
    "ejb-client": ArtifactHandler("ejb-client", True),
    "war": ArtifactHandler("war", True),
    "pom": ArtifactHandler("pom", False),
    "java-source": ArtifactHandler("java-source", False),
    "javadoc": ArtifactHandler("javadoc", False),
}


def get_artifact_handler(artifact_type: str) -> ArtifactHandler:
    """Return the handler for an artifact type (jar-like if unknown)."""
    return ARTIFACT_HANDLERS.get(artifact_type, ArtifactHandler(artifact_type, True))


@dataclass(frozen=True)
class ResolvedArtifact:
    """A dependency as handed over by the resolver."""

    coordinates: str
    file: Optional[Path]
    handler: ArtifactHandler

    @classmethod
    def from_coordinates(cls, coordinates: str, file: Optional[Path]) -> "ResolvedArtifact":
        """Build an artifact from ``group:artifact:version[:type]``."""
        parts = coordinates.split(":")
        if len(parts) < 3 or not all(parts):
            raise ClasspathError(
                f"Invalid artifact coordinates '{coordinates}', "
                "expected group:artifact:version[:type]"
            )
        artifact_type = parts[3] if len(parts) > 3 else "jar"
        return cls(
            coordinates=coordinates,
            file=Path(file) if file is not None else None,
            handler=get_artifact_handler(artifact_type),
        )


@dataclass(frozen=True)
class ClasspathEntry:
    """One path on a classpath, tagged with the scope it was built for."""

    path: Path
    scope: str = MAIN_SCOPE

    def __str__(self) -> str:
        return str(self.path)


class ClasspathBuilder:
    """
    Turns resolved artifacts into ordered classpath entries.

    Example usage:
        builder = ClasspathBuilder()
        entries = builder.build(artifacts, scope="main")
        test_entries = builder.build_test_classpath(test_artifacts, Path("target/classes"))
    """

    def build(self, artifacts: Iterable[ResolvedArtifact], scope: str = MAIN_SCOPE) -> List[ClasspathEntry]:
        """
        Build classpath entries for one scope.

        Args:
            artifacts: Resolved artifacts in resolution order
            scope: Scope tag for the produced entries

        Returns:
            Entries for classpath-eligible artifacts, in the order received

        Raises:
            ClasspathError: If an eligible artifact has no file
        """
        entries: List[ClasspathEntry] = []
        seen = set()

        for artifact in artifacts:
            if not artifact.handler.is_added_to_classpath():
                continue

            if artifact.file is None:
                raise ClasspathError(
                    f"Artifact {artifact.coordinates} is required on the {scope} "
                    "classpath but has not been resolved to a file"
                )

            path = Path(artifact.file)
            if path in seen:
                continue
            seen.add(path)
            entries.append(ClasspathEntry(path, scope))

        return entries

    def build_test_classpath(
        self,
        artifacts: Iterable[ResolvedArtifact],
        main_output_dir: Optional[Path]
    ) -> List[ClasspathEntry]:
        """
        Build the test phase classpath.

        Test-scoped artifacts come first in the order given, followed by the
        main phase output directory so test code can see main classes.
        """
        entries = self.build(artifacts, TEST_SCOPE)
        if main_output_dir is not None:
            main_output_dir = Path(main_output_dir)
            if all(entry.path != main_output_dir for entry in entries):
                entries.append(ClasspathEntry(main_output_dir, TEST_SCOPE))
        return entries
