"""Content-health diagnostics collected during a build.

Every defect found while loading and linking content lands here instead of
aborting the run.  Strict builds call :meth:`ContentHealth.check` afterwards
to turn the blocking categories into an exception.

Usage::

    from contentmap.health import ContentHealth, HealthError

    health = ContentHealth()
    nodes = load_content_nodes(root, health)
    build_graph(nodes, health)

    health.problems()      # list of Problems (blocking categories only)
    health.check()         # raises HealthError if any
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CATEGORY_BAD_FILE = "bad-file"
CATEGORY_UNRESOLVED = "unresolved"
CATEGORY_ID_COLLISION = "id-collision"


@dataclass(frozen=True)
class Problem:
    category: str
    subject: str
    message: str

    def __str__(self) -> str:
        return f"{self.subject}: [{self.category}] {self.message}"


class HealthError(Exception):
    """Raised by ContentHealth.check() when blocking problems exist."""

    def __init__(self, problems: list[Problem]) -> None:
        self.problems = problems
        summary = f"{len(problems)} content problem(s):\n" + "\n".join(
            f"  - {p}" for p in problems
        )
        super().__init__(summary)


@dataclass
class Orphans:
    strict: list[dict[str, Any]] = field(default_factory=list)
    no_inbound: list[dict[str, Any]] = field(default_factory=list)
    no_outbound: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ContentHealth:
    """Per-run diagnostic accumulator.

    ``unresolved_mentions`` holds ambiguity and unresolved-link messages,
    each formatted message recorded once.
    """

    bad_files: list[dict[str, Any]] = field(default_factory=list)
    unresolved_mentions: list[str] = field(default_factory=list)
    id_collisions: list[dict[str, Any]] = field(default_factory=list)
    missing_identifiers: list[dict[str, Any]] = field(default_factory=list)
    alias_conflicts: list[dict[str, Any]] = field(default_factory=list)
    orphans: Orphans = field(default_factory=Orphans)
    _seen_messages: set[str] = field(default_factory=set, repr=False)

    def add_bad_file(self, file_path: str, error: str) -> None:
        self.bad_files.append({"filePath": file_path, "error": error})

    def add_unresolved(self, message: str) -> bool:
        """Record a resolution message.  Returns False if already recorded."""
        if message in self._seen_messages:
            return False
        self._seen_messages.add(message)
        self.unresolved_mentions.append(message)
        return True

    def add_id_collision(self, node_id: str, existing_file: str, duplicate_file: str) -> None:
        self.id_collisions.append({
            "id": node_id,
            "existingFile": existing_file,
            "duplicateFile": duplicate_file,
        })

    def add_missing_identifier(self, file_path: str, collection: str, slug: str, title: str) -> None:
        self.missing_identifiers.append({
            "filePath": file_path,
            "collection": collection,
            "slug": slug,
            "title": title,
        })

    # ------------------------------------------------------------------
    # Strict mode
    # ------------------------------------------------------------------

    def problems(self) -> list[Problem]:
        """Blocking problems: bad files, unresolved mentions, id collisions.

        Missing identifiers, alias conflicts and orphans are advisory and
        never reported here.
        """
        found: list[Problem] = []
        for entry in self.bad_files:
            found.append(Problem(CATEGORY_BAD_FILE, entry["filePath"], entry["error"]))
        for message in self.unresolved_mentions:
            found.append(Problem(CATEGORY_UNRESOLVED, "links", message))
        for entry in self.id_collisions:
            found.append(Problem(
                CATEGORY_ID_COLLISION,
                entry["duplicateFile"],
                f"id '{entry['id']}' already used by {entry['existingFile']}",
            ))
        return found

    def check(self) -> None:
        """Raise HealthError if any blocking problems were recorded."""
        found = self.problems()
        if found:
            raise HealthError(found)

    def counts(self) -> dict[str, int]:
        return {
            "badFiles": len(self.bad_files),
            "unresolvedMentions": len(self.unresolved_mentions),
            "idCollisions": len(self.id_collisions),
            "missingIdentifiers": len(self.missing_identifiers),
            "aliasConflicts": len(self.alias_conflicts),
            "orphans": len(self.orphans.strict),
        }
