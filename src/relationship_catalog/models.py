# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Core data models for the relationship catalog.

This module defines the structures shared by the store, analyzer and renderers:
- RelationKind: Class constants for the eight relationship kinds
- Role: Class constants for participant roles
- TypeSketch: One type taking part in an example
- RelationshipExample: One catalog entry

All models serialize to JSON-compatible primitives.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from relationship_catalog.errors import CatalogError

logger = logging.getLogger(__name__)


class RelationKind:
    """Kinds of object relationships.

    Design: Using class constants (not Enum) for JSON-compatible strings.
    """

    ASSOCIATION = "association"  # mutual references
    DIRECTED_ASSOCIATION = "directed-association"  # one-way reference
    AGGREGATION = "aggregation"  # whole holds independent parts
    COMPOSITION = "composition"  # whole owns part lifetimes
    GENERALIZATION = "generalization"  # class Dog(Animal)
    REALIZATION = "realization"  # class Circle(Shape) where Shape is abstract
    DEPENDENCY = "dependency"  # parameter or annotation use
    USAGE = "usage"  # creates or calls the supplier locally

    # Canonical catalog order
    ALL: Tuple[str, ...] = (
        ASSOCIATION,
        DIRECTED_ASSOCIATION,
        AGGREGATION,
        COMPOSITION,
        GENERALIZATION,
        REALIZATION,
        DEPENDENCY,
        USAGE,
    )


class Role:
    """Roles a participant can play in an example."""

    PEER = "peer"
    SOURCE = "source"
    TARGET = "target"
    WHOLE = "whole"
    PART = "part"
    SUPERCLASS = "superclass"
    SUBCLASS = "subclass"
    INTERFACE = "interface"
    IMPLEMENTATION = "implementation"
    CLIENT = "client"
    SUPPLIER = "supplier"


KIND_ROLES: Dict[str, Tuple[str, ...]] = {
    RelationKind.ASSOCIATION: (Role.PEER,),
    RelationKind.DIRECTED_ASSOCIATION: (Role.SOURCE, Role.TARGET),
    RelationKind.AGGREGATION: (Role.WHOLE, Role.PART),
    RelationKind.COMPOSITION: (Role.WHOLE, Role.PART),
    RelationKind.GENERALIZATION: (Role.SUPERCLASS, Role.SUBCLASS),
    RelationKind.REALIZATION: (Role.INTERFACE, Role.IMPLEMENTATION),
    RelationKind.DEPENDENCY: (Role.CLIENT, Role.SUPPLIER),
    RelationKind.USAGE: (Role.CLIENT, Role.SUPPLIER),
}

# PlantUML connectors, read left to right from the first participant
DIAGRAM_ARROWS: Dict[str, str] = {
    RelationKind.ASSOCIATION: "--",
    RelationKind.DIRECTED_ASSOCIATION: "-->",
    RelationKind.AGGREGATION: "o--",
    RelationKind.COMPOSITION: "*--",
    RelationKind.GENERALIZATION: "<|--",
    RelationKind.REALIZATION: "<|..",
    RelationKind.DEPENDENCY: "..>",
    RelationKind.USAGE: "..>",
}

DIAGRAM_LABELS: Dict[str, str] = {
    RelationKind.USAGE: "<<use>>",
}

MAX_PARTICIPANTS = 3


@dataclass(frozen=True)
class TypeSketch:
    """Minimal structural description of one type in an example."""

    name: str  # Type name as declared in the snippet
    role: str  # Role value
    kind: str  # RelationKind value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {"name": self.name, "role": self.role, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: Optional[str] = None) -> "TypeSketch":
        """Deserialize from JSON-compatible dict.

        Args:
            data: Dictionary with name, role and optionally kind.
            kind: Kind to use when data does not carry one.

        Raises:
            KeyError: If name or role is missing, or no kind is available.
        """
        resolved_kind = data.get("kind", kind)
        if resolved_kind is None:
            raise KeyError("kind")
        return cls(name=data["name"], role=data["role"], kind=resolved_kind)


@dataclass(frozen=True)
class RelationshipExample:
    """One entry in the relationship catalog.

    Entries are immutable. Participants are kept in narrative order
    (e.g. whole before part, superclass before subclass).
    """

    id: int
    name: str
    summary: str
    participants: Tuple[TypeSketch, ...]
    snippet: str

    @property
    def kind(self) -> str:
        """The relation kind shared by all participants."""
        return self.participants[0].kind if self.participants else ""

    def participant(self, role: str) -> Optional[TypeSketch]:
        """Return the first participant playing the given role, if any."""
        for sketch in self.participants:
            if sketch.role == role:
                return sketch
        return None

    def participants_with_role(self, role: str) -> List[TypeSketch]:
        return [p for p in self.participants if p.role == role]

    def diagram_lines(self) -> List[str]:
        """Build PlantUML lines linking the first participant to each other one."""
        if len(self.participants) < 2:
            return []
        arrow = DIAGRAM_ARROWS[self.kind]
        label = DIAGRAM_LABELS.get(self.kind)
        head = self.participants[0].name
        lines = []
        for other in self.participants[1:]:
            line = f"{head} {arrow} {other.name}"
            if label:
                line += f" : {label}"
            lines.append(line)
        return lines

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "summary": self.summary,
            "participants": [{"name": p.name, "role": p.role} for p in self.participants],
            "snippet": self.snippet,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelationshipExample":
        """Deserialize from JSON-compatible dict.

        The relation kind may be given once on the entry or on every participant.

        Raises:
            CatalogError: If required fields are missing or have the wrong shape.
        """
        if not isinstance(data, dict):
            raise CatalogError(f"Catalog entry must be a mapping, got {type(data).__name__}")

        try:
            raw_participants = data["participants"]
            if not isinstance(raw_participants, list):
                raise CatalogError(
                    f"Entry {data.get('id')!r}: participants must be a list, "
                    f"got {type(raw_participants).__name__}"
                )
            participants = tuple(
                TypeSketch.from_dict(p, kind=data.get("kind")) for p in raw_participants
            )
            return cls(
                id=data["id"],
                name=data["name"],
                summary=data["summary"],
                participants=participants,
                snippet=data["snippet"],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise CatalogError(
                f"Entry {data.get('id')!r} is missing or has invalid field: {e}"
            ) from e


def validate_example(example: RelationshipExample) -> None:
    """Validate a single entry's structure.

    Raises:
        CatalogError: If any field violates the entry invariants.
    """
    label = f"Entry {example.id!r}"

    if isinstance(example.id, bool) or not isinstance(example.id, int) or example.id < 1:
        raise CatalogError(f"{label}: id must be a positive integer")

    for field_name in ("name", "summary", "snippet"):
        value = getattr(example, field_name)
        if not isinstance(value, str) or not value.strip():
            raise CatalogError(f"{label}: {field_name} cannot be empty")

    if not example.participants:
        raise CatalogError(f"{label}: participants cannot be empty")
    if len(example.participants) > MAX_PARTICIPANTS:
        raise CatalogError(
            f"{label}: at most {MAX_PARTICIPANTS} participants allowed, "
            f"got {len(example.participants)}"
        )

    kinds = {p.kind for p in example.participants}
    if len(kinds) != 1:
        raise CatalogError(f"{label}: participants disagree on relation kind: {sorted(kinds)}")

    kind = example.kind
    if kind not in KIND_ROLES:
        raise CatalogError(f"{label}: unknown relation kind '{kind}'")

    for sketch in example.participants:
        if not sketch.name:
            raise CatalogError(f"{label}: participant name cannot be empty")
        if sketch.role not in KIND_ROLES[kind]:
            raise CatalogError(
                f"{label}: role '{sketch.role}' is not valid for {kind} "
                f"(expected one of {', '.join(KIND_ROLES[kind])})"
            )
