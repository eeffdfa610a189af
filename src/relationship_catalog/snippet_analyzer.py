# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Structural checks for catalog snippets.

Snippets are parsed with the ast module and never executed. The analyzer
collects the top-level classes a snippet declares and what each class body
does with other names, then checks that the snippet demonstrates the
relationship its entry claims:

- generalization: subclass lists the superclass among its bases
- realization: implementation lists the interface among its bases and the
  interface declares at least one abstract method
- composition: the whole instantiates each part itself
- aggregation: the whole never instantiates a part
- dependency / usage: the client refers to the supplier in its body

Association entries only need their participants declared.
"""

import ast
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from relationship_catalog.models import RelationKind, RelationshipExample, Role

logger = logging.getLogger(__name__)


@dataclass
class ClassSketch:
    """What a single top-level class does, as seen from its AST."""

    name: str
    line_number: int
    bases: List[str] = field(default_factory=list)
    instantiates: Set[str] = field(default_factory=set)  # Names called as Foo(...)
    references: Set[str] = field(default_factory=set)  # Every Name loaded in the body
    abstract_methods: List[str] = field(default_factory=list)


@dataclass
class SnippetStructure:
    """Result of analyzing one snippet."""

    classes: Dict[str, ClassSketch] = field(default_factory=dict)
    is_valid: bool = True
    error_message: Optional[str] = None

    def get_class(self, name: str) -> Optional[ClassSketch]:
        return self.classes.get(name)


class SnippetAnalyzer:
    """Parses snippets and checks them against their entry's relation kind.

    The analyzer is stateless and never raises on bad snippet text; syntax
    errors are reported through SnippetStructure.is_valid and as problems
    from check_example().
    """

    def analyze(self, snippet: str) -> SnippetStructure:
        """Parse a snippet and collect its top-level classes.

        Args:
            snippet: Python source text.

        Returns:
            SnippetStructure describing the declared classes.
        """
        try:
            module_ast = ast.parse(snippet)
        except SyntaxError as e:
            return SnippetStructure(
                is_valid=False,
                error_message=f"syntax error at line {e.lineno}: {e.msg}",
            )

        structure = SnippetStructure()
        # Only module-scope classes; nested classes are not participants
        for node in module_ast.body:
            if isinstance(node, ast.ClassDef):
                structure.classes[node.name] = self._sketch_class(node)
        return structure

    def check_example(self, example: RelationshipExample) -> List[str]:
        """Check that an entry's snippet demonstrates its relation kind.

        Args:
            example: Catalog entry to check.

        Returns:
            List of human-readable problems. Empty if the snippet is consistent.
        """
        structure = self.analyze(example.snippet)
        if not structure.is_valid:
            return [f"{example.name}: {structure.error_message}"]

        problems = []
        for sketch in example.participants:
            if sketch.name not in structure.classes:
                problems.append(f"{example.name}: class '{sketch.name}' is not declared")
        if problems:
            # Kind-specific checks need every participant present
            return problems

        kind = example.kind
        if kind == RelationKind.GENERALIZATION:
            problems.extend(
                self._check_inherits(example, structure, Role.SUPERCLASS, Role.SUBCLASS)
            )
        elif kind == RelationKind.REALIZATION:
            problems.extend(
                self._check_inherits(example, structure, Role.INTERFACE, Role.IMPLEMENTATION)
            )
            for interface in example.participants_with_role(Role.INTERFACE):
                if not structure.classes[interface.name].abstract_methods:
                    problems.append(
                        f"{example.name}: interface '{interface.name}' "
                        "declares no abstract methods"
                    )
        elif kind == RelationKind.COMPOSITION:
            for whole in example.participants_with_role(Role.WHOLE):
                created = structure.classes[whole.name].instantiates
                for part in example.participants_with_role(Role.PART):
                    if part.name not in created:
                        problems.append(
                            f"{example.name}: whole '{whole.name}' does not create "
                            f"part '{part.name}'"
                        )
        elif kind == RelationKind.AGGREGATION:
            for whole in example.participants_with_role(Role.WHOLE):
                created = structure.classes[whole.name].instantiates
                for part in example.participants_with_role(Role.PART):
                    if part.name in created:
                        problems.append(
                            f"{example.name}: whole '{whole.name}' creates part "
                            f"'{part.name}' itself"
                        )
        elif kind in (RelationKind.DEPENDENCY, RelationKind.USAGE):
            for client in example.participants_with_role(Role.CLIENT):
                referenced = structure.classes[client.name].references
                for supplier in example.participants_with_role(Role.SUPPLIER):
                    if supplier.name not in referenced:
                        problems.append(
                            f"{example.name}: client '{client.name}' never uses "
                            f"supplier '{supplier.name}'"
                        )

        if problems:
            logger.debug(f"Snippet check for entry {example.id} found {len(problems)} problem(s)")
        return problems

    def _check_inherits(
        self,
        example: RelationshipExample,
        structure: SnippetStructure,
        parent_role: str,
        child_role: str,
    ) -> List[str]:
        problems = []
        for child in example.participants_with_role(child_role):
            bases = structure.classes[child.name].bases
            for parent in example.participants_with_role(parent_role):
                if parent.name not in bases:
                    problems.append(
                        f"{example.name}: '{child.name}' does not inherit from '{parent.name}'"
                    )
        return problems

    def _sketch_class(self, node: ast.ClassDef) -> ClassSketch:
        sketch = ClassSketch(name=node.name, line_number=node.lineno)

        for base in node.bases:
            base_name = self._extract_name(base)
            if base_name:
                # Compare on the final component so abc.ABC matches ABC
                sketch.bases.append(base_name.rsplit(".", 1)[-1])

        for child in node.body:
            if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if any(self._is_abstract_decorator(d) for d in child.decorator_list):
                    sketch.abstract_methods.append(child.name)

            for inner in ast.walk(child):
                if isinstance(inner, ast.Call) and isinstance(inner.func, ast.Name):
                    sketch.instantiates.add(inner.func.id)
                elif isinstance(inner, ast.Name):
                    sketch.references.add(inner.id)

        return sketch

    def _is_abstract_decorator(self, decorator: ast.expr) -> bool:
        name = self._extract_name(decorator)
        return name is not None and name.rsplit(".", 1)[-1] == "abstractmethod"

    def _extract_name(self, node: ast.expr) -> Optional[str]:
        """Extract a dotted name from a Name or Attribute chain.

        Handles:
        - Simple name: Parent -> "Parent"
        - Attribute: module.Parent -> "module.Parent"
        """
        if isinstance(node, ast.Name):
            return node.id
        elif isinstance(node, ast.Attribute):
            parts = []
            current: ast.expr = node
            while isinstance(current, ast.Attribute):
                parts.append(current.attr)
                current = current.value
            if isinstance(current, ast.Name):
                parts.append(current.id)
                return ".".join(reversed(parts))
        return None
