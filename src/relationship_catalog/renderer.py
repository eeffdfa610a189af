# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Rendering of catalog entries as documentation text.

Renderers are pure functions of their input: render_example() returns text
and render_catalog() writes only to the sink it is given. Each renderer
validates snippets for its own target format and raises RenderError for
malformed ones. A failing entry is skipped by render_catalog() without
affecting the other entries.

Formats:
- markdown: headings, a participants table, a PlantUML block and a fenced snippet
- html: a standalone page with one <section> per entry
"""

import html
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, TextIO

from relationship_catalog.errors import RenderError
from relationship_catalog.logging_setup import entry_context
from relationship_catalog.models import RelationshipExample

if TYPE_CHECKING:
    from relationship_catalog.config import Config

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Object Relationship Patterns"


@dataclass
class RenderFailure:
    """An entry that could not be rendered."""

    example_id: int
    kind: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"example_id": self.example_id, "kind": self.kind, "message": self.message}


class Renderer(ABC):
    """Base class for catalog renderers."""

    format_name = ""

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        include_participants: bool = True,
        include_diagrams: bool = True,
        snippet_language: str = "python",
    ) -> None:
        self.title = title
        self.include_participants = include_participants
        self.include_diagrams = include_diagrams
        self.snippet_language = snippet_language

    def render_example(self, example: RelationshipExample) -> str:
        """Render a single entry.

        Raises:
            RenderError: If the snippet is malformed for this format.
        """
        if not example.snippet.strip():
            raise RenderError(f"Entry {example.id} has an empty snippet", example.id)
        self.validate_snippet(example)
        return self._render_example(example)

    def render_catalog(
        self, examples: Iterable[RelationshipExample], sink: TextIO
    ) -> List[RenderFailure]:
        """Write a full document to sink.

        Entries that fail to render are left out of the document.

        Args:
            examples: Entries in the order they should appear.
            sink: Writable text stream.

        Returns:
            One RenderFailure per skipped entry. Empty if everything rendered.
        """
        failures: List[RenderFailure] = []
        sink.write(self.render_header())
        for example in examples:
            try:
                text = self.render_example(example)
            except RenderError as e:
                logger.warning(
                    f"Skipping entry {example.id} ({example.kind}): {e}",
                    extra=entry_context(example),
                )
                failures.append(RenderFailure(example.id, example.kind, str(e)))
                continue
            sink.write(text)
        sink.write(self.render_footer())
        return failures

    @abstractmethod
    def validate_snippet(self, example: RelationshipExample) -> None:
        """Raise RenderError if the snippet cannot be embedded in this format."""
        pass

    @abstractmethod
    def render_header(self) -> str:
        pass

    def render_footer(self) -> str:
        return ""

    @abstractmethod
    def _render_example(self, example: RelationshipExample) -> str:
        pass

    @abstractmethod
    def extract_kinds(self, text: str) -> List[str]:
        """Recover the relation kinds, in order, from rendered output."""
        pass


class MarkdownRenderer(Renderer):
    """Renders entries as GitHub-flavored markdown."""

    format_name = "markdown"

    # A backtick fence indented by at most three spaces. Tilde fences and
    # deeper indents cannot close the ``` blocks this renderer emits.
    _FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,})")
    _HEADING_PATTERN = re.compile(r"^## \d+\. ")
    _KIND_PATTERN = re.compile(r"^\*Kind:\* `([^`]+)`\s*$")

    def validate_snippet(self, example: RelationshipExample) -> None:
        for line_number, line in enumerate(example.snippet.splitlines(), start=1):
            if self._FENCE_PATTERN.match(line):
                raise RenderError(
                    f"Entry {example.id} snippet line {line_number} opens a code fence, "
                    "which would break the enclosing code block",
                    example.id,
                )

    def render_header(self) -> str:
        return f"# {self.title}\n"

    def _render_example(self, example: RelationshipExample) -> str:
        lines = [
            "",
            f"## {example.id}. {_single_line(example.name)}",
            "",
            f"*Kind:* `{example.kind}`",
            "",
            _single_line(example.summary),
            "",
        ]

        if self.include_participants:
            lines.append("| Type | Role |")
            lines.append("|---|---|")
            for sketch in example.participants:
                lines.append(f"| `{sketch.name}` | {sketch.role} |")
            lines.append("")

        diagram = example.diagram_lines()
        if self.include_diagrams and diagram:
            lines.append("```plantuml")
            lines.append("@startuml")
            lines.extend(diagram)
            lines.append("@enduml")
            lines.append("```")
            lines.append("")

        lines.append(f"```{self.snippet_language}")
        lines.append(example.snippet.rstrip("\n"))
        lines.append("```")
        lines.append("")
        return "\n".join(lines)

    def extract_kinds(self, text: str) -> List[str]:
        """Read the kind marker that directly follows each entry heading.

        Lines inside fenced blocks are skipped, so snippet text can never
        contribute a kind.
        """
        kinds: List[str] = []
        open_fence = ""
        after_heading = False

        for line in text.splitlines():
            fence = self._FENCE_PATTERN.match(line)
            if open_fence:
                # Only a bare fence at least as long as the opener closes it
                closes = fence is not None and len(fence.group(1)) >= len(open_fence)
                if closes and not line[fence.end() :].strip():
                    open_fence = ""
                continue
            if fence:
                open_fence = fence.group(1)
                after_heading = False
                continue
            if not line.strip():
                continue

            if after_heading:
                marker = self._KIND_PATTERN.match(line)
                if marker:
                    kinds.append(marker.group(1))
            after_heading = self._HEADING_PATTERN.match(line) is not None

        return kinds


class HtmlRenderer(Renderer):
    """Renders entries as a standalone HTML page."""

    format_name = "html"

    # Everything below 0x20 except tab, newline and carriage return, plus DEL
    _CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
    _KIND_PATTERN = re.compile(r'<p class="kind">Kind: <code>([^<]+)</code></p>')

    def validate_snippet(self, example: RelationshipExample) -> None:
        match = self._CONTROL_PATTERN.search(example.snippet)
        if match:
            raise RenderError(
                f"Entry {example.id} snippet contains control character "
                f"{match.group()!r} at offset {match.start()}, which is not allowed in HTML",
                example.id,
            )

    def render_header(self) -> str:
        title = html.escape(self.title)
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{title}</title>\n"
            "</head>\n"
            "<body>\n"
            f"<h1>{title}</h1>\n"
        )

    def render_footer(self) -> str:
        return "</body>\n</html>\n"

    def _render_example(self, example: RelationshipExample) -> str:
        esc = html.escape
        parts = [
            f'<section id="{esc(example.kind)}">',
            f"<h2>{example.id}. {esc(example.name)}</h2>",
            f'<p class="kind">Kind: <code>{esc(example.kind)}</code></p>',
            f"<p>{esc(example.summary.strip())}</p>",
        ]

        if self.include_participants:
            parts.append("<table>")
            parts.append("<tr><th>Type</th><th>Role</th></tr>")
            for sketch in example.participants:
                parts.append(
                    f"<tr><td><code>{esc(sketch.name)}</code></td>"
                    f"<td>{esc(sketch.role)}</td></tr>"
                )
            parts.append("</table>")

        diagram = example.diagram_lines()
        if self.include_diagrams and diagram:
            body = "\n".join(["@startuml", *diagram, "@enduml"])
            parts.append(f'<pre class="diagram">{esc(body)}</pre>')

        language = esc(self.snippet_language)
        snippet = esc(example.snippet.rstrip("\n"))
        parts.append(f'<pre><code class="language-{language}">{snippet}</code></pre>')
        parts.append("</section>")
        return "\n".join(parts) + "\n"

    def extract_kinds(self, text: str) -> List[str]:
        return [html.unescape(kind) for kind in self._KIND_PATTERN.findall(text)]


def _single_line(text: str) -> str:
    """Collapse whitespace so a field renders as one markdown line."""
    return " ".join(text.split())


RENDERERS = {
    MarkdownRenderer.format_name: MarkdownRenderer,
    HtmlRenderer.format_name: HtmlRenderer,
}


def get_renderer(
    output_format: Optional[str] = None,
    config: Optional["Config"] = None,
) -> Renderer:
    """Create a renderer for the given format.

    Args:
        output_format: "markdown" or "html". If None, uses the config's format
            (or markdown when no config is given).
        config: Configuration supplying title and display options.

    Raises:
        ValueError: If the format is unknown.
    """
    if output_format is None:
        output_format = config.output_format if config is not None else "markdown"

    renderer_cls = RENDERERS.get(output_format)
    if renderer_cls is None:
        raise ValueError(
            f"Unknown output format '{output_format}' (expected one of {', '.join(RENDERERS)})"
        )

    if config is None:
        return renderer_cls()
    return renderer_cls(
        title=config.document_title,
        include_participants=config.include_participants,
        include_diagrams=config.include_diagrams,
        snippet_language=config.snippet_language,
    )
