"""A small template language for project files.

Templates are plain text with a closed set of instructions:

- ``{{ name }}`` and ``{{ item.attribute }}`` interpolate a binding.
- ``{% if name %}`` / ``{% if not name %}`` ... ``{% else %}`` ... ``{% end %}``
  include a block depending on a boolean binding.
- ``{% for item in name %}`` ... ``{% end %}`` repeat a block for each element
  of a list binding.

A block tag that is alone on its line consumes the whole line, including the
indentation before it and the newline after it, so templates can be laid out
like the code they produce. Nothing else is evaluated: there are no
expressions, filters or function calls. Braces that do not form one of the
tags above, such as the tuple in ``{{{ app_module }}.Application, []}``, are
kept as literal text.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from catal_new.exceptions import TemplateNotFoundError, TemplateSyntaxError, UndefinedBindingError

__all__ = ("Template", "render_string", "render_template")

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_DOTTED = rf"{_NAME}(?:\.{_NAME})*"
_TOKEN = re.compile(
    r"(?P<standalone>^[ \t]*\{%\s*(?P<line_tag>[^%\n]*?)\s*%\}[ \t]*(?:\r?\n|\Z))"
    r"|\{%\s*(?P<tag>[^%\n]*?)\s*%\}"
    rf"|\{{\{{\s*(?P<expr>{_DOTTED})\s*\}}\}}",
    re.MULTILINE,
)
_IF = re.compile(rf"^if\s+(?P<negate>not\s+)?(?P<name>{_NAME}(?:\.{_NAME})*)$")
_FOR = re.compile(rf"^for\s+(?P<var>{_NAME})\s+in\s+(?P<name>{_NAME}(?:\.{_NAME})*)$")


@dataclass
class Text:
    value: str


@dataclass
class Var:
    name: str
    line: int


@dataclass
class If:
    name: str
    negate: bool
    line: int
    body: "list[Node]" = field(default_factory=list)
    orelse: "list[Node]" = field(default_factory=list)


@dataclass
class For:
    var: str
    name: str
    line: int
    body: "list[Node]" = field(default_factory=list)


Node = Union[Text, Var, If, For]


def _format(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "nil"
    return str(value)


class Template:
    """A parsed template.

    Args:
        source: The template text.
        name: Name used in error messages.

    Raises:
        TemplateSyntaxError: If a tag is unknown or blocks are unbalanced.
    """

    def __init__(self, source: str, name: str = "<string>") -> None:
        self.name = name
        self.nodes = self._parse(source)

    @classmethod
    def from_path(cls, path: Path) -> "Template":
        if not path.is_file():
            raise TemplateNotFoundError(str(path))
        return cls(path.read_text(encoding="utf-8"), name=str(path))

    def _parse(self, source: str) -> "list[Node]":
        root: list[Node] = []
        # Each frame is (node, branch being filled); the root has no node.
        stack: list[tuple[Union[If, For, None], list[Node]]] = [(None, root)]
        position = 0
        for match in _TOKEN.finditer(source):
            branch = stack[-1][1]
            if match.start() > position:
                branch.append(Text(source[position : match.start()]))
            position = match.end()
            line = source.count("\n", 0, match.start()) + 1

            expr = match.group("expr")
            if expr is not None:
                branch.append(Var(expr, line))
                continue

            tag = match.group("line_tag") if match.group("standalone") else match.group("tag")
            if if_match := _IF.match(tag):
                node: Union[If, For] = If(if_match.group("name"), bool(if_match.group("negate")), line)
                branch.append(node)
                stack.append((node, node.body))
            elif for_match := _FOR.match(tag):
                node = For(for_match.group("var"), for_match.group("name"), line)
                branch.append(node)
                stack.append((node, node.body))
            elif tag == "else":
                owner = stack[-1][0]
                if not isinstance(owner, If) or branch is owner.orelse:
                    raise TemplateSyntaxError("'else' outside of an 'if' block", self.name, line)
                stack[-1] = (owner, owner.orelse)
            elif tag == "end":
                if len(stack) == 1:
                    raise TemplateSyntaxError("'end' without an open block", self.name, line)
                stack.pop()
            else:
                raise TemplateSyntaxError(f"unknown tag {tag!r}", self.name, line)

        if len(stack) > 1:
            owner = stack[-1][0]
            raise TemplateSyntaxError("unclosed block", self.name, owner.line if owner else 0)
        if position < len(source):
            root.append(Text(source[position:]))
        return root

    def _lookup(self, name: str, scope: "Mapping[str, Any]") -> Any:
        head, *rest = name.split(".")
        if head not in scope:
            raise UndefinedBindingError(name, self.name)
        value = scope[head]
        for attribute in rest:
            if isinstance(value, Mapping) and attribute in value:
                value = value[attribute]
            elif hasattr(value, attribute):
                value = getattr(value, attribute)
            else:
                raise UndefinedBindingError(name, self.name)
        return value

    def _render_nodes(self, nodes: "list[Node]", scope: "Mapping[str, Any]", out: "list[str]") -> None:
        for node in nodes:
            if isinstance(node, Text):
                out.append(node.value)
            elif isinstance(node, Var):
                out.append(_format(self._lookup(node.name, scope)))
            elif isinstance(node, If):
                truthy = bool(self._lookup(node.name, scope))
                self._render_nodes(node.body if truthy != node.negate else node.orelse, scope, out)
            else:
                for item in self._lookup(node.name, scope):
                    self._render_nodes(node.body, {**scope, node.var: item}, out)

    def render(self, bindings: "Mapping[str, Any]") -> str:
        """Render the template.

        Raises:
            UndefinedBindingError: If the template uses a binding that is missing.
        """
        out: list[str] = []
        self._render_nodes(self.nodes, bindings, out)
        return "".join(out)


def render_string(source: str, bindings: "Mapping[str, Any]", name: str = "<string>") -> str:
    return Template(source, name).render(bindings)


def render_template(template_path: Path, bindings: "Mapping[str, Any]") -> str:
    """Render the template file at ``template_path`` with ``bindings``."""
    return Template.from_path(template_path).render(bindings)
