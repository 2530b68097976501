"""
Structural parser for Soy (Closure) templates.

Only the structure that matters for dependency resolution is recovered:
the file namespace, its templates and the calls each template makes.
Template bodies are otherwise ignored, so this is not a validating Soy
parser; the external compiler still reports real syntax errors.

Recognized commands:
    {namespace a.b}                 exactly one per file
    {template .name} {/template}     also {deltemplate a.b}
    {call x.y.tmpl /} {call .local} also {delcall a.b}
    {alias a.b.c} {alias a.b.c as d}

Comments (``/* */`` and ``//`` after whitespace) and ``{literal}`` blocks
are blanked out before scanning, keeping line numbers intact.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from soyloader.exceptions import SoyParseError

_COMMAND_RE = re.compile(
    r"\{(?P<close>/?)(?P<command>namespace|deltemplate|template|delcall|call|alias)(?=[\s}/])"
)
_IDENTIFIER_RE = re.compile(r"^\.?[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


@dataclass(frozen=True)
class SoyCall:
    """A ``{call}`` or ``{delcall}`` node."""

    namespace: Optional[str]
    name: str
    line: int
    kind: str = "call"

    @property
    def is_external(self) -> bool:
        return self.namespace is not None

    @property
    def full_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name


@dataclass(frozen=True)
class SoyTemplate:
    name: str
    line: int
    kind: str = "template"
    calls: Tuple[SoyCall, ...] = ()


@dataclass(frozen=True)
class SoyFile:
    """Parsed structure of one template file."""

    namespace: str
    templates: Tuple[SoyTemplate, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    path: Optional[Path] = None

    @property
    def calls(self) -> List[SoyCall]:
        return list(iter_calls(self))


SoyParser = Callable[[str, Optional[Path]], SoyFile]


class SoyVisitor:
    """
    Base visitor over a parsed template file.

    Subclasses override ``visit_call`` and/or ``visit_template``.
    """

    def visit_file(self, node: SoyFile) -> None:
        for template in node.templates:
            self.visit_template(template)

    def visit_template(self, node: SoyTemplate) -> None:
        for call in node.calls:
            self.visit_call(call)

    def visit_call(self, node: SoyCall) -> None:
        pass


def visit(ast: SoyFile, visitor: SoyVisitor) -> SoyVisitor:
    visitor.visit_file(ast)
    return visitor


def iter_calls(ast: SoyFile) -> Iterator[SoyCall]:
    """Yield every call node of ``ast`` in source order."""
    for template in ast.templates:
        yield from template.calls


def _line_of(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def _blank(segment: str) -> str:
    # Keep newlines so positions map to the same line numbers
    return re.sub(r"[^\n]", " ", segment)


def strip_comments(text: str, path: Optional[Path] = None) -> str:
    """
    Blank out comments and ``{literal}`` blocks.

    Raises:
        SoyParseError: On an unterminated block comment or literal block
    """
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text.startswith("{literal}", i):
            end = text.find("{/literal}", i)
            if end == -1:
                raise SoyParseError(path, "unterminated {literal} block", _line_of(text, i))
            end += len("{/literal}")
            out.append(_blank(text[i:end]))
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise SoyParseError(path, "unterminated comment", _line_of(text, i))
            end += 2
            out.append(_blank(text[i:end]))
            i = end
        elif text.startswith("//", i) and (i == 0 or text[i - 1] in " \t\r\n"):
            end = text.find("\n", i)
            if end == -1:
                end = n
            out.append(_blank(text[i:end]))
            i = end
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _command_args(text: str, start: int, path: Optional[Path]) -> Tuple[str, int]:
    end = text.find("}", start)
    if end == -1:
        raise SoyParseError(path, "unterminated command tag", _line_of(text, start))
    args = text[start:end].strip()
    if args.endswith("/"):
        args = args[:-1].rstrip()
    return args, end + 1


def _first_token(args: str) -> str:
    parts = args.split()
    return parts[0] if parts else ""


def _parse_alias(args: str, line: int, path: Optional[Path]) -> Tuple[str, str]:
    parts = args.split()
    if len(parts) == 1:
        target = parts[0]
        alias = target.rsplit(".", 1)[-1]
    elif len(parts) == 3 and parts[1] == "as":
        target, alias = parts[0], parts[2]
    else:
        raise SoyParseError(path, f"malformed alias '{args}'", line)
    if not _IDENTIFIER_RE.match(target) or target.startswith("."):
        raise SoyParseError(path, f"invalid alias target '{target}'", line)
    return alias, target


def resolve_call_id(
    identifier: str, aliases: Dict[str, str]
) -> Tuple[Optional[str], str]:
    """
    Split a call identifier into (namespace, template name).

    ``.local`` and single-segment identifiers are local calls. The first
    segment of a dotted identifier is expanded through ``aliases``.
    """
    if identifier.startswith("."):
        return None, identifier[1:]
    segments = identifier.split(".")
    if len(segments) == 1:
        return None, identifier
    head = aliases.get(segments[0])
    if head is not None:
        segments = head.split(".") + segments[1:]
    return ".".join(segments[:-1]), segments[-1]


def parse_soy(text: str, path: Optional[Union[str, Path]] = None) -> SoyFile:
    """
    Parse template source into a :class:`SoyFile`.

    Args:
        text: Raw template source
        path: File the source came from, used in error messages

    Returns:
        SoyFile with namespace, templates and their calls

    Raises:
        SoyParseError: If the source is malformed
    """
    path = Path(path) if path is not None else None
    cleaned = strip_comments(text, path)

    namespace: Optional[str] = None
    aliases: Dict[str, str] = {}
    templates: List[SoyTemplate] = []
    current: Optional[Tuple[str, int, str]] = None
    current_calls: List[SoyCall] = []

    for match in _COMMAND_RE.finditer(cleaned):
        command = match.group("command")
        line = _line_of(cleaned, match.start())

        if match.group("close"):
            if command in ("template", "deltemplate"):
                if current is None:
                    raise SoyParseError(path, f"unexpected {{/{command}}}", line)
                name, start_line, kind = current
                templates.append(SoyTemplate(name, start_line, kind, tuple(current_calls)))
                current = None
                current_calls = []
            continue

        args, _ = _command_args(cleaned, match.end(), path)
        token = _first_token(args)

        if command == "namespace":
            if namespace is not None:
                raise SoyParseError(path, "duplicate namespace declaration", line)
            if not token or not _IDENTIFIER_RE.match(token) or token.startswith("."):
                raise SoyParseError(path, f"invalid namespace '{token}'", line)
            namespace = token
        elif command == "alias":
            alias, target = _parse_alias(args, line, path)
            aliases[alias] = target
        elif command in ("template", "deltemplate"):
            if current is not None:
                raise SoyParseError(path, f"{{{command}}} nested in {current[0]}", line)
            if not token or not _IDENTIFIER_RE.match(token):
                raise SoyParseError(path, f"invalid template name '{token}'", line)
            current = (token, line, command)
        else:
            if current is None:
                raise SoyParseError(path, f"{{{command}}} outside of a template", line)
            if not token or not _IDENTIFIER_RE.match(token):
                raise SoyParseError(path, f"invalid call target '{token}'", line)
            if command == "delcall":
                current_calls.append(SoyCall(None, token, line, "delcall"))
            else:
                call_namespace, name = resolve_call_id(token, aliases)
                current_calls.append(SoyCall(call_namespace, name, line))

    if current is not None:
        raise SoyParseError(path, f"unterminated template {current[0]}", current[1])
    if namespace is None:
        raise SoyParseError(path, "missing {namespace} declaration")

    return SoyFile(namespace, tuple(templates), aliases, path)
