"""Template text rendering and template-variable inspection.

Templates use a small Go-template dialect::

    Hello {{.name}}
    {{if hasValue .extra}}Extra: {{.extra}}{{else}}none{{end}}
    {{default "main" .base}} / {{.title | slugify}}

``render_text`` never raises: any syntax or evaluation problem yields the
original body. ``find_unused_variables`` is a cheap scan over ``{{ }}``
blocks and does not parse the template.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

ACTION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
FIELD_REF_RE = re.compile(r"(?<![\w.])\.([A-Za-z_][A-Za-z0-9_]*)")
VALUE_PREVIEW_COLS = 60
ELLIPSIS = "…"


class TemplateSyntaxError(ValueError):
    """Raised internally for malformed templates or failed evaluation."""


# ---------------------------------------------------------------- functions


def _has_value(value: object) -> bool:
    return _to_text(value).strip() != ""


def _default(default_value: object, value: object) -> str:
    text = _to_text(value)
    return text if text.strip() else _to_text(default_value)


def slugify(value: object) -> str:
    """Lowercase, hyphenate and strip a value into a branch-friendly slug."""
    text = _to_text(value).lower().replace(" ", "-").replace("_", "-")
    text = "".join(ch for ch in text if ("a" <= ch <= "z") or ("0" <= ch <= "9") or ch == "-")
    while "--" in text:
        text = text.replace("--", "-")
    return text.strip("-")


def _not(value: object) -> bool:
    return not _truthy(value)


def _and(*values: object) -> object:
    if not values:
        raise TemplateSyntaxError("and: missing arguments")
    for value in values:
        if not _truthy(value):
            return value
    return values[-1]


def _or(*values: object) -> object:
    if not values:
        raise TemplateSyntaxError("or: missing arguments")
    for value in values:
        if _truthy(value):
            return value
    return values[-1]


def _eq(first: object, *others: object) -> bool:
    if not others:
        raise TemplateSyntaxError("eq: missing arguments")
    return any(first == other for other in others)


def _ne(first: object, second: object) -> bool:
    return first != second


FUNCTIONS: Mapping[str, Callable[..., object]] = {
    "hasValue": _has_value,
    "default": _default,
    "slugify": slugify,
    "not": _not,
    "and": _and,
    "or": _or,
    "eq": _eq,
    "ne": _ne,
}

_ARITY: Mapping[str, tuple[int, int | None]] = {
    "hasValue": (1, 1),
    "default": (2, 2),
    "slugify": (1, 1),
    "not": (1, 1),
    "and": (1, None),
    "or": (1, None),
    "eq": (2, None),
    "ne": (2, 2),
}


def _to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _truthy(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return _to_text(value) != ""


# ---------------------------------------------------------------- parsing


@dataclass(frozen=True)
class _Token:
    kind: str
    value: object


@dataclass
class _Command:
    operands: list[object]


@dataclass
class _Pipeline:
    commands: list[_Command]


@dataclass
class _Field:
    name: str


@dataclass
class _Func:
    name: str


@dataclass
class _TextNode:
    text: str


@dataclass
class _ActionNode:
    pipeline: _Pipeline


@dataclass
class _IfNode:
    condition: _Pipeline
    then_nodes: list[object] = field(default_factory=list)
    else_nodes: list[object] = field(default_factory=list)


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<raw>`[^`]*`)
  | (?P<field>\.[A-Za-z_][A-Za-z0-9_]*)
  | (?P<dot>\.)
  | (?P<number>-?\d+)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<pipe>\|)
  | (?P<lparen>\()
  | (?P<rparen>\))
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


def _unquote(literal: str) -> str:
    body = literal[1:-1]
    out: list[str] = []
    idx = 0
    while idx < len(body):
        ch = body[idx]
        if ch == "\\" and idx + 1 < len(body):
            nxt = body[idx + 1]
            if nxt not in _ESCAPES:
                raise TemplateSyntaxError(f"unknown escape \\{nxt}")
            out.append(_ESCAPES[nxt])
            idx += 2
            continue
        out.append(ch)
        idx += 1
    return "".join(out)


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise TemplateSyntaxError(f"unexpected character {source[pos]!r}")
        pos = match.end()
        kind = match.lastgroup
        text = match.group(0)
        if kind == "ws":
            continue
        if kind == "string":
            tokens.append(_Token("value", _unquote(text)))
        elif kind == "raw":
            tokens.append(_Token("value", text[1:-1]))
        elif kind == "number":
            tokens.append(_Token("value", int(text)))
        elif kind == "field":
            tokens.append(_Token("field", text[1:]))
        elif kind == "dot":
            tokens.append(_Token("dot", "."))
        elif kind == "ident":
            if text in {"true", "false"}:
                tokens.append(_Token("value", text == "true"))
            else:
                tokens.append(_Token("ident", text))
        else:
            tokens.append(_Token(kind or "", text))
    return tokens


class _PipelineParser:
    def __init__(self, tokens: list[_Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> _Pipeline:
        pipeline = self._pipeline()
        if self.pos != len(self.tokens):
            raise TemplateSyntaxError("unexpected trailing tokens")
        return pipeline

    def _peek(self) -> _Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _pipeline(self) -> _Pipeline:
        commands = [self._command()]
        while (token := self._peek()) is not None and token.kind == "pipe":
            self.pos += 1
            commands.append(self._command())
        return _Pipeline(commands)

    def _command(self) -> _Command:
        operands: list[object] = []
        while (token := self._peek()) is not None and token.kind not in {"pipe", "rparen"}:
            self.pos += 1
            if token.kind == "lparen":
                operands.append(self._pipeline())
                closing = self._peek()
                if closing is None or closing.kind != "rparen":
                    raise TemplateSyntaxError("unclosed parenthesis")
                self.pos += 1
            elif token.kind == "field":
                operands.append(_Field(str(token.value)))
            elif token.kind == "dot":
                operands.append(_Field(""))
            elif token.kind == "ident":
                if token.value not in FUNCTIONS:
                    raise TemplateSyntaxError(f'function "{token.value}" not defined')
                operands.append(_Func(str(token.value)))
            else:
                operands.append(token.value)
        if not operands:
            raise TemplateSyntaxError("missing value for command")
        return _Command(operands)


def _split_actions(body: str) -> list[tuple[str, str]]:
    """Split ``body`` into ``("text", ...)`` and ``("action", ...)`` parts.

    Trim markers (``{{- `` and `` -}}``) strip adjacent whitespace.
    """
    parts: list[tuple[str, str]] = []
    pos = 0
    trim_next = False
    while True:
        start = body.find("{{", pos)
        if start < 0:
            text = body[pos:]
            parts.append(("text", text.lstrip() if trim_next else text))
            return parts
        end = body.find("}}", start + 2)
        if end < 0:
            raise TemplateSyntaxError("unclosed action")
        text = body[pos:start]
        if trim_next:
            text = text.lstrip()
        inner = body[start + 2 : end]
        if inner.startswith("- ") or inner.startswith("-\t") or inner.startswith("-\n"):
            text = text.rstrip()
            inner = inner[1:]
        trim_next = False
        if inner.endswith(" -") or inner.endswith("\t-") or inner.endswith("\n-"):
            trim_next = True
            inner = inner[:-1]
        parts.append(("text", text))
        parts.append(("action", inner.strip()))
        pos = end + 2


_UNSUPPORTED_ACTIONS = frozenset({"range", "with", "define", "template", "block", "break", "continue"})


def _pipeline_from(source: str) -> _Pipeline:
    return _PipelineParser(_tokenize(source)).parse()


class _BlockParser:
    """Recursive-descent parser over the text/action parts of a body."""

    def __init__(self, parts: list[tuple[str, str]]) -> None:
        self.parts = parts
        self.pos = 0

    def parse_list(self) -> tuple[list[object], tuple[str, str] | None]:
        """Parse nodes until ``else``/``end``; return them with the terminator."""
        nodes: list[object] = []
        while self.pos < len(self.parts):
            kind, content = self.parts[self.pos]
            self.pos += 1
            if kind == "text":
                if content:
                    nodes.append(_TextNode(content))
                continue
            if content.startswith("/*"):
                if not content.endswith("*/"):
                    raise TemplateSyntaxError("unclosed comment")
                continue
            word, _, rest = content.partition(" ")
            rest = rest.strip()
            if word == "if":
                nodes.append(self.parse_if(rest))
            elif word in {"else", "end"}:
                return nodes, (word, rest)
            elif word in _UNSUPPORTED_ACTIONS:
                raise TemplateSyntaxError(f"unsupported action {word!r}")
            else:
                nodes.append(_ActionNode(_pipeline_from(content)))
        return nodes, None

    def parse_if(self, condition: str) -> _IfNode:
        if not condition:
            raise TemplateSyntaxError("missing value for if")
        node = _IfNode(_pipeline_from(condition))
        node.then_nodes, terminator = self.parse_list()
        if terminator is None:
            raise TemplateSyntaxError("unexpected EOF")
        word, rest = terminator
        if word == "end":
            if rest:
                raise TemplateSyntaxError("unexpected tokens after end")
            return node
        if rest == "if" or rest.startswith("if "):
            # "else if" chains share the enclosing "end".
            node.else_nodes = [self.parse_if(rest[2:].strip())]
            return node
        if rest:
            raise TemplateSyntaxError("unexpected tokens after else")
        node.else_nodes, terminator = self.parse_list()
        if terminator is None or terminator != ("end", ""):
            raise TemplateSyntaxError("expected end")
        return node


def _parse(body: str) -> list[object]:
    nodes, terminator = _BlockParser(_split_actions(body)).parse_list()
    if terminator is not None:
        raise TemplateSyntaxError(f"unexpected {terminator[0]}")
    return nodes


# ---------------------------------------------------------------- evaluation


def _eval_operand(operand: object, variables: Mapping[str, str]) -> object:
    if isinstance(operand, _Field):
        if not operand.name:
            return ""
        return variables.get(operand.name, "")
    if isinstance(operand, _Pipeline):
        return _eval_pipeline(operand, variables)
    if isinstance(operand, _Func):
        return _call(operand.name, [])
    return operand


def _call(name: str, args: list[object]) -> object:
    low, high = _ARITY[name]
    if len(args) < low or (high is not None and len(args) > high):
        raise TemplateSyntaxError(f"wrong number of args for {name}")
    return FUNCTIONS[name](*args)


def _eval_pipeline(pipeline: _Pipeline, variables: Mapping[str, str]) -> object:
    result: object = None
    for index, command in enumerate(pipeline.commands):
        head = command.operands[0]
        if isinstance(head, _Func):
            args = [_eval_operand(operand, variables) for operand in command.operands[1:]]
            if index > 0:
                args.append(result)
            result = _call(head.name, args)
            continue
        if len(command.operands) > 1 or index > 0:
            raise TemplateSyntaxError("can't give argument to non-function")
        result = _eval_operand(head, variables)
    return result


def _execute(nodes: list[object], variables: Mapping[str, str], out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, _TextNode):
            out.append(node.text)
        elif isinstance(node, _ActionNode):
            out.append(_to_text(_eval_pipeline(node.pipeline, variables)))
        elif isinstance(node, _IfNode):
            branch = node.then_nodes if _truthy(_eval_pipeline(node.condition, variables)) else node.else_nodes
            _execute(branch, variables, out)


def render_text(body: str, variables: Mapping[str, str] | None = None) -> str:
    """Interpolate ``variables`` into ``body``; return ``body`` on any error."""
    if "{{" not in body:
        return body
    try:
        nodes = _parse(body)
        out: list[str] = []
        _execute(nodes, variables or {}, out)
    except (TemplateSyntaxError, TypeError, ValueError):
        return body
    return "".join(out)


# ---------------------------------------------------------------- inspection


def referenced_variables(bodies: Iterable[str]) -> set[str]:
    """Collect leading-dot identifiers found inside ``{{ }}`` blocks."""
    names: set[str] = set()
    for body in bodies:
        for action in ACTION_RE.finditer(body or ""):
            names.update(FIELD_REF_RE.findall(action.group(1)))
    return names


def find_unused_variables(
    bodies: Iterable[str] | str,
    declared: Iterable[str],
    stored: Mapping[str, str],
) -> set[str]:
    """Return stored variable names neither referenced nor declared."""
    if isinstance(bodies, str):
        bodies = [bodies]
    used = referenced_variables(bodies) | set(declared)
    return {name for name in stored if name not in used}


def format_variable_value(value: str, expanded: bool, max_cols: int = VALUE_PREVIEW_COLS) -> tuple[str, bool]:
    """Return display text for a stored variable and whether it was truncated.

    Collapsed values show only their first line, clipped to ``max_cols``.
    """
    if expanded:
        return value, False
    first_line, newline, _rest = value.partition("\n")
    truncated = bool(newline) or len(first_line) > max_cols
    if not truncated:
        return value, False
    clipped = first_line[: max(1, max_cols - 1)]
    return clipped + ELLIPSIS, True


__all__ = [
    "FUNCTIONS",
    "TemplateSyntaxError",
    "find_unused_variables",
    "format_variable_value",
    "referenced_variables",
    "render_text",
    "slugify",
]
