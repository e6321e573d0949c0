"""
Block-to-source transpiler.

A block is one statement from the visual editor: a source template with
``%name%`` placeholders plus the raw strings the student typed for each
placeholder. ``transpile`` substitutes the values and joins the blocks into
program text. It never fails; unfilled placeholders become ``<name>`` so an
unfinished program stays readable.
"""

import json
import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

PLACEHOLDER_RE = re.compile(r"%(\w+)%")

# Plain decimal, exponent, and 0x/0o/0b literals
NUMERIC_RE = re.compile(
    r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$"
    r"|^0[xX][0-9a-fA-F]+$|^0[oO][0-7]+$|^0[bB][01]+$"
)

PRINT_BLOCK = "log"
PRINT_PARAM = "text"

DEFAULT_LANGUAGE = "javascript"


@dataclass(frozen=True)
class BlockTemplate:
    """An entry in the editor palette."""

    id: str
    label: str
    code: str
    params: Tuple[str, ...]


BLOCK_TEMPLATES: Dict[str, Tuple[BlockTemplate, ...]] = {
    "javascript": (
        BlockTemplate("log", "Print", "console.log(%text%);", ("text",)),
        BlockTemplate("var", "Declare Variable", "let %var% = %value%;", ("var", "value")),
        BlockTemplate("if", "If Statement", "if (%condition%) {\n  %body%\n}", ("condition", "body")),
        BlockTemplate("for", "For Loop", "for (let i = 0; i < %count%; i++) {\n  %body%\n}", ("count", "body")),
        BlockTemplate("function", "Function", "function %name%(%params%) {\n  %body%\n}", ("name", "params", "body")),
        BlockTemplate("return", "Return", "return %value%;", ("value",)),
        BlockTemplate("add", "Add", "%a% + %b%", ("a", "b")),
    ),
    "python": (
        BlockTemplate("log", "Print", "print(%text%)", ("text",)),
        BlockTemplate("var", "Declare Variable", "%var% = %value%", ("var", "value")),
        BlockTemplate("if", "If Statement", "if %condition%:\n    %body%", ("condition", "body")),
        BlockTemplate("for", "For Loop", "for i in range(%count%):\n    %body%", ("count", "body")),
        BlockTemplate("function", "Function", "def %name%(%params%):\n    %body%", ("name", "params", "body")),
        BlockTemplate("return", "Return", "return %value%", ("value",)),
        BlockTemplate("add", "Add", "%a% + %b%", ("a", "b")),
    ),
}


def templates_for(language: Optional[str]) -> Tuple[BlockTemplate, ...]:
    """Palette for a language; unknown languages get the JavaScript palette."""
    return BLOCK_TEMPLATES.get(language or DEFAULT_LANGUAGE, BLOCK_TEMPLATES[DEFAULT_LANGUAGE])


def find_template(language: Optional[str], kind: str) -> BlockTemplate:
    for template in templates_for(language):
        if template.id == kind:
            return template
    raise KeyError(f"Unknown block type '{kind}' for language '{language}'")


def placeholders(template: str) -> Tuple[str, ...]:
    """Placeholder names in order of first appearance."""
    seen: Dict[str, None] = {}
    for name in PLACEHOLDER_RE.findall(template):
        seen.setdefault(name, None)
    return tuple(seen)


def _new_block_id() -> str:
    return f"block-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Block:
    """
    One statement in a block program.

    ``params`` may only name placeholders that occur in ``template``;
    anything else is rejected at construction.
    """

    type: str
    template: str
    params: Dict[str, str] = field(default_factory=dict)
    label: str = ""
    id: str = field(default_factory=_new_block_id)

    def __post_init__(self):
        names = set(placeholders(self.template))
        unknown = [name for name in self.params if name not in names]
        if unknown:
            raise ValueError(
                f"Block '{self.type}' has no placeholder(s) {', '.join(sorted(unknown))} "
                f"in template {self.template!r}"
            )

    @classmethod
    def from_template(cls, language: Optional[str], kind: str, block_id: Optional[str] = None, **params: str) -> "Block":
        template = find_template(language, kind)
        values = {name: "" for name in template.params}
        values.update(params)
        return cls(
            type=template.id,
            template=template.code,
            params=values,
            label=template.label,
            id=block_id or _new_block_id(),
        )

    def resolve(self, name: str) -> str:
        """Text that replaces ``%name%`` in this block's template."""
        return resolve_param(self.type, name, self.params.get(name, ""))

    def render(self) -> str:
        return PLACEHOLDER_RE.sub(lambda m: self.resolve(m.group(1)), self.template)


def is_numeric_literal(text: str) -> bool:
    return bool(NUMERIC_RE.match(text))


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"')


def resolve_param(block_type: str, name: str, value: Optional[str]) -> str:
    """
    Turn a raw parameter value into source text.

    The printed argument of a print block is made into a valid literal:
    empty becomes ``""``, quoted strings and numbers pass through, anything
    else is JSON-quoted. Every other parameter is used verbatim, or ``<name>``
    when empty.
    """
    if block_type == PRINT_BLOCK and name == PRINT_PARAM:
        trimmed = (value or "").strip()
        if not trimmed:
            return '""'
        if _is_quoted(trimmed) or is_numeric_literal(trimmed):
            return trimmed
        return json.dumps(trimmed, ensure_ascii=False)

    return value or f"<{name}>"


def transpile(blocks: Sequence[Block]) -> str:
    """Render each block and join them one per line."""
    return "\n".join(block.render() for block in blocks)


# Workspace editing, mirroring the editor's palette and drag-and-drop actions.
# Each helper returns a new list and leaves its input untouched.

def add_block(blocks: Sequence[Block], language: Optional[str], kind: str) -> List[Block]:
    return [*blocks, Block.from_template(language, kind)]


def remove_block(blocks: Sequence[Block], block_id: str) -> List[Block]:
    return [b for b in blocks if b.id != block_id]


def update_block_param(blocks: Sequence[Block], block_id: str, name: str, value: str) -> List[Block]:
    return [
        replace(b, params={**b.params, name: value}) if b.id == block_id else b
        for b in blocks
    ]


def move_block(blocks: Sequence[Block], block_id: str, direction: str) -> List[Block]:
    """Swap a block with its neighbour; out-of-range moves are no-ops."""
    result = list(blocks)
    index = next((i for i, b in enumerate(result) if b.id == block_id), -1)
    if index == -1:
        return result
    if direction == "up" and index > 0:
        target = index - 1
    elif direction == "down" and index < len(result) - 1:
        target = index + 1
    else:
        return result
    result[index], result[target] = result[target], result[index]
    return result


def reorder_blocks(blocks: Sequence[Block], from_id: str, to_id: str) -> List[Block]:
    """Move the block ``from_id`` into the position held by ``to_id``."""
    result = list(blocks)
    if not from_id or not to_id or from_id == to_id:
        return result
    ids = [b.id for b in result]
    if from_id not in ids or to_id not in ids:
        return result
    from_index, to_index = ids.index(from_id), ids.index(to_id)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result
