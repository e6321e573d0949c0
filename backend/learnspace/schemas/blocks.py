"""
Block editor schemas for LearnSpace.
"""

from typing import Optional, List, Dict, Sequence
from pydantic import BaseModel, Field

from learnspace.execution.blocks import Block, DEFAULT_LANGUAGE, find_template


class BlockIn(BaseModel):
    """
    A block as sent by the editor.

    ``template`` may be left out for palette blocks; it is then looked up by
    ``type`` in the palette of the program's language.
    """
    type: str = Field(..., min_length=1)
    template: Optional[str] = None
    params: Dict[str, str] = {}
    label: Optional[str] = None
    id: Optional[str] = None

    def to_block(self, position: int = 0, language: Optional[str] = DEFAULT_LANGUAGE) -> Block:
        """Build a Block; raises ValueError for unknown types or params missing from the template."""
        block_id = self.id or f"block-{position}"
        if self.template is None:
            try:
                palette = find_template(language, self.type)
            except KeyError as e:
                raise ValueError(e.args[0])
            params = {name: "" for name in palette.params}
            params.update(self.params)
            return Block(
                type=palette.id,
                template=palette.code,
                params=params,
                label=self.label or palette.label,
                id=block_id,
            )

        return Block(
            type=self.type,
            template=self.template,
            params=dict(self.params),
            label=self.label or "",
            id=block_id,
        )


def to_blocks(blocks: Sequence[BlockIn], language: Optional[str] = DEFAULT_LANGUAGE) -> List[Block]:
    return [b.to_block(i, language) for i, b in enumerate(blocks)]


class TranspileRequest(BaseModel):
    language: str = DEFAULT_LANGUAGE
    blocks: List[BlockIn] = []


class TranspileResponse(BaseModel):
    code: str


class BlockTemplateOut(BaseModel):
    id: str
    label: str
    code: str
    params: List[str]
