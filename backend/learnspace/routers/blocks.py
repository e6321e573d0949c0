"""
Block editor router for LearnSpace.

Serves the block palette and turns a block program into source text.
"""

from typing import List, Optional
from fastapi import APIRouter, HTTPException, status

from learnspace.execution.blocks import templates_for, transpile
from learnspace.schemas.blocks import BlockTemplateOut, TranspileRequest, TranspileResponse, to_blocks


router = APIRouter()


@router.get("/templates", response_model=List[BlockTemplateOut])
async def list_block_templates(language: Optional[str] = "javascript") -> List[BlockTemplateOut]:
    """
    Block palette for a language. Unknown languages get the JavaScript palette.
    """
    return [
        BlockTemplateOut(id=t.id, label=t.label, code=t.code, params=list(t.params))
        for t in templates_for(language)
    ]


@router.post("/transpile", response_model=TranspileResponse)
async def transpile_blocks(request: TranspileRequest) -> TranspileResponse:
    """
    Turn a block program into source text. Blocks sent without a template
    take it from the palette of the requested language.
    """
    try:
        blocks = to_blocks(request.blocks, request.language)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TranspileResponse(code=transpile(blocks))
