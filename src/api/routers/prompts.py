"""Practice prompt catalogue."""

from __future__ import annotations

from fastapi import APIRouter, Query

from ..errors import CrispError
from ..schemas import PromptListResponse, PromptSchema
from ..services.prompts import list_prompts, random_prompt

router = APIRouter(prefix="/v1", tags=["prompts"])


@router.get("/prompts", response_model=PromptListResponse)
async def get_prompts(category: str | None = Query(None)):
    prompts = [PromptSchema.model_validate(p) for p in list_prompts(category)]
    return PromptListResponse(count=len(prompts), prompts=prompts)


@router.get("/prompts/random", response_model=PromptSchema)
async def get_random_prompt(
    category: str | None = Query(None),
    exclude: str | None = Query(None),
):
    try:
        prompt = random_prompt(exclude_id=exclude, category=category)
    except LookupError as exc:
        raise CrispError(str(exc), code="PROMPT_NOT_FOUND", status_code=404) from exc
    return PromptSchema.model_validate(prompt)
