"""
Code execution router for LearnSpace.

``POST /execute`` runs a snippet in the sandbox. Every failure, including a
missing interpreter, is reported as a 400 with ``{"success": false, "error"}``.
"""

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from learnspace.core.rate_limit import default_limiter
from learnspace.execution.sandbox import CodeExecutor, get_executor
from learnspace.schemas.execute import ExecuteRequest, ExecuteResponse


router = APIRouter()


@router.post(
    "",
    response_model=ExecuteResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ExecuteResponse}},
    dependencies=[Depends(default_limiter)]
)
async def execute_code(
    payload: ExecuteRequest,
    executor: CodeExecutor = Depends(get_executor)
):
    """
    Run JavaScript or Python code and return its output.
    """
    result = await run_in_threadpool(executor.execute, payload.code, payload.language, payload.stdin)

    if result.success:
        return result.to_response()
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.to_response())
