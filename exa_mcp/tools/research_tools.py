"""Deep research tools: start a long-running research task and poll it."""

from typing import Optional

from exa_mcp.markdown import normalize_json
from exa_mcp.models import ResearchRequest, ResearchTask
from exa_mcp.observability import RequestLogger
from exa_mcp.tools.base import ToolContext, ToolResponse, error_response
from exa_mcp.tools.catalog import DEEP_RESEARCHER_CHECK, DEEP_RESEARCHER_START


async def research_start(ctx: ToolContext, instructions: str, model: Optional[str] = None) -> ToolResponse:
    """Create a research task and tell the caller how to follow up."""
    request_log = RequestLogger(DEEP_RESEARCHER_START)
    request_log.start(instructions)

    try:
        request = ResearchRequest(instructions=instructions, model=model or "exa-research")
        async with ctx.open_client("deep-research-mcp") as client:
            task = await client.start_research(request)

        request_log.log(f"Started research task {task.research_id}")
        request_log.complete()
        return ToolResponse.success(
            f"## Research task started\n\n"
            f"**Task ID:** `{task.research_id}`  \n"
            f"**Model:** {task.model or request.model}  \n"
            f"**Status:** {task.status}\n\n"
            f"Call `{DEEP_RESEARCHER_CHECK}` with this task ID until the status is "
            f"completed. Research usually takes between 15 seconds and a few minutes."
        )
    except Exception as e:
        request_log.error(e)
        return error_response("Research start", e)


async def research_check(ctx: ToolContext, task_id: str) -> ToolResponse:
    """Report a research task's status, or its report once it has finished."""
    request_log = RequestLogger(DEEP_RESEARCHER_CHECK)
    request_log.start(task_id)

    try:
        async with ctx.open_client("deep-research-mcp") as client:
            task = await client.get_research(task_id)

        request_log.log(f"Research task {task.research_id} is {task.status}")
        text = await _render_task(ctx, task)
        request_log.complete()
        return ToolResponse.success(text)
    except Exception as e:
        request_log.error(e)
        return error_response("Research check", e)


async def _render_task(ctx: ToolContext, task: ResearchTask) -> str:
    if not task.is_finished:
        return (
            f"Research task `{task.research_id}` is {task.status}. "
            f"Wait a few seconds and call `{DEEP_RESEARCHER_CHECK}` again."
        )
    if task.status != "completed":
        reason = f": {task.error}" if task.error else "."
        return f"Research task `{task.research_id}` {task.status}{reason}"

    output = task.output or {}
    content = output.get("content")
    if isinstance(content, str) and content.strip():
        return content
    if output.get("parsed") is not None:
        rendered = await normalize_json(output["parsed"], gateway=ctx.gateway, name=task.research_id)
        return rendered.markdown
    return f"Research task `{task.research_id}` completed without a report."
