"""Code context tool: snippets and documentation from open source repositories."""

from typing import Optional, Union

from exa_mcp.models import CodeContextRequest
from exa_mcp.observability import RequestLogger
from exa_mcp.tools.base import ToolContext, ToolResponse, error_response
from exa_mcp.tools.catalog import CODE_CONTEXT

NO_CODE_MESSAGE = "No code snippets or documentation found. Please try a different query."


async def code_context(
    ctx: ToolContext,
    query: str,
    tokens_num: Optional[Union[str, int]] = None,
) -> ToolResponse:
    """Fetch code context for a programming question.

    `tokens_num` is "dynamic" (the default) or an int between 1000 and 50000.
    The response is already markdown and is returned untouched.
    """
    request_log = RequestLogger(CODE_CONTEXT)
    request_log.start(query)

    try:
        request = CodeContextRequest(query=query, tokens_num=tokens_num or "dynamic")
        async with ctx.open_client("exa-code-mcp") as client:
            request_log.log("Sending code context request to Exa API")
            response = await client.code_context(request)

        if not response.response.strip():
            request_log.log("Warning: Empty code context response")
            request_log.complete()
            return ToolResponse.success(NO_CODE_MESSAGE)

        request_log.log(f"Received code context ({len(response.response)} chars)")
        request_log.complete()
        return ToolResponse.success(response.response)
    except Exception as e:
        request_log.error(e)
        return error_response("Code search", e)
