"""
Agent bridge route.

When a signed-in user sends a chat message, the route:
  1. Opens an in-process MCP client session on the backend's own MCP server.
  2. Passes the message, the MCP tool definitions and the user-bound write
     tools to the ToolAgent.
  3. Lets the model call tools and reason over the results.
  4. Returns the final answer along with a trace of tool calls.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from crisper.agent.actions import USER_TOOL_NAMES, USER_TOOLS, run_user_tool
from crisper.agent.llm import ToolAgent
from crisper.agent.mcp_client import make_client, tool_definitions
from crisper.app.config import settings
from crisper.app.mcp_app import mcp
from crisper.app.models import AgentIn, AgentOut
from crisper.routes.deps import current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent", tags=["Agent"])


def _to_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)


@router.post("", response_model=AgentOut, summary="Chat with the Crisper agent")
async def chat(
    payload: AgentIn,
    request: Request,
    user_id: int = Depends(current_user_id),
):
    """
    Run the tool-calling agent for one chat turn.

    Raises:
        HTTPException 400: If the message is empty.
        503: If the model server cannot be reached.
    """
    if not payload.message.strip():
        raise HTTPException(status_code=400, detail="message is empty")

    agent: ToolAgent = request.app.state.agent

    # Open a fresh MCP client session for this request
    client = make_client(mcp)

    async with client:
        tools = tool_definitions(await client.list_tools()) + USER_TOOLS

        async def execute_tool(name: str, input_data: Dict[str, Any]) -> str:
            """Run a tool (as the caller for write tools) and return its result as JSON."""
            if name in USER_TOOL_NAMES:
                return _to_json(await run_user_tool(user_id, name, input_data or {}))

            res = await client.call_tool(name, input_data or {})
            if res.data is None:
                return "\n".join(getattr(c, "text", "") for c in res.content)
            try:
                return _to_json(res.data)
            except (TypeError, ValueError):
                return str(res)

        answer, trace = await agent.run(
            user_message=payload.message,
            tools=tools,
            tool_executor=execute_tool,
            history=[turn.model_dump() for turn in payload.history],
            max_rounds=settings.AGENT_MAX_ROUNDS,
        )

    logger.info(f"Agent answered user {user_id} after {len(trace) // 2} tool call(s)")
    return AgentOut(answer=answer, trace=trace)
