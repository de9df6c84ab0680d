"""
Write tools the agent runs on behalf of the signed-in user.

These are not exposed on the MCP server: they need the caller's identity,
which only the authenticated /api/agent route knows.
"""

from typing import Any, Dict

from crisper.app.models import Post, Reply, dump
from crisper.services import likes as like_service
from crisper.services import posts as post_service
from crisper.services import replies as reply_service

USER_TOOLS = [
    {
        "name": "create_post",
        "description": "Publish a new post as the signed-in user.",
        "input_schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Post title"},
                "content": {"type": "string", "description": "Post body"},
                "topics": {"type": "string", "description": "Optional topic name"},
            },
            "required": ["title", "content"],
        },
    },
    {
        "name": "reply_to_post",
        "description": "Leave a reply on a post as the signed-in user.",
        "input_schema": {
            "type": "object",
            "properties": {
                "post_id": {"type": "integer", "description": "Id of the post"},
                "content": {"type": "string", "description": "Reply text"},
            },
            "required": ["post_id", "content"],
        },
    },
    {
        "name": "set_post_like",
        "description": "Like (liked=true) or unlike (liked=false) a post as the signed-in user.",
        "input_schema": {
            "type": "object",
            "properties": {
                "post_id": {"type": "integer", "description": "Id of the post"},
                "liked": {"type": "boolean", "description": "Desired like state"},
            },
            "required": ["post_id", "liked"],
        },
    },
]

USER_TOOL_NAMES = {t["name"] for t in USER_TOOLS}


async def run_user_tool(user_id: int, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute one of the USER_TOOLS as the given user.

    Args:
        user_id: The authenticated caller.
        name:    Tool name from USER_TOOLS.
        args:    Arguments produced by the model.

    Returns:
        dict: {"ok": True, ...} with the created/changed object.

    Raises:
        ValueError: If the tool name is unknown.
        KeyError:   If a required argument is missing.
    """
    if name == "create_post":
        post = await post_service.create_post(
            user_id,
            title=str(args["title"]),
            content=str(args["content"]),
            topics=args.get("topics") or None,
        )
        return {"ok": True, "post": dump(Post, post)}

    if name == "reply_to_post":
        reply = await reply_service.create_reply(
            user_id, int(args["post_id"]), str(args["content"])
        )
        return {"ok": True, "reply": dump(Reply, reply)}

    if name == "set_post_like":
        result = await like_service.set_like(user_id, int(args["post_id"]), bool(args["liked"]))
        return {"ok": True, **result}

    raise ValueError(f"Unknown tool: {name}")
