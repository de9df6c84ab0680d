"""
LLM tool-calling agent.

Contains the ToolAgent class that orchestrates a multi-turn conversation
with a locally hosted model (Ollama, through its OpenAI-compatible API).
The agent sends the user's message along with the available tool
definitions, then enters a loop where it:
  1. Asks the model for a response.
  2. If the model requests tool calls, executes them via a callback.
  3. Feeds the tool results back to the model.
  4. Repeats until the model produces a final text answer or the maximum
     number of rounds is reached.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import openai
from openai import AsyncOpenAI

from crisper.app.errors import ModelUnavailableError

logger = logging.getLogger(__name__)

# System prompt that sets the model's behavior and constraints
SYSTEM_PROMPT = """You are the assistant of Crisper, a social platform where people publish posts under topics, reply to posts and like them.
You MUST use the available tools to read or change platform data. Never invent posts, users or replies.
Posting, replying and liking are done on behalf of the signed-in user.
Be concise and respond in the same language the user writes in.
"""

EXHAUSTED_ANSWER = "Could not complete the request within the allowed tool-call rounds."

# Some models print raw <function> tags instead of issuing a tool call
_FUNCTION_TAGS = re.compile(r"<function>.*?</function>", flags=re.DOTALL)


def _final_text(content: Optional[str], trace: List[Dict[str, Any]]) -> str:
    text = _FUNCTION_TAGS.sub("", content or "").strip()
    # Fall back to the last tool result if the answer is empty
    if not text and trace:
        text = trace[-1].get("tool_result", {}).get("result", "")
    return text


class ToolAgent:
    """
    An agent that connects to an OpenAI-compatible model server and can
    execute tools in a multi-round loop until a final answer is produced.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "ollama",
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the agent.

        Args:
            base_url: Root URL of the Ollama server (e.g. http://localhost:11434).
            model:    Name of the model to use.
            api_key:  Placeholder key; Ollama ignores it but the client requires one.
            client:   Pre-built client, mainly for tests.
        """
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=f"{base_url.rstrip('/')}/v1",
        )
        self.model = model

    async def _complete(self, messages: List[Dict[str, Any]], tools: Optional[list] = None):
        kwargs: Dict[str, Any] = {"model": self.model, "messages": messages, "max_tokens": 1024}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        try:
            return await self.client.chat.completions.create(**kwargs)
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            logger.error(f"Model server unreachable: {e}")
            raise ModelUnavailableError("The language model is not reachable") from e

    async def run(
        self,
        user_message: str,
        tools: List[Dict[str, Any]],
        tool_executor: Callable,
        history: Optional[List[Dict[str, str]]] = None,
        max_rounds: int = 5,
    ) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Run the agent loop: send the user message to the model, execute any
        requested tools, and repeat until a final text answer is produced.

        Args:
            user_message:  The user's input text.
            tools:         List of tool definitions (name, description, input_schema).
            tool_executor: Async callable that runs a tool by name and input dict,
                           returning a JSON string with the result.
            history:       Earlier chat turns as {"role", "content"} dicts.
            max_rounds:    Maximum number of model request rounds (default 5).

        Returns:
            A tuple of (final_answer_text, trace) where trace is a list of
            dicts recording every tool call and result.

        Raises:
            ModelUnavailableError: If the model server cannot be reached.
        """

        # Convert tool definitions to the OpenAI function-calling format
        openai_tools = [
            {
                "type": "function",
                "function": {
                    "name": t["name"],
                    "description": t["description"],
                    "parameters": t["input_schema"],
                },
            }
            for t in tools
        ]

        messages: List[Dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend({"role": h["role"], "content": h["content"]} for h in history or [])
        messages.append({"role": "user", "content": user_message})
        trace: List[Dict[str, Any]] = []

        for round_num in range(max_rounds):
            logger.info(f"LLM round {round_num + 1}")

            try:
                resp = await self._complete(messages, openai_tools)
            except openai.BadRequestError as e:
                # The model could not handle the tool request: retry without
                # tools so it can still produce a text response
                logger.warning(f"Tool call failed: {e}. Retrying without tools.")
                resp = await self._complete(messages)
                return _final_text(resp.choices[0].message.content, trace), trace

            msg = resp.choices[0].message
            tool_calls = msg.tool_calls or []

            # No tool calls means the model has produced its final answer
            if not tool_calls:
                return _final_text(msg.content, trace), trace

            messages.append({
                "role": "assistant",
                "content": msg.content or "",
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.function.name,
                            "arguments": tc.function.arguments,
                        },
                    }
                    for tc in tool_calls
                ],
            })

            for tc in tool_calls:
                name = tc.function.name

                # Parse the tool arguments from the JSON string
                try:
                    input_data = json.loads(tc.function.arguments) if tc.function.arguments else {}
                except json.JSONDecodeError:
                    input_data = {}

                logger.info(f"Calling tool: {name} with {input_data}")
                trace.append({"tool_call": {"name": name, "input": input_data}})

                try:
                    result_str = await tool_executor(name, input_data)
                except Exception as e:
                    logger.warning(f"Tool {name} failed: {e}")
                    result_str = json.dumps({"ok": False, "error": str(e)}, ensure_ascii=False)

                trace.append({"tool_result": {"name": name, "result": result_str}})

                # Feed the tool result back to the model for the next round
                messages.append({
                    "role": "tool",
                    "tool_call_id": tc.id,
                    "content": result_str,
                })

        return EXHAUSTED_ANSWER, trace
