"""Tests for the tool-calling agent and the /api/agent route."""

from __future__ import annotations

import asyncio
import copy
import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from crisper.agent.actions import USER_TOOLS, run_user_tool
from crisper.agent.llm import EXHAUSTED_ANSWER, SYSTEM_PROMPT, ToolAgent
from crisper.app.errors import ModelUnavailableError

REQUEST = httpx.Request("POST", "http://ollama.test/v1/chat/completions")


def answer(text):
    message = SimpleNamespace(content=text, tool_calls=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_call(name, args, call_id="call_1"):
    call = SimpleNamespace(
        id=call_id,
        function=SimpleNamespace(name=name, arguments=json.dumps(args)),
    )
    message = SimpleNamespace(content=None, tool_calls=[call])
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletions:
    """Replays canned responses and records every request."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(copy.deepcopy(kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def fake_agent(*responses):
    completions = FakeCompletions(responses)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return ToolAgent("http://ollama.test", "test-model", client=client), completions


TOOLS = [
    {
        "name": "health",
        "description": "Health check",
        "input_schema": {"type": "object", "properties": {}, "required": []},
    }
]


async def echo_executor(name, input_data):
    return json.dumps({"ok": True, "tool": name, "input": input_data})


class TestToolAgent:
    def test_direct_answer(self):
        agent, completions = fake_agent(answer("Hello!"))
        text, trace = asyncio.run(agent.run("hi", TOOLS, echo_executor))

        assert text == "Hello!"
        assert trace == []
        request = completions.calls[0]
        assert request["model"] == "test-model"
        assert request["tool_choice"] == "auto"
        assert request["tools"][0]["function"]["name"] == "health"
        assert request["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert request["messages"][-1] == {"role": "user", "content": "hi"}

    def test_history_is_forwarded(self):
        agent, completions = fake_agent(answer("Sure"))
        history = [
            {"role": "user", "content": "earlier"},
            {"role": "assistant", "content": "reply"},
        ]
        asyncio.run(agent.run("now", TOOLS, echo_executor, history=history))
        roles = [m["role"] for m in completions.calls[0]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]

    def test_tool_round(self):
        agent, completions = fake_agent(tool_call("health", {"verbose": True}), answer("All good"))
        text, trace = asyncio.run(agent.run("status?", TOOLS, echo_executor))

        assert text == "All good"
        assert trace[0] == {"tool_call": {"name": "health", "input": {"verbose": True}}}
        assert json.loads(trace[1]["tool_result"]["result"])["tool"] == "health"

        second = completions.calls[1]["messages"]
        assert second[-2]["role"] == "assistant"
        assert second[-2]["tool_calls"][0]["id"] == "call_1"
        assert second[-1]["role"] == "tool"
        assert second[-1]["tool_call_id"] == "call_1"

    def test_failing_tool_is_reported_to_model(self):
        async def broken(name, input_data):
            raise RuntimeError("boom")

        agent, completions = fake_agent(tool_call("health", {}), answer("Sorry"))
        text, trace = asyncio.run(agent.run("status?", TOOLS, broken))

        assert text == "Sorry"
        assert json.loads(trace[1]["tool_result"]["result"]) == {"ok": False, "error": "boom"}

    def test_round_limit(self):
        agent, _ = fake_agent(
            tool_call("health", {}, "a"),
            tool_call("health", {}, "b"),
            answer("never reached"),
        )
        text, trace = asyncio.run(agent.run("loop", TOOLS, echo_executor, max_rounds=2))
        assert text == EXHAUSTED_ANSWER
        assert len(trace) == 4

    def test_function_tags_fall_back_to_tool_result(self):
        agent, _ = fake_agent(
            tool_call("health", {}),
            answer('<function>{"name": "health"}</function>'),
        )
        text, trace = asyncio.run(agent.run("status?", TOOLS, echo_executor))
        assert text == trace[-1]["tool_result"]["result"]

    def test_bad_request_retries_without_tools(self):
        error = openai.BadRequestError(
            "tools not supported",
            response=httpx.Response(400, request=REQUEST),
            body=None,
        )
        agent, completions = fake_agent(error, answer("Plain answer"))
        text, trace = asyncio.run(agent.run("hi", TOOLS, echo_executor))

        assert text == "Plain answer"
        assert trace == []
        assert "tools" in completions.calls[0]
        assert "tools" not in completions.calls[1]

    def test_unreachable_model(self):
        agent, _ = fake_agent(openai.APIConnectionError(request=REQUEST))
        with pytest.raises(ModelUnavailableError):
            asyncio.run(agent.run("hi", TOOLS, echo_executor))

    def test_default_client_targets_openai_compatible_path(self):
        agent = ToolAgent("http://localhost:11434/", "llama3.1")
        assert str(agent.client.base_url).rstrip("/") == "http://localhost:11434/v1"


class TestUserTools:
    def test_definitions(self):
        assert [t["name"] for t in USER_TOOLS] == ["create_post", "reply_to_post", "set_post_like"]

    def test_unknown_tool(self, db):
        with pytest.raises(ValueError):
            asyncio.run(run_user_tool(1, "drop_tables", {}))

    def test_missing_argument(self, db):
        with pytest.raises(KeyError):
            asyncio.run(run_user_tool(1, "create_post", {"title": "No body"}))


class TestAgentRoute:
    def test_requires_token(self, client):
        resp = client.post("/api/agent", json={"message": "hi"})
        assert resp.status_code == 401

    def test_empty_message(self, client, alice):
        _, headers = alice
        resp = client.post("/api/agent", json={"message": "   "}, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"message": "message is empty"}

    def test_reads_and_writes_through_tools(self, client, alice):
        user_id, headers = alice
        agent, completions = fake_agent(
            tool_call("get_all_posts", {}, "c1"),
            tool_call("create_post", {"title": "From the agent", "content": "Hi all"}, "c2"),
            answer("Posted it for you."),
        )
        client.app.state.agent = agent

        resp = client.post(
            "/api/agent",
            json={
                "message": "Post a greeting",
                "history": [{"role": "assistant", "content": "How can I help?"}],
            },
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["answer"] == "Posted it for you."
        assert [list(step)[0] for step in body["trace"]] == [
            "tool_call",
            "tool_result",
            "tool_call",
            "tool_result",
        ]
        assert json.loads(body["trace"][1]["tool_result"]["result"]) == {"ok": True, "posts": []}

        offered = {t["function"]["name"] for t in completions.calls[0]["tools"]}
        assert {"get_all_posts", "list_users", "create_post", "set_post_like"} <= offered

        posts = client.get("/api/posts").json()
        assert len(posts) == 1
        assert posts[0]["title"] == "From the agent"
        assert posts[0]["creator"] == user_id

    def test_tool_errors_do_not_break_the_turn(self, client, alice):
        _, headers = alice
        agent, _ = fake_agent(
            tool_call("reply_to_post", {"post_id": 999, "content": "hello"}),
            answer("That post does not exist."),
        )
        client.app.state.agent = agent

        resp = client.post("/api/agent", json={"message": "reply to 999"}, headers=headers)
        assert resp.status_code == 200
        result = json.loads(resp.json()["trace"][1]["tool_result"]["result"])
        assert result["ok"] is False
        assert "postId" in result["error"]

    def test_model_unreachable(self, client, alice):
        _, headers = alice
        agent, _ = fake_agent(openai.APIConnectionError(request=REQUEST))
        client.app.state.agent = agent

        resp = client.post("/api/agent", json={"message": "hi"}, headers=headers)
        assert resp.status_code == 503
        assert resp.json() == {"message": "The language model is not reachable"}
