"""
Tool Calling Agent - function-calling loop for the chatbot

This module implements the agent loop that:
1. Sends the conversation and the tool schema to the LLM
2. Executes the tool calls the model requests, one after another
3. Feeds the results back, reminding the model which tools exist
4. Repeats until the model stops requesting tools
5. Asks for a final phrasing of the answer in a fresh, tool-free context

Every failure ends the run with a single FunctionCallingError.
"""

from typing import Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum
import logging

from wizybot.services.ai.llm_client import LLMClient
from wizybot.services.ai.policies import ValidationFailurePolicy
from wizybot.services.tools.executor import ToolExecutor
from wizybot.services.tools.registry import ToolRegistry
from wizybot.services.tools.schema import (
    ParameterSchemaMode,
    ToolArgumentsError,
    ToolCall,
    ToolResult,
)

logger = logging.getLogger(__name__)


class FunctionCallingError(Exception):
    """Terminal failure of a function-calling run"""

    def __init__(self, message: str):
        super().__init__(f"Function calling error: {message}")


class ToolCallBudgetExceededError(Exception):
    """Raised when the model keeps requesting tools past the round budget"""

    def __init__(self, max_rounds: int):
        super().__init__(f"Tool-call budget exceeded after {max_rounds} round(s)")
        self.max_rounds = max_rounds


class MalformedCompletionError(ValueError):
    """Raised when the final completion carries no text"""
    pass


class AgentState(str, Enum):
    """States the agent can be in during execution"""
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AgentContext:
    """Per-run state, discarded when the run ends"""
    user_input: str
    function_list: str
    tools_spec: List[Dict[str, Any]]
    messages: List[Dict[str, Any]] = field(default_factory=list)
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_results: List[ToolResult] = field(default_factory=list)
    rounds: int = 0
    completions: int = 0
    state: AgentState = AgentState.AWAITING_MODEL


@dataclass
class AgentResult:
    response: str
    tool_history: List[Dict[str, Any]]
    rounds: int
    completions: int


class ToolCallingAgent:
    """
    Orchestrates function calling for one registry.

    Usage:
        agent = ToolCallingAgent(llm_client, registry, max_rounds=5)
        result = await agent.run("Convert 100 COP to USD")
        print(result.response)
    """

    MAX_ROUNDS = 5

    def __init__(
        self,
        llm_client: LLMClient,
        registry: ToolRegistry,
        max_rounds: int = MAX_ROUNDS,
        schema_mode: ParameterSchemaMode = ParameterSchemaMode.PER_TOOL,
        on_validation_failure: ValidationFailurePolicy = ValidationFailurePolicy.PROPAGATE
    ):
        self.llm_client = llm_client
        self.registry = registry
        self.max_rounds = max_rounds
        self.schema_mode = ParameterSchemaMode(schema_mode)
        self.on_validation_failure = ValidationFailurePolicy(on_validation_failure)
        self.tool_executor = ToolExecutor(registry)

    async def run(self, user_input: str) -> AgentResult:
        """
        Run the function-calling loop until the model stops requesting tools.

        Raises:
            FunctionCallingError: on any provider, dispatch or tool failure
        """
        context = AgentContext(
            user_input=user_input,
            function_list=self.registry.get_function_list(),
            tools_spec=self.registry.get_openai_tools_spec(self.schema_mode),
        )
        context.messages = self._initial_messages(context)

        try:
            content = await self._run_rounds(context)
            context.state = AgentState.FINALIZING
            response = await self._finalize(context, content)
        except (ToolArgumentsError, MalformedCompletionError) as e:
            if self.on_validation_failure == ValidationFailurePolicy.RETURN_EMPTY:
                logger.warning(f"Invalid model output, returning empty response: {e}")
                response = ""
            else:
                context.state = AgentState.FAILED
                logger.error(f"Function calling failed: {e}")
                raise FunctionCallingError(str(e)) from e
        except Exception as e:
            context.state = AgentState.FAILED
            logger.exception(f"Function calling failed: {e}")
            raise FunctionCallingError(str(e)) from e

        context.state = AgentState.DONE
        return AgentResult(
            response=response,
            tool_history=self._get_tool_history(context),
            rounds=context.rounds,
            completions=context.completions,
        )

    def _initial_messages(self, context: AgentContext) -> List[Dict[str, Any]]:
        return [
            {
                "role": "system",
                "content": (
                    "You are a helpful customer support assistant. "
                    f"Use the following functions: {context.function_list}"
                )
            },
            {
                "role": "user",
                "content": context.user_input
            },
        ]

    async def _run_rounds(self, context: AgentContext) -> str:
        """Alternate model completions and tool rounds; return the last text content."""
        response = await self._complete(context)

        while response.requests_tools:
            if context.rounds >= self.max_rounds:
                raise ToolCallBudgetExceededError(self.max_rounds)

            context.rounds += 1
            context.state = AgentState.EXECUTING_TOOLS
            logger.info(f"Agent round {context.rounds}: {len(response.tool_calls)} tool call(s)")

            context.messages.append(response.to_assistant_message())

            # Sequential on purpose: results must follow the order of the requests
            for tool_call in response.tool_calls:
                context.tool_calls.append(tool_call)
                result = await self.tool_executor.execute(tool_call)
                context.tool_results.append(result)
                context.messages.append(result.to_message())

            context.messages.append({
                "role": "system",
                "content": (
                    "Don't ask the user, always do it if there is a matching function. "
                    f"Function list: {context.function_list}"
                )
            })

            context.state = AgentState.AWAITING_MODEL
            response = await self._complete(context)

        return response.content or ""

    async def _complete(self, context: AgentContext):
        context.completions += 1
        return await self.llm_client.complete(context.messages, tools=context.tools_spec)

    async def _finalize(self, context: AgentContext, content: str) -> str:
        """Phrase the answer from a fresh context without the tool history."""
        final_messages = [
            {"role": "user", "content": context.user_input},
            {
                "role": "system",
                "content": (
                    f'A user asks: "{context.user_input}". The result was: {content}. '
                    "Formulate a final response."
                )
            },
        ]

        context.completions += 1
        final_response = await self.llm_client.complete(final_messages)

        if final_response.content is None:
            raise MalformedCompletionError("Final completion returned no content")

        return final_response.content.strip()

    def _get_tool_history(self, context: AgentContext) -> List[Dict[str, Any]]:
        """Get the history of tool calls and results"""
        return [
            {
                "call": {
                    "id": tc.id,
                    "name": tc.name,
                    "arguments": tr.arguments,
                },
                "result": {
                    "content": tr.content,
                    "execution_time_ms": tr.execution_time_ms,
                },
            }
            for tc, tr in zip(context.tool_calls, context.tool_results)
        ]
