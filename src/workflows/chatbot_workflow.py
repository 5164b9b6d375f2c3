import logging
from typing import Any, Dict, List
from clients.gpt_client import GPTClient
from langgraph.graph import StateGraph, START, END
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage
from models.models import ChatState
from utils.constants import ASSISTANT_EMPTY_REPLY, ASSISTANT_FAILURE_MESSAGE
from workflows.workflow import Workflow
from langchain_core.runnables import RunnableConfig

logger = logging.getLogger(__name__)


class ChatbotWorkflow(Workflow):
    """
    Single-turn civic assistant: the conversation so far in, one reply out.
    """

    def __init__(self, gpt_client: GPTClient, prompts: Dict[str, str]):
        self.gpt_client = gpt_client
        self.prompts = prompts
        self.prompt_template = self._initialize_prompt_template()
        self.graph = self._build_graph()
        self.graph_compiled = self.graph.compile()

    def _initialize_prompt_template(self):
        return ChatPromptTemplate.from_messages(
            [SystemMessage(content=self.prompts["system_prompt"])]
        )

    def agent_node(self, state: ChatState):
        history = state["messages"]
        system_message = self.prompt_template.format_messages()
        history_wo_system = [m for m in history if not isinstance(m, SystemMessage)]
        response = self.gpt_client.instance().invoke(system_message + history_wo_system)
        return {"messages": [response]}

    def _build_graph(self):
        graph = StateGraph(ChatState)
        graph.add_node("agent", self.agent_node)
        graph.add_edge(START, "agent")
        graph.add_edge("agent", END)
        return graph

    def _coerce_input(self, input: Any) -> ChatState:
        """
        Validate and coerce the input to ChatState.

        Args:
            input (Any): The input to the workflow.

        Returns:
            ChatState: The validated chat state.

        Raises:
            ValueError: If input is invalid.
        """
        if not isinstance(input, dict):
            raise ValueError("Input must be a dict")
        messages = input.get("messages")
        if not isinstance(messages, list) or not messages:
            raise ValueError("Input must contain a non-empty 'messages' list")
        return ChatState(messages=messages)

    def run(self, input: Dict[str, List[BaseMessage]]) -> Dict:
        """
        Run the assistant over the provided conversation.

        Args:
            input (Dict): {"messages": [...]} with the conversation history.

        Returns:
            Dict: The final graph state; the reply is the last message.
        """
        state = self._coerce_input(input)
        return self.graph_compiled.invoke(state, RunnableConfig(recursion_limit=5))

    def exchange(self, messages: List[BaseMessage]) -> BaseMessage:
        """Reply to the latest message; failures become a synthetic reply."""
        try:
            reply = self.run({"messages": messages})["messages"][-1]
        except Exception as e:
            logger.error("Assistant request failed: %s", e)
            return AIMessage(content=ASSISTANT_FAILURE_MESSAGE)
        if not str(reply.content or "").strip():
            return AIMessage(content=ASSISTANT_EMPTY_REPLY)
        return reply
