"""Drafting workflow: compose a prompt, ask the model for structured
output, and check the answer where it must match known data."""
import logging
from typing import Any, Dict, List, Optional, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from coastboard.schemas.ai import (
    AssigneeSuggestion,
    DailyKeyPoints,
    DeadlineSuggestion,
    EODReport,
    ProjectPlan,
    TaskBreakdown,
    TaskDraft,
)

from . import llm
from .prompts import PROMPTS

logger = logging.getLogger(__name__)

SCHEMAS = {
    "task": TaskDraft,
    "assignee": AssigneeSuggestion,
    "breakdown": TaskBreakdown,
    "deadline": DeadlineSuggestion,
    "key_points": DailyKeyPoints,
    "eod": EODReport,
    "project_plan": ProjectPlan,
}


class DraftState(TypedDict):
    kind: str
    inputs: Dict[str, Any]
    candidates: List[int]
    prompt: str
    result: Any
    error: Optional[str]


def compose_prompt(state: DraftState) -> Dict:
    return {"prompt": PROMPTS[state["kind"]](state["inputs"])}


async def generate(state: DraftState, config: RunnableConfig) -> Dict:
    schema = SCHEMAS[state["kind"]]
    model = config["configurable"]["model"].with_structured_output(schema)
    result = await model.ainvoke(state["prompt"])
    if isinstance(result, dict):
        result = schema.model_validate(result)
    return {"result": result}


def verify_assignee(state: DraftState) -> Dict:
    suggestion = state["result"]
    if suggestion.suggested_member_id not in state["candidates"]:
        logger.warning(
            "Model suggested member %s outside candidates %s",
            suggestion.suggested_member_id,
            state["candidates"],
        )
        return {"error": "AI suggested a member who is not on the team"}
    return {}


def route_result(state: DraftState) -> str:
    return "verify_assignee" if state["kind"] == "assignee" else END


def create_drafting_workflow():
    workflow = StateGraph(DraftState)

    workflow.add_node("compose_prompt", compose_prompt)
    workflow.add_node("generate", generate)
    workflow.add_node("verify_assignee", verify_assignee)

    workflow.set_entry_point("compose_prompt")
    workflow.add_edge("compose_prompt", "generate")
    workflow.add_conditional_edges(
        "generate", route_result, {"verify_assignee": "verify_assignee", END: END}
    )
    workflow.add_edge("verify_assignee", END)

    return workflow.compile()


drafting_app = create_drafting_workflow()


async def run_draft(kind: str, inputs: Dict[str, Any], candidates: Optional[List[int]] = None) -> Dict:
    """Run one drafting request; raises AIUnavailable when no model is configured."""
    model = llm.get_chat_model()
    initial_state = DraftState(
        kind=kind,
        inputs=inputs,
        candidates=candidates or [],
        prompt="",
        result=None,
        error=None,
    )
    return await drafting_app.ainvoke(initial_state, config={"configurable": {"model": model}})
