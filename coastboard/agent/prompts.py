import json
from typing import Any, Dict


def _team(team) -> str:
    return json.dumps(team, indent=2, default=str)


def task_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project management AI assistant.
    Analyze the following request and generate a structured task.
    Identify subtasks if the request implies multiple steps.
    Infer priority based on words like "asap", "urgent", "whenever".
    Today is {inputs["today"]}.

    Request: "{inputs["input"]}"
    """


def assignee_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project management AI assistant helping a team lead assign work.
    Pick the single best team member for the task below. Weigh their expertise
    against the task and prefer members with fewer open tasks.
    You must choose one of the member ids listed in the team data.

    Task: "{inputs["task_title"]}"
    Details: "{inputs["task_description"]}"

    Team (id, name, expertise, open task count):
    {_team(inputs["team"])}
    """


def breakdown_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project management AI assistant.
    Break the following task into 3 to 8 concrete, ordered subtasks and
    estimate the total effort in hours.

    Task: "{inputs["title"]}"
    Details: "{inputs["description"]}"
    """


def deadline_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project management AI assistant.
    Suggest a realistic deadline for the task below, as an ISO 8601 datetime,
    and rate its difficulty from 1 (trivial) to 10 (very hard).
    Today is {inputs["today"]}. Priority: {inputs["priority"]}.

    Task: "{inputs["title"]}"
    Details: "{inputs["description"]}"
    """


def key_points_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a productivity assistant for {inputs["name"]}.
    From their open tasks below, write 3 to 5 key points for today: what to
    focus on first, what is at risk, and anything overdue. Reference the
    task id when a point is about one task.
    Today is {inputs["today"]}.

    Open tasks:
    {_team(inputs["tasks"])}
    """


def eod_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project management AI assistant writing an end-of-day report
    for the team lead. Summarize the day, then report per member: tasks
    completed, tasks still in progress, highlights and blockers. Finish with
    an overall progress percentage for today's board.
    Date: {inputs["today"]}

    Today's work by member:
    {_team(inputs["members"])}
    """


def project_plan_prompt(inputs: Dict[str, Any]) -> str:
    return f"""
    You are a project planning assistant.
    Draft a phased plan for the project below. Each phase lists concrete
    tasks with priority and estimated hours. Call out the main risks.
    Today is {inputs["today"]}. Deadline: {inputs.get("deadline") or "not set"}.

    Project: "{inputs["name"]}"
    Description: "{inputs["description"]}"
    """


PROMPTS = {
    "task": task_prompt,
    "assignee": assignee_prompt,
    "breakdown": breakdown_prompt,
    "deadline": deadline_prompt,
    "key_points": key_points_prompt,
    "eod": eod_prompt,
    "project_plan": project_plan_prompt,
}
