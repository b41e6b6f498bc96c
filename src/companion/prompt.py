"""Prompt composition.

Rules:
- Output is a pure function of (goals, message): same input, same bytes.
- Goals are listed in the order the loader returned them.
- The guideline block, including the crisis-support line, is always present.
- The user message is appended verbatim after the delimiter.
"""
from __future__ import annotations

from typing import Iterable, List

from .types import Goal

PREAMBLE = (
    "You are a compassionate mental health support chatbot. Your role is to:\n"
    "\n"
    "1. Provide emotional support and validation\n"
    "2. Listen empathetically without judgment\n"
    "3. Offer gentle guidance and coping strategies\n"
    "4. Encourage professional help when appropriate\n"
    "5. Maintain a warm, caring tone"
)

GOALS_LEAD_IN = "The user has selected these mental health goals to work on:"

GOALS_TAILORING = (
    "Please tailor your responses to help them with these specific goals, "
    "offering relevant advice and encouragement related to their chosen areas of focus."
)

CRISIS_GUIDELINE = "- If someone mentions self-harm or suicide, immediately encourage them to seek crisis support"

GUIDELINES = (
    "Important guidelines:\n"
    "- Never provide medical advice or diagnosis\n"
    "- Always encourage seeking professional help for serious concerns\n"
    "- Use supportive, non-judgmental language\n"
    "- Validate the person's feelings\n"
    "- Suggest healthy coping mechanisms\n"
    "- Keep responses conversational and not overly clinical\n"
    f"{CRISIS_GUIDELINE}\n"
    "\n"
    "Respond to the following message with empathy and support:"
)

MESSAGE_DELIMITER = "User message: "

def format_goal(goal: Goal) -> str:
    return f"- {goal.name}: {goal.description}"

def _goal_block(goals: List[Goal]) -> str:
    lines = "\n".join(format_goal(g) for g in goals)
    return f"{GOALS_LEAD_IN}\n{lines}\n\n{GOALS_TAILORING}"

def build_instructions(goals: Iterable[Goal]) -> str:
    goals = list(goals or [])
    sections = [PREAMBLE]
    if goals:
        sections.append(_goal_block(goals))
    sections.append(GUIDELINES)
    return "\n\n".join(sections)

def compose_prompt(goals: Iterable[Goal], message: str) -> str:
    return f"{build_instructions(goals)}\n\n{MESSAGE_DELIMITER}{message}"
