"""Prompt templates and inventory helpers for Study Companion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


PROMPT_REGISTRY_VERSION = "2025-09-14"


PROMPT_SUMMARY = """Please provide a comprehensive yet concise summary of the following text.
The summary should capture the key points, main arguments, and any important conclusions.
Format the summary using markdown-like syntax for readability:
- Use '##' for main headings and '###' for subheadings.
- Use '*' for bullet points.
- Use '**' around key terms.
- Separate paragraphs with a blank line.
Text to summarize:

---

{source_text}"""

PROMPT_QUIZ = """Based on the following summary and original text, generate a {question_count}-question multiple-choice quiz to test understanding.
For each question, provide exactly 4 options, one correct answer (copied exactly from the options), and a brief explanation for the correct answer.

Summary:
---
{summary_content}
---

Original Content (for context):
---
{original_content}
---"""

PROMPT_NOTES_ANSWER = """You are a helpful study assistant. Your task is to answer the user's question based ONLY on the provided "Summary" and "Original Notes".
Do not use any external knowledge. If the answer cannot be found in the provided texts, say "I cannot find the answer in the provided notes." Be brief and to the point.

User's Question:
---
{question}
---

Summary:
---
{summary_content}
---

Original Notes:
---
{original_content}
---"""

PROMPT_ASSISTANT_CHAT = """You are a helpful assistant. Answer the user's question conversationally and concisely.
Do not hallucinate facts; if unknown, say you don't know.

User's Question:
---
{question}
---"""


@dataclass(frozen=True)
class PromptRecord:
    prompt_id: str
    name: str
    template: str


PROMPT_RECORDS: List[PromptRecord] = [
    PromptRecord("summary", "Lecture summary", PROMPT_SUMMARY),
    PromptRecord("quiz", "Multiple-choice quiz (JSON)", PROMPT_QUIZ),
    PromptRecord("notes_answer", "Answer from notes", PROMPT_NOTES_ANSWER),
    PromptRecord("assistant_chat", "General assistant chat", PROMPT_ASSISTANT_CHAT),
]


def get_prompt_template(prompt_id: str) -> str:
    safe_id = str(prompt_id or "").strip()
    for record in PROMPT_RECORDS:
        if record.prompt_id == safe_id:
            return record.template
    raise KeyError(f"Unknown prompt id: {safe_id}")


def get_prompt_metadata() -> Dict[str, object]:
    return {
        "version": PROMPT_REGISTRY_VERSION,
        "count": len(PROMPT_RECORDS),
        "ids": [record.prompt_id for record in PROMPT_RECORDS],
    }
