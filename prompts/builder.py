"""
Prompt Template Builder

Pure string interpolation over the templates in templates.yaml.
The YAML is read once; every builder below is side-effect free.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from app.core.config import Settings, settings
from memory.types import Message


TEMPLATES_PATH = Path(__file__).with_name("templates.yaml")

DEEP_MODE = "deep"

FEATURES = (
    "quiz",
    "flashcards",
    "essay",
    "summary",
    "translate",
    "reference",
    "hint",
    "resources",
    "document",
)


@lru_cache(maxsize=1)
def load_templates() -> Dict[str, Dict[str, str]]:
    """Load templates.yaml (cached)."""
    with open(TEMPLATES_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _template(feature: str, part: str) -> str:
    return load_templates()[feature][part]


# ============================================================
# CHAT
# ============================================================

def build_system_prompt(subject: str = "General", tone: str = "teaching", config: Settings = settings) -> str:
    """
    Build the tutor system instruction.

    Args:
        subject: Subject the student is working on
        tone: Requested answer tone
        config: Settings carrying product name, version and owner attribution

    Returns:
        System-role instruction text
    """
    return _template("tutor", "system").format(
        product_name=config.product_name,
        app_version=config.app_version,
        owner_name=config.owner_name,
        owner_location=config.owner_location,
        subject=subject or "General",
        tone=tone or "teaching",
    )


def build_user_content(message: str, mode: str = "concise") -> str:
    """Append the step-by-step suffix in deep mode, the brevity suffix otherwise."""
    suffix = "deep_suffix" if mode == DEEP_MODE else "concise_suffix"
    return f"{message}{_template('tutor', suffix)}"


def build_chat_messages(
    history: List[Message],
    message: str,
    subject: str = "General",
    tone: str = "teaching",
    mode: str = "concise",
    config: Settings = settings,
) -> List[Message]:
    """[system prompt] + stored history + [user content]."""
    return [
        Message.system(build_system_prompt(subject, tone, config=config)),
        *history,
        Message.user(build_user_content(message, mode)),
    ]


# ============================================================
# SINGLE-SHOT FEATURES
# ============================================================

def system_prompt_for(feature: str) -> str:
    """Fixed system instruction for a single-purpose template."""
    if feature not in FEATURES:
        raise KeyError(f"Unknown prompt feature: {feature}")
    return _template(feature, "system")


def quiz_prompt(topic: str, count: int = 5, difficulty: str = "medium") -> str:
    return _template("quiz", "user").format(topic=topic, count=count, difficulty=difficulty)


def flashcards_prompt(topic: str, count: int = 10) -> str:
    return _template("flashcards", "user").format(topic=topic, count=count)


def essay_grading_prompt(essay: str, question: Optional[str] = None, level: str = "high school") -> str:
    question_clause = f' written for the question "{question}"' if question else ""
    return _template("essay", "user").format(essay=essay, question_clause=question_clause, level=level)


def summarize_prompt(text: str, length: str = "short") -> str:
    return _template("summary", "user").format(text=text, length=length)


def translate_prompt(text: str, target_language: str, source_language: Optional[str] = None) -> str:
    source_clause = f" from {source_language}" if source_language else ""
    return _template("translate", "user").format(
        text=text,
        target_language=target_language,
        source_clause=source_clause,
    )


def reference_prompt(source: str, style: str = "APA") -> str:
    return _template("reference", "user").format(source=source, style=style)


def hint_prompt(problem: str, subject: str = "General") -> str:
    return _template("hint", "user").format(problem=problem, subject=subject)


def resources_prompt(topic: str, level: str = "beginner") -> str:
    return _template("resources", "user").format(topic=topic, level=level)


def document_summary_prompt(text: str) -> str:
    return _template("document", "user").format(text=text)


def single_shot_messages(feature: str, user_content: str) -> List[Message]:
    """Fixed two-message list for generation features. No history."""
    return [Message.system(system_prompt_for(feature)), Message.user(user_content)]
