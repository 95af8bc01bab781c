"""JSON Schemas and descriptors for the StoryCrafter tools."""

from typing import Any, Dict, List


PROJECT_CONTEXT_SCHEMA = {
    "type": "object",
    "description": "VISHKAR project context including project_summary and final_decisions",
    "properties": {
        "project_summary": {"type": "object"},
        "final_decisions": {"type": "object"},
        "questions_and_answers": {"type": "array"},
    },
    "required": ["project_summary", "final_decisions"],
}

EPIC_SCHEMA = {
    "type": "object",
    "description": "Epic object (must include id, title, description)",
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "priority": {"type": "string"},
        "category": {"type": "string"},
    },
    "required": ["id", "title", "description"],
}

STORY_SCHEMA = {
    "type": "object",
    "description": "User story object to regenerate (must include id, title, description)",
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "priority": {"type": "string"},
        "estimate_hours": {"type": "number"},
    },
    "required": ["id", "title", "description"],
}

USER_FEEDBACK_SCHEMA = {
    "type": "string",
    "description": "User comments on what needs to be changed or improved",
}

GENERATE_EPICS_SCHEMA = {
    "type": "object",
    "properties": {
        "project_context": PROJECT_CONTEXT_SCHEMA,
    },
    "required": ["project_context"],
}

GENERATE_STORIES_SCHEMA = {
    "type": "object",
    "properties": {
        "project_context": PROJECT_CONTEXT_SCHEMA,
        "epics": {
            "type": "array",
            "description": "Array of epic objects from generate_epics output",
            "items": {"type": "object"},
        },
    },
    "required": ["project_context", "epics"],
}

REGENERATE_EPIC_SCHEMA = {
    "type": "object",
    "properties": {
        "project_context": PROJECT_CONTEXT_SCHEMA,
        "epic": EPIC_SCHEMA,
        "user_feedback": USER_FEEDBACK_SCHEMA,
    },
    "required": ["project_context", "epic", "user_feedback"],
}

REGENERATE_STORY_SCHEMA = {
    "type": "object",
    "properties": {
        "project_context": PROJECT_CONTEXT_SCHEMA,
        "epic": {**EPIC_SCHEMA, "description": "The parent epic object (for context)"},
        "story": STORY_SCHEMA,
        "user_feedback": USER_FEEDBACK_SCHEMA,
    },
    "required": ["project_context", "epic", "story", "user_feedback"],
}

TOOL_DESCRIPTORS: List[Dict[str, Any]] = [
    {
        "name": "generate_epics",
        "description": (
            "FAST (15-20 seconds): Generate 5-8 high-level Epics from VISHKAR "
            "project context. Returns epic structure with titles, descriptions, "
            "and acceptance criteria. Use this first to get a quick epic overview."
        ),
        "inputSchema": GENERATE_EPICS_SCHEMA,
    },
    {
        "name": "generate_stories",
        "description": (
            "DETAILED (3-5 minutes): Generate detailed User Stories for epics "
            "from generate_epics. Returns stories with acceptance criteria, "
            "technical tasks, and estimates."
        ),
        "inputSchema": GENERATE_STORIES_SCHEMA,
    },
    {
        "name": "regenerate_epic",
        "description": (
            "REGENERATE EPIC (20-30 seconds): Regenerate a single epic based on "
            "user feedback, producing an improved version that incorporates "
            "their comments."
        ),
        "inputSchema": REGENERATE_EPIC_SCHEMA,
    },
    {
        "name": "regenerate_story",
        "description": (
            "REGENERATE STORY (1-2 minutes): Regenerate a single user story based "
            "on user feedback, with better acceptance criteria and technical tasks."
        ),
        "inputSchema": REGENERATE_STORY_SCHEMA,
    },
]

TOOL_NAMES = [tool["name"] for tool in TOOL_DESCRIPTORS]
