"""
VISHKAR project context transformation.

Converts the project context a caller sends (``project_summary`` plus the
three-perspective ``final_decisions``) into the shape the StoryCrafter
backend expects: an ordered list of role-tagged consensus messages and a
flat project metadata record.

Input records are read through small dataclasses with named optional
fields. Each ``from_mapping`` constructor owns the key resolution order for
its record (snake_case first, then camelCase), so the set of fields the
transformer looks at is fixed and enumerable.

The transformation is pure: no I/O, no randomness, and the same input
always yields the same messages and metadata.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple


UNTITLED_PROJECT = "Untitled Project"
NOT_SPECIFIED = "Not specified"

SYSTEM_ROLE = "system"
PRODUCT_ROLE = "alex"
TECHNICAL_ROLE = "blake"
PROJECT_ROLE = "casey"

PRODUCT_HEADER = "Product Manager Perspective - MVP Requirements:"
TECHNICAL_HEADER = "Technical Architect Perspective - Architecture & Stack:"
PROJECT_HEADER = "Project Manager Perspective - Timeline & Execution:"

_WORD_START = re.compile(r"\b\w")


def _is_set(value: Any) -> bool:
    """Return True if a field value counts as provided.

    Empty strings, zero, False and None count as absent. Empty objects and
    arrays count as present.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0
    return True


def pick_field(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first set value among ``keys``, in order."""
    for key in keys:
        value = data.get(key)
        if _is_set(value):
            return value
    return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_items(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _text(value: Any) -> str:
    """Render a field value as message text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def field_label(key: str) -> str:
    """Turn a field name into a label: ``mvp_features`` -> ``Mvp Features``."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), key.replace("_", " "))


def milestone_label(key: str) -> str:
    """Turn a milestone key into a label: ``phase_1`` -> ``PHASE 1``."""
    return key.replace("_", " ").upper()


@dataclass(frozen=True)
class ConsensusMessage:
    """A single role-tagged message in the consensus discussion."""

    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ProjectMetadata:
    """Flat project metadata forwarded to the backend.

    Unlike the system message, absent fields stay absent here rather than
    being filled with placeholder text.
    """

    project_name: Any = None
    project_description: Any = None
    target_users: Any = None
    platform: Any = None
    timeline: Any = None
    team_size: Any = None

    def to_dict(self) -> Dict[str, Any]:
        fields = (
            ("project_name", self.project_name),
            ("project_description", self.project_description),
            ("target_users", self.target_users),
            ("platform", self.platform),
            ("timeline", self.timeline),
            ("team_size", self.team_size),
        )
        return {key: value for key, value in fields if value is not None}


@dataclass(frozen=True)
class ProjectSummary:
    """The ``project_summary`` section of a project context."""

    name: Any = None
    description: Any = None
    target_users: Any = None
    platform: Any = None
    timeline: Any = None
    team_size: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectSummary":
        return cls(
            name=pick_field(data, "project_name", "projectName"),
            description=pick_field(data, "project_description", "projectDescription"),
            target_users=pick_field(data, "target_users", "targetUsers"),
            platform=pick_field(data, "platform"),
            timeline=pick_field(data, "timeline"),
            team_size=pick_field(data, "team_size", "teamSize"),
        )

    def to_message(self) -> ConsensusMessage:
        def show(value: Any, default: str) -> str:
            return _text(value) if value is not None else default

        content = (
            f"Project: {show(self.name, UNTITLED_PROJECT)}\n"
            "\n"
            f"{show(self.description, '')}\n"
            "\n"
            f"Target Users: {show(self.target_users, NOT_SPECIFIED)}\n"
            f"Platform: {show(self.platform, NOT_SPECIFIED)}\n"
            f"Timeline: {show(self.timeline, NOT_SPECIFIED)}\n"
            f"Team Size: {show(self.team_size, NOT_SPECIFIED)}"
        )
        return ConsensusMessage(role=SYSTEM_ROLE, content=content)

    def to_metadata(self) -> ProjectMetadata:
        return ProjectMetadata(
            project_name=self.name,
            project_description=self.description,
            target_users=self.target_users,
            platform=self.platform,
            timeline=self.timeline,
            team_size=self.team_size,
        )


@dataclass(frozen=True)
class ProductDecisions:
    """Product manager (alex) decisions."""

    mvp_features: Optional[Tuple[Any, ...]] = None
    target_users: Any = None
    development_approach: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProductDecisions":
        features = pick_field(data, "mvp_features", "mvpFeatures")
        return cls(
            mvp_features=tuple(_as_items(features)) if features is not None else None,
            target_users=pick_field(data, "target_users", "targetUsers"),
            development_approach=pick_field(data, "development_approach", "developmentApproach"),
        )

    def to_message(self) -> ConsensusMessage:
        content = f"{PRODUCT_HEADER}\n\n"
        if self.mvp_features is not None:
            content += "MVP Features:\n"
            for feature in self.mvp_features:
                content += f"- {_text(feature)}\n"
        if self.target_users is not None:
            content += f"\nTarget Users: {_text(self.target_users)}"
        if self.development_approach is not None:
            content += f"\nDevelopment Approach: {_text(self.development_approach)}"
        return ConsensusMessage(role=PRODUCT_ROLE, content=content.strip())


@dataclass(frozen=True)
class TechnicalDecisions:
    """Technical architect (blake) decisions, kept in input order."""

    entries: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TechnicalDecisions":
        return cls(entries=tuple((str(key), value) for key, value in data.items()))

    def to_message(self) -> ConsensusMessage:
        content = f"{TECHNICAL_HEADER}\n\n"
        for key, value in self.entries:
            label = field_label(key)
            if isinstance(value, (list, tuple)):
                content += f"{label}:\n"
                for item in value:
                    content += f"- {_text(item)}\n"
            else:
                content += f"{label}: {_text(value)}\n"
        return ConsensusMessage(role=TECHNICAL_ROLE, content=content.strip())


@dataclass(frozen=True)
class ProjectDecisions:
    """Project manager (casey) decisions."""

    timeline: Any = None
    team: Any = None
    milestones: Any = None
    testing: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectDecisions":
        return cls(
            timeline=pick_field(data, "timeline"),
            team=pick_field(data, "team"),
            milestones=pick_field(data, "milestones"),
            testing=pick_field(data, "testing"),
        )

    def _milestone_lines(self) -> List[str]:
        if isinstance(self.milestones, Mapping):
            return [
                f"- {milestone_label(str(key))}: {_text(value)}"
                for key, value in self.milestones.items()
            ]
        return [f"- {_text(item)}" for item in _as_items(self.milestones)]

    def to_message(self) -> ConsensusMessage:
        content = f"{PROJECT_HEADER}\n\n"
        if self.timeline is not None:
            content += f"Timeline: {_text(self.timeline)}\n"
        if self.team is not None:
            content += f"Team Composition: {_text(self.team)}\n"
        if self.milestones is not None:
            content += "\nMilestones:\n"
            for line in self._milestone_lines():
                content += f"{line}\n"
        if self.testing is not None:
            content += f"\nTesting Strategy: {_text(self.testing)}"
        return ConsensusMessage(role=PROJECT_ROLE, content=content.strip())


@dataclass(frozen=True)
class FinalDecisions:
    """The three fixed perspectives of ``final_decisions``.

    Keys other than ``product``, ``technical`` and ``project`` are ignored.
    """

    product: Optional[ProductDecisions] = None
    technical: Optional[TechnicalDecisions] = None
    project: Optional[ProjectDecisions] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FinalDecisions":
        product = pick_field(data, "product")
        technical = pick_field(data, "technical")
        project = pick_field(data, "project")
        return cls(
            product=ProductDecisions.from_mapping(_as_mapping(product)) if product is not None else None,
            technical=TechnicalDecisions.from_mapping(_as_mapping(technical)) if technical is not None else None,
            project=ProjectDecisions.from_mapping(_as_mapping(project)) if project is not None else None,
        )

    def to_messages(self) -> List[ConsensusMessage]:
        perspectives = (self.product, self.technical, self.project)
        return [p.to_message() for p in perspectives if p is not None]


class TransformedContext(NamedTuple):
    """Backend-shaped project context."""

    messages: List[ConsensusMessage]
    metadata: ProjectMetadata

    def to_payload(self) -> Dict[str, Any]:
        """Return the ``consensus_messages``/``project_metadata`` request body."""
        return {
            "consensus_messages": [m.to_dict() for m in self.messages],
            "project_metadata": self.metadata.to_dict(),
        }


def transform_project_context(project_context: Mapping[str, Any]) -> TransformedContext:
    """
    Transform a VISHKAR project context into StoryCrafter service format.

    Messages are emitted in a fixed order: the system message (when a project
    summary is present), then the product, technical and project
    perspectives, each only when its section is present.
    ``questions_and_answers`` is not part of the backend format and is not
    read.

    Args:
        project_context: Caller-supplied project context

    Returns:
        TransformedContext of (messages, metadata)
    """
    messages: List[ConsensusMessage] = []
    metadata = ProjectMetadata()

    summary_data = pick_field(project_context, "project_summary", "projectSummary")
    if summary_data is not None:
        summary = ProjectSummary.from_mapping(_as_mapping(summary_data))
        messages.append(summary.to_message())
        metadata = summary.to_metadata()

    decisions_data = pick_field(project_context, "final_decisions", "finalDecisions")
    if decisions_data is not None:
        decisions = FinalDecisions.from_mapping(_as_mapping(decisions_data))
        messages.extend(decisions.to_messages())

    return TransformedContext(messages=messages, metadata=metadata)
