from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class NodeRole(str, Enum):
    START = "start"
    END = "end"
    PROCESS = "process"
    DECISION = "decision"
    GROUP = "group"


# React Flow type names produced by the generator upstream
ROLE_ALIASES: Dict[str, NodeRole] = {
    "input": NodeRole.START,
    "output": NodeRole.END,
    "default": NodeRole.PROCESS,
}


def parse_role(value: Any) -> NodeRole:
    """Map a role tag or React Flow node type onto NodeRole, defaulting to process."""
    if isinstance(value, NodeRole):
        return value
    if value is None:
        return NodeRole.PROCESS
    text = str(value).strip().lower()
    if text in ROLE_ALIASES:
        return ROLE_ALIASES[text]
    try:
        return NodeRole(text)
    except ValueError:
        return NodeRole.PROCESS


class PositionSpec(BaseModel):
    x: float = 0.0
    y: float = 0.0


class SizeSpec(BaseModel):
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class NodeSpec(BaseModel):
    """
    Node descriptor as handed over by the generator.
    Accepts both the flat form and the React Flow form
    ({type, data: {label}, parentId, style: {width, height}}).
    """
    id: str
    role: NodeRole = NodeRole.PROCESS
    position: PositionSpec = Field(default_factory=PositionSpec)
    label: str = ""
    parent_id: Optional[str] = None
    size: Optional[SizeSpec] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if "role" not in data and "type" in data:
            data["role"] = data.pop("type")
        if "role" in data:
            data["role"] = parse_role(data["role"])

        if "label" not in data:
            payload = data.get("data") or {}
            if isinstance(payload, dict) and "label" in payload:
                data["label"] = payload["label"]
        if data.get("label") is None:
            data["label"] = ""
        else:
            data["label"] = str(data["label"])

        if "parent_id" not in data and "parentId" in data:
            data["parent_id"] = data.pop("parentId")

        if data.get("size") is None:
            style = data.get("style") or {}
            source = style if isinstance(style, dict) and "width" in style else data
            if "width" in source and "height" in source:
                data["size"] = {"width": source["width"], "height": source["height"]}

        for key in ("type", "data", "parentId", "style", "width", "height"):
            data.pop(key, None)
        return data


class EdgeSpec(BaseModel):
    id: str
    source: str
    target: str
    label: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "source" not in data and "source_id" in data:
            data["source"] = data.pop("source_id")
        if "target" not in data and "target_id" in data:
            data["target"] = data.pop("target_id")
        if data.get("label") is not None:
            data["label"] = str(data["label"])
        return data


class GraphSpec(BaseModel):
    """Declarative graph: ordered node descriptors and ordered edge descriptors."""
    nodes: List[NodeSpec] = Field(default_factory=list)
    edges: List[EdgeSpec] = Field(default_factory=list)

    def fingerprint(self) -> str:
        """Serialized form used for structural equality between targets."""
        return self.model_dump_json()

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges
