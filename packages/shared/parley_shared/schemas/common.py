from enum import Enum


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class ItemType(str, Enum):
    MESSAGE = "message"
    TOOL_CALL = "tool_call"
    TOOL_OUTPUT = "tool_output"
    SYSTEM = "system"
    REVIEW = "review"


class ItemRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ItemStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CloneStatus(str, Enum):
    PENDING = "pending"
    CLONING = "cloning"
    READY = "ready"
    FAILED = "failed"
