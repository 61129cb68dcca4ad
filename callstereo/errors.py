"""Error taxonomy for conversation reconstruction."""

from __future__ import annotations


class CallStereoError(Exception):
    """Base class for callstereo failures."""


class InputRootError(CallStereoError):
    """Raised when the input root is missing or holds no conversations."""


class ConversationError(CallStereoError):
    """Failure scoped to one conversation directory."""

    def __init__(self, message: str, *, conversation_id: str | None = None) -> None:
        super().__init__(message)
        self.conversation_id = conversation_id


class IncompleteConversation(ConversationError):
    """Conversation lacks turns for one or both parties and is skipped."""


class DurationUnavailable(ConversationError):
    """Duration probe failed or returned an unusable value for a clip."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        conversation_id: str | None = None,
    ) -> None:
        super().__init__(message, conversation_id=conversation_id)
        self.source = source


class MergeExecutionFailed(ConversationError):
    """External merge step exited abnormally or timed out."""

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        conversation_id: str | None = None,
    ) -> None:
        super().__init__(message, conversation_id=conversation_id)
        self.stderr = stderr
