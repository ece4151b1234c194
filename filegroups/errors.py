"""Exception taxonomy for group and selection-session operations.

Every condition a caller may want to present precisely derives from
``GroupError`` and carries a stable ``code``. Path-resolution problems are
never raised; they are logged and the offending entry is skipped.
"""

from __future__ import annotations


class GroupError(Exception):
    """Base class for all group/session failures surfaced to callers."""

    code = "GROUP_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GroupNotFoundError(GroupError):
    code = "GROUP_NOT_FOUND"

    def __init__(self, group_id: str) -> None:
        super().__init__(f"Group not found: {group_id}")
        self.group_id = group_id


class GroupNameInvalidError(GroupError):
    code = "GROUP_NAME_INVALID"

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f'Invalid group name "{name}": {reason}')
        self.name = name
        self.reason = reason


class GroupAlreadyExistsError(GroupError):
    code = "GROUP_ALREADY_EXISTS"

    def __init__(self, name: str) -> None:
        super().__init__(f'Group "{name}" already exists')
        self.name = name


class GroupFileLimitError(GroupError):
    code = "GROUP_FILE_LIMIT"

    def __init__(self, group_id: str, count: int, limit: int) -> None:
        super().__init__(f"Group {group_id} would hold {count} files (limit {limit})")
        self.group_id = group_id
        self.count = count
        self.limit = limit


class SessionStateError(GroupError):
    """Illegal selection-session transition or mutation while inactive."""

    code = "SESSION_STATE"


class RemoveAllConfirmationRequired(GroupError):
    """Add-mode confirm with an empty selection needs explicit acknowledgment.

    ``member_count`` is the number of members that would be removed.
    """

    code = "CONFIRM_REMOVE_ALL"

    def __init__(self, group_id: str, member_count: int) -> None:
        super().__init__(
            f"Empty selection would remove all {member_count} file(s) from group {group_id}"
        )
        self.group_id = group_id
        self.member_count = member_count


class RepositoryWriteError(GroupError):
    code = "REPOSITORY_WRITE"

    def __init__(self, group_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to persist membership for group {group_id}: {cause}")
        self.group_id = group_id


__all__ = [
    "GroupError",
    "GroupNotFoundError",
    "GroupNameInvalidError",
    "GroupAlreadyExistsError",
    "GroupFileLimitError",
    "SessionStateError",
    "RemoveAllConfirmationRequired",
    "RepositoryWriteError",
]
