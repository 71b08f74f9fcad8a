"""Quiz validation errors.

Each carries the message shown to the player; the session only ever
stores that string.
"""


class QuizError(Exception):
    """Base exception for quiz errors."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class MissingCredentialError(QuizError):
    default_message = "Please enter a GitHub token"


class InsufficientOrganizationsError(QuizError):
    default_message = (
        "No organizations found. Make sure you are a member of at least one organization."
    )


class InsufficientMembersError(QuizError):
    default_message = "Organization must have at least 2 members to play the game."


class InsufficientRepositoriesError(QuizError):
    default_message = "No repositories found in this organization."


class NoRepositoriesSelectedError(QuizError):
    default_message = "Please select at least one repository to play the game."


class InsufficientAuthorsError(QuizError):
    """Fewer than two members have attributable commits."""

    def __init__(self, authors_found: int):
        self.authors_found = authors_found
        super().__init__(
            f"Only found commits from {authors_found} member(s). "
            "Need commits from at least 2 different members to play the game."
        )


class UnknownMemberError(QuizError):
    def __init__(self, login: str):
        self.login = login
        super().__init__(f"{login} is not a member of this organization")


class InvalidTransitionError(QuizError):
    """An operation was requested in a phase that does not allow it."""

    pass
