"""Exception hierarchy for Voxe Reader."""


class VoxeError(Exception):
    """Base exception for Voxe Reader."""
    pass


class UserInputError(VoxeError):
    """Request cannot be satisfied with the given input (empty document, bad index)."""
    pass


class NoContentError(UserInputError):
    """No section with readable content was found."""
    pass


class EngineUnavailable(VoxeError):
    """Narration capability is missing in this environment."""
    pass


class EngineError(VoxeError):
    """Speech synthesis failed.

    ``code`` carries the engine's raw error code.
    """

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
