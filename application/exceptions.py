"""Application-level exceptions."""


class TrainingHistoryError(Exception):
    """Training history could not be loaded from the repository."""

    def __init__(self, message: str, user_id: str = ""):
        super().__init__(message)
        self.user_id = user_id
