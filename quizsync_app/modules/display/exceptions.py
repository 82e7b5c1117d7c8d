from quizsync_app.core.error_handlers import QuizSyncError


class DisplaySyncError(QuizSyncError):
    """
    Base exception for the display module.

    These are built and logged where the condition is detected; the engine
    absorbs them and never lets them reach the rendering layer.
    """

    def __init__(self, message: str, code: str = 'DISPLAY_SYNC_ERROR', index: int = None):
        self.index = index
        super().__init__(message, code=code, status_code=409, details={'index': index} if index is not None else None)


class StaleGenerationError(DisplaySyncError):
    """A result arrived tagged with a superseded generation token."""

    def __init__(self, index: int, token: int, current: int):
        self.token = token
        self.current = current
        super().__init__(
            f"Stale explanation for Q{index + 1} (token={token}, current={current})",
            code='STALE_GENERATION',
            index=index,
        )


class IndexMismatchError(DisplaySyncError):
    """An explanation targets an index other than the active one."""

    def __init__(self, index: int, active: int):
        self.active = active
        super().__init__(
            f"Explanation for Q{index + 1} does not match active Q{(active if active is not None else -1) + 1}",
            code='INDEX_MISMATCH',
            index=index,
        )


class MissingExplanationError(DisplaySyncError):
    """No explanation data exists for an index."""

    def __init__(self, index: int):
        super().__init__(
            f"No explanation data for Q{index + 1}",
            code='MISSING_EXPLANATION',
            index=index,
        )


class EmptyUpstreamError(DisplaySyncError):
    """The question text source produced blank text."""

    def __init__(self, index: int):
        super().__init__(
            f"Blank question text for Q{index + 1}",
            code='EMPTY_UPSTREAM',
            index=index,
        )
