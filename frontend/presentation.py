"""Open/closed lifecycle of the search results surface."""

from __future__ import annotations

from typing import List, Optional

try:
    from frontend.models import PresentationState, ResultRecord
except ModuleNotFoundError:
    from models import PresentationState, ResultRecord


class PresentationController:
    """
    Owns what the results surface shows.

    Only the search engine opens it; only the user dismisses it. Results are
    handed to the renderer as-is (no paging, sorting or filtering here).
    """

    def __init__(self) -> None:
        self._visible = False
        self._results: List[ResultRecord] = []

    @property
    def state(self) -> PresentationState:
        return PresentationState(visible=self._visible, results=list(self._results))

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def results(self) -> List[ResultRecord]:
        return list(self._results)

    def assign(self, results: Optional[List[ResultRecord]]) -> None:
        """Replace the result set without changing visibility."""
        self._results = list(results or [])

    def open(self, results: Optional[List[ResultRecord]] = None) -> None:
        if results is not None:
            self.assign(results)
        self._visible = True

    def dismiss(self) -> None:
        # results stay until the next open()
        self._visible = False
