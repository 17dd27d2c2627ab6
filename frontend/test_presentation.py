# frontend/test_presentation.py
# Unit tests for the results surface lifecycle

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.models import PresentationState
from frontend.presentation import PresentationController


def test_starts_closed_and_empty():
    controller = PresentationController()
    assert controller.state == PresentationState(visible=False, results=[])


def test_open_shows_results():
    controller = PresentationController()
    controller.open([{"id": 1, "reference": "126610LN"}])

    assert controller.visible is True
    assert controller.results == [{"id": 1, "reference": "126610LN"}]


def test_dismiss_keeps_stale_results():
    controller = PresentationController()
    controller.open([{"id": 1}])

    controller.dismiss()

    assert controller.visible is False
    assert controller.results == [{"id": 1}]


def test_next_open_replaces_results():
    controller = PresentationController()
    controller.open([{"id": 1}])
    controller.dismiss()

    controller.open([])

    assert controller.state == PresentationState(visible=True, results=[])


def test_assign_does_not_change_visibility():
    controller = PresentationController()
    controller.assign([{"id": 2}])
    assert controller.visible is False

    controller.open()
    assert controller.state.results == [{"id": 2}]


def test_state_is_a_copy():
    controller = PresentationController()
    controller.open([{"id": 1}])
    controller.state.results.append({"id": 99})
    assert controller.results == [{"id": 1}]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
