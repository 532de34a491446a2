from __future__ import annotations

import pytest

from dashboard.console.inflight import InFlightCommands


def test_add_remove_contains() -> None:
    registry = InFlightCommands()

    assert registry.add("e1") is True
    assert registry.add("e1") is False
    assert "e1" in registry
    assert len(registry) == 1

    registry.remove("e1")
    registry.remove("e1")

    assert "e1" not in registry
    assert len(registry) == 0


def test_different_ids_are_independent() -> None:
    registry = InFlightCommands()

    assert registry.add("e1")
    assert registry.add("e2")
    assert "e1" in registry and "e2" in registry
    assert len(registry) == 2


def test_claim_releases_on_exception() -> None:
    registry = InFlightCommands()

    with pytest.raises(RuntimeError):
        with registry.claim("e1") as acquired:
            assert acquired
            assert "e1" in registry
            raise RuntimeError("boom")

    assert "e1" not in registry


def test_nested_claim_does_not_release_the_outer_hold() -> None:
    registry = InFlightCommands()

    with registry.claim("e1") as outer:
        with registry.claim("e1") as inner:
            assert outer and not inner
        assert "e1" in registry

    assert "e1" not in registry
