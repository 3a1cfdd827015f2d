"""Tests for roost.preload.strategies — plain-function preload strategies."""

import pytest

from roost.errors import ConfigurationError
from roost.preload import all_units, flag, metadata_flag, no_units, resolve_strategy
from roost.units import UnitDescriptor


def _unit(**metadata) -> UnitDescriptor:
    return UnitDescriptor(id="u", trigger_key="/u", load=lambda: None, metadata=metadata)


class TestBuiltins:
    def test_all_units(self) -> None:
        assert all_units(_unit()) is True
        assert all_units(_unit(preload=False)) is True

    def test_no_units(self) -> None:
        assert no_units(_unit(preload=True)) is False

    def test_metadata_flag_true(self) -> None:
        assert metadata_flag(_unit(preload=True)) is True

    @pytest.mark.parametrize("value", [False, None, "true", 1])
    def test_metadata_flag_requires_exact_true(self, value: object) -> None:
        assert metadata_flag(_unit(preload=value)) is False

    def test_metadata_flag_missing(self) -> None:
        assert metadata_flag(_unit()) is False

    def test_flag_factory(self) -> None:
        strategy = flag("prefetch")
        assert strategy(_unit(prefetch=True)) is True
        assert strategy(_unit(preload=True)) is False
        assert strategy.__name__ == "flag('prefetch')"


class TestResolveStrategy:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("all", all_units), ("flagged", metadata_flag), ("none", no_units)],
    )
    def test_named(self, name: str, expected: object) -> None:
        assert resolve_strategy(name) is expected

    def test_callable_passes_through(self) -> None:
        def custom(descriptor: UnitDescriptor) -> bool:
            return descriptor.id.startswith("a")

        assert resolve_strategy(custom) is custom

    def test_custom_flag_key(self) -> None:
        strategy = resolve_strategy("flagged", flag_key="prefetch")
        assert strategy(_unit(prefetch=True)) is True
        assert strategy(_unit(preload=True)) is False

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigurationError, match="all, flagged, none"):
            resolve_strategy("sometimes")
