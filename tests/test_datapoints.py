"""Tests for the declaration surface in ``src/theories/datapoints.py``.

Covers the ``@theory`` decorator in both forms, data point markers, the
``@datapoint``/``@datapoints`` function decorators and member discovery
order across a class hierarchy.
"""

from __future__ import annotations

import pytest
from theories.datapoints import (
    DataPoint,
    DataPointFunction,
    DataPoints,
    TheoryMarker,
    data_members,
    datapoint,
    datapoints,
    is_theory,
    nulls_ok,
    theory,
    theory_marker,
)


class BaseData:
    SHARED = DataPoint(1)
    OVERRIDDEN = DataPoint("base")


class ChildData(BaseData):
    FIRST = DataPoint(10)
    OVERRIDDEN = DataPoint("child")
    MANY = DataPoints([2, 3])
    not_a_marker = 5

    @datapoint
    def computed() -> int:
        return 7

    @datapoints
    @staticmethod
    def listed() -> list[int]:
        return [8, 9]


# ===========================================================================
# @theory
# ===========================================================================


@pytest.mark.unit
class TestTheoryDecorator:
    """@theory marks functions, bare or with options."""

    def test_bare_form(self) -> None:
        @theory
        def f(self, x: int) -> None:  # noqa: ANN001
            pass

        assert is_theory(f)
        assert theory_marker(f) == TheoryMarker(nulls_accepted=False)
        assert nulls_ok(f) is False

    def test_called_form(self) -> None:
        @theory(nulls_accepted=True)
        def f(self, x: int) -> None:  # noqa: ANN001
            pass

        assert is_theory(f)
        assert nulls_ok(f) is True

    def test_decorator_returns_same_function(self) -> None:
        def f(self) -> None:  # noqa: ANN001
            pass

        assert theory(f) is f

    def test_plain_function_is_not_theory(self) -> None:
        def f(self) -> None:  # noqa: ANN001
            pass

        assert is_theory(f) is False
        assert theory_marker(f) is None
        assert nulls_ok(f) is False


# ===========================================================================
# Markers
# ===========================================================================


@pytest.mark.unit
class TestMarkers:
    """DataPoint, DataPoints and data point functions."""

    def test_datapoint_declared_type(self) -> None:
        assert DataPoint(None, type=str).declared_type is str
        assert DataPoint(3).declared_type is None

    def test_datapoints_materializes_iterable(self) -> None:
        points = DataPoints(x * 2 for x in range(3))
        assert points.values == (0, 2, 4)
        assert list(points) == [0, 2, 4]

    def test_datapoint_function(self) -> None:
        member = vars(ChildData)["computed"]
        assert isinstance(member, DataPointFunction)
        assert member.many is False
        assert member() == 7
        assert member.return_type() is int

    def test_datapoints_unwraps_staticmethod(self) -> None:
        member = vars(ChildData)["listed"]
        assert member.many is True
        assert member() == [8, 9]
        assert member.return_type() == list[int]

    def test_missing_return_annotation(self) -> None:
        @datapoint
        def untyped():  # noqa: ANN202
            return 1

        assert untyped.return_type() is None


# ===========================================================================
# data_members
# ===========================================================================


@pytest.mark.unit
class TestDataMembers:
    """Member discovery order across the class hierarchy."""

    def test_order_and_override(self) -> None:
        names = [name for name, _ in data_members(ChildData)]
        assert names == ["FIRST", "OVERRIDDEN", "MANY", "computed", "listed", "SHARED"]

    def test_most_derived_marker_wins(self) -> None:
        members = dict(data_members(ChildData))
        assert members["OVERRIDDEN"].value == "child"

    def test_plain_attributes_ignored(self) -> None:
        assert "not_a_marker" not in dict(data_members(ChildData))

    def test_class_without_data_points(self) -> None:
        class Empty:
            pass

        assert data_members(Empty) == []
