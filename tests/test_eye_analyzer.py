"""EyeAnalyzer 单元测试"""

import math

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from detectors.eye_analyzer import (
    MIN_RATIO,
    EyeAnalyzer,
    calculate_ratio,
    classify_eye,
    combine,
)
from models.data_models import EyeQuad, EyeResult, FrameSignal, Landmark


def _quad(outer, upper, inner, lower):
    return EyeQuad(
        outer_corner=Landmark(*outer),
        upper_lid=Landmark(*upper),
        inner_corner=Landmark(*inner),
        lower_lid=Landmark(*lower),
    )


def _closed_quad():
    """水平 0.10、垂直 0.01，比值 0.10"""
    return _quad((0.30, 0.50), (0.35, 0.495), (0.40, 0.50), (0.35, 0.505))


def _open_quad():
    """水平 0.10、垂直 0.03，比值 0.30"""
    return _quad((0.30, 0.50), (0.35, 0.485), (0.40, 0.50), (0.35, 0.515))


def _degenerate_quad():
    return _quad((0.30, 0.50), (0.35, 0.49), (0.30, 0.50), (0.35, 0.51))


_coord = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
_point = st.tuples(_coord, _coord)


class TestCalculateRatio:
    """测试 calculate_ratio()"""

    def test_closed_example(self):
        assert calculate_ratio(_closed_quad()) == pytest.approx(0.10)

    def test_open_example(self):
        assert calculate_ratio(_open_quad()) == pytest.approx(0.30)

    def test_zero_horizontal_returns_none(self):
        assert calculate_ratio(_degenerate_quad()) is None

    def test_zero_vertical_is_zero(self):
        quad = _quad((0.3, 0.5), (0.35, 0.5), (0.4, 0.5), (0.35, 0.5))
        assert calculate_ratio(quad) == 0.0

    def test_diagonal_eye(self):
        """倾斜的眼睛同样使用欧氏距离"""
        quad = _quad((0.0, 0.0), (0.0, 0.0), (0.3, 0.4), (0.03, 0.04))
        assert calculate_ratio(quad) == pytest.approx(0.1)

    @given(outer=_point, upper=_point, inner=_point, lower=_point)
    def test_ratio_non_negative(self, outer, upper, inner, lower):
        ratio = calculate_ratio(_quad(outer, upper, inner, lower))
        assert ratio is None or ratio >= 0.0

    @given(
        outer=_point, upper=_point, inner=_point, lower=_point,
        scale=st.floats(min_value=0.1, max_value=1.0),
    )
    def test_ratio_scale_invariant(self, outer, upper, inner, lower, scale):
        assume(math.dist(outer, inner) > 1e-3)

        def scaled(p):
            return (p[0] * scale, p[1] * scale)

        original = calculate_ratio(_quad(outer, upper, inner, lower))
        rescaled = calculate_ratio(_quad(scaled(outer), scaled(upper), scaled(inner), scaled(lower)))
        assert rescaled == pytest.approx(original, rel=1e-6, abs=1e-9)

    @given(outer=_point, upper=_point, inner=_point, lower=_point)
    def test_idempotent(self, outer, upper, inner, lower):
        quad = _quad(outer, upper, inner, lower)
        assert calculate_ratio(quad) == calculate_ratio(quad)


class TestClassifyEye:
    """测试 classify_eye()"""

    def test_closed_eye(self):
        result = classify_eye(_closed_quad())
        assert result.is_closed is True
        assert result.ratio == pytest.approx(0.10)
        assert not result.is_indeterminate

    def test_open_eye(self):
        result = classify_eye(_open_quad())
        assert result.is_closed is False
        assert result.ratio == pytest.approx(0.30)

    def test_degenerate_is_indeterminate(self):
        result = classify_eye(_degenerate_quad())
        assert result.is_indeterminate
        assert result.ratio is None
        assert result.is_closed is None

    def test_ratio_equal_to_threshold_is_open(self):
        """比较为严格小于"""
        quad = _quad((0.0, 0.0), (0.5, 0.0), (1.0, 0.0), (0.5, 0.25))
        result = classify_eye(quad, min_ratio=0.25)
        assert result.ratio == 0.25
        assert result.is_closed is False

    def test_custom_threshold(self):
        result = classify_eye(_open_quad(), min_ratio=0.35)
        assert result.is_closed is True

    def test_default_threshold(self):
        assert MIN_RATIO == 0.15


class TestCombine:
    """测试双眼合并规则"""

    def test_both_closed(self):
        closed = EyeResult(ratio=0.1, is_closed=True)
        assert combine(closed, closed) is FrameSignal.CLOSED

    def test_one_open(self):
        closed = EyeResult(ratio=0.1, is_closed=True)
        opened = EyeResult(ratio=0.3, is_closed=False)
        assert combine(closed, opened) is FrameSignal.OPEN
        assert combine(opened, closed) is FrameSignal.OPEN

    def test_both_open(self):
        opened = EyeResult(ratio=0.3, is_closed=False)
        assert combine(opened, opened) is FrameSignal.OPEN

    def test_any_indeterminate(self):
        closed = EyeResult(ratio=0.1, is_closed=True)
        unknown = EyeResult(ratio=None, is_closed=None)
        assert combine(closed, unknown) is FrameSignal.INDETERMINATE
        assert combine(unknown, closed) is FrameSignal.INDETERMINATE
        assert combine(unknown, unknown) is FrameSignal.INDETERMINATE


class TestEyeAnalyzer:
    """测试 EyeAnalyzer.analyze()"""

    def test_both_closed(self):
        left, right, signal = EyeAnalyzer().analyze(_closed_quad(), _closed_quad())
        assert left.is_closed and right.is_closed
        assert signal is FrameSignal.CLOSED

    def test_one_eye_open(self):
        _, _, signal = EyeAnalyzer().analyze(_closed_quad(), _open_quad())
        assert signal is FrameSignal.OPEN

    def test_degenerate_eye(self):
        _, right, signal = EyeAnalyzer().analyze(_closed_quad(), _degenerate_quad())
        assert right.is_indeterminate
        assert signal is FrameSignal.INDETERMINATE

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            EyeAnalyzer(min_ratio=0.0)
