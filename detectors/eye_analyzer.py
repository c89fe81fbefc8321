"""眼睛状态分析模块，负责计算眼睑开合比并判断单帧闭眼状态"""

import logging
import math
from typing import Optional

from models.data_models import EyeQuad, EyeResult, FrameSignal

logger = logging.getLogger(__name__)

# 垂直距离 / 水平距离 低于该值视为闭眼
MIN_RATIO = 0.15

INDETERMINATE = EyeResult(ratio=None, is_closed=None)


def calculate_ratio(quad: EyeQuad) -> Optional[float]:
    """
    计算单只眼睛的开合比。

    公式: ratio = |upper-lower| / |outer-inner|

    直接使用归一化坐标，比值与缩放无关。

    Returns:
        开合比，水平距离为零时返回 None
    """
    horizontal = math.dist(
        (quad.outer_corner.x, quad.outer_corner.y),
        (quad.inner_corner.x, quad.inner_corner.y),
    )
    if horizontal == 0.0:
        return None

    vertical = math.dist(
        (quad.upper_lid.x, quad.upper_lid.y),
        (quad.lower_lid.x, quad.lower_lid.y),
    )
    return vertical / horizontal


def classify_eye(quad: EyeQuad, min_ratio: float = MIN_RATIO) -> EyeResult:
    """判断单只眼睛是否闭合，水平距离退化时返回不确定结果"""
    ratio = calculate_ratio(quad)
    if ratio is None:
        logger.debug("眼角关键点重合，结果不确定")
        return INDETERMINATE

    logger.debug("ratio=%.4f threshold=%.4f", ratio, min_ratio)
    return EyeResult(ratio=ratio, is_closed=ratio < min_ratio)


def combine(left: EyeResult, right: EyeResult) -> FrameSignal:
    """合并双眼结果：任一眼不确定则整帧不确定，双眼都闭合才算闭眼"""
    if left.is_indeterminate or right.is_indeterminate:
        return FrameSignal.INDETERMINATE
    if left.is_closed and right.is_closed:
        return FrameSignal.CLOSED
    return FrameSignal.OPEN


class EyeAnalyzer:
    """按固定阈值对双眼分类，输出单帧合并信号"""

    def __init__(self, min_ratio: float = MIN_RATIO):
        """初始化闭眼阈值"""
        if min_ratio <= 0:
            raise ValueError(f"min_ratio 必须大于 0: {min_ratio}")
        self.min_ratio = min_ratio

    def analyze(self, left_eye: EyeQuad, right_eye: EyeQuad):
        """
        分析双眼状态。

        Args:
            left_eye: 左眼四点组
            right_eye: 右眼四点组

        Returns:
            (左眼 EyeResult, 右眼 EyeResult, FrameSignal)
        """
        left_result = classify_eye(left_eye, self.min_ratio)
        right_result = classify_eye(right_eye, self.min_ratio)
        signal = combine(left_result, right_result)
        logger.debug("frame signal: %s", signal.value)
        return left_result, right_result, signal
