"""眼部几何提取模块，从完整关键点集合中取出每只眼睛的四个关键点"""

from typing import Tuple

from models.data_models import EyeIndices, EyeQuad, Landmark, LandmarkSet

# FaceMesh 默认拓扑下的关键点索引
LEFT_EYE_INDICES = EyeIndices(outer=33, upper=159, inner=133, lower=145)
RIGHT_EYE_INDICES = EyeIndices(outer=362, upper=386, inner=263, lower=374)


class OutOfRangeError(IndexError):
    """关键点集合长度不足以覆盖配置的下标"""

    def __init__(self, required_index: int, size: int):
        self.required_index = required_index
        self.size = size
        super().__init__(
            f"关键点数量不足: 需要下标 {required_index}，实际只有 {size} 个关键点"
        )


def _to_landmark(point) -> Landmark:
    """将带 x/y 属性的对象（如 MediaPipe NormalizedLandmark）或 (x, y) 序列（元组、numpy 行）转换为 Landmark"""
    if isinstance(point, Landmark):
        return point
    if hasattr(point, "x"):
        return Landmark(float(point.x), float(point.y))
    return Landmark(float(point[0]), float(point[1]))


def _extract_quad(landmark_set: LandmarkSet, indices: EyeIndices) -> EyeQuad:
    return EyeQuad(
        outer_corner=_to_landmark(landmark_set[indices.outer]),
        upper_lid=_to_landmark(landmark_set[indices.upper]),
        inner_corner=_to_landmark(landmark_set[indices.inner]),
        lower_lid=_to_landmark(landmark_set[indices.lower]),
    )


def extract_eye_quads(
    landmark_set: LandmarkSet,
    left: EyeIndices = LEFT_EYE_INDICES,
    right: EyeIndices = RIGHT_EYE_INDICES,
) -> Tuple[EyeQuad, EyeQuad]:
    """
    提取左右眼的四点组。

    Args:
        landmark_set: 按下标排列的关键点序列
        left: 左眼下标配置
        right: 右眼下标配置

    Returns:
        (左眼 EyeQuad, 右眼 EyeQuad)

    Raises:
        OutOfRangeError: 关键点数量不足以覆盖最大下标
    """
    required = max(left.max_index(), right.max_index())
    size = len(landmark_set)
    if size <= required:
        raise OutOfRangeError(required, size)

    return _extract_quad(landmark_set, left), _extract_quad(landmark_set, right)
