"""核心数据模型定义"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Landmark:
    """归一化的 2D 人脸关键点，x、y 均相对图像宽高，取值 [0, 1]"""
    x: float
    y: float


# 固定拓扑的关键点序列（468 或 478 个点），按下标访问
LandmarkSet = Sequence


@dataclass(frozen=True)
class EyeIndices:
    """单只眼睛四个关键点在 LandmarkSet 中的下标"""
    outer: int
    upper: int
    inner: int
    lower: int

    def max_index(self) -> int:
        return max(self.outer, self.upper, self.inner, self.lower)


@dataclass(frozen=True)
class EyeQuad:
    """单只眼睛的四个关键点：外眼角、上眼睑、内眼角、下眼睑"""
    outer_corner: Landmark
    upper_lid: Landmark
    inner_corner: Landmark
    lower_lid: Landmark


@dataclass(frozen=True)
class EyeResult:
    """单眼分类结果，水平距离为零时 ratio 与 is_closed 均为 None"""
    ratio: Optional[float]
    is_closed: Optional[bool]

    @property
    def is_indeterminate(self) -> bool:
        return self.ratio is None


class FrameSignal(Enum):
    """双眼合并后的单帧信号"""
    OPEN = "open"
    CLOSED = "closed"
    INDETERMINATE = "indeterminate"


class SleepState(Enum):
    """由闭眼计数器推导出的展示状态"""
    AWAKE = "awake"
    BLINKING_OR_DROWSY = "blinking_or_drowsy"
    ASLEEP = "asleep"


class Event(Enum):
    """每帧输出给宿主程序的事件"""
    EYE_OPEN = "eye_open"
    EYE_CLOSE = "eye_close"
    SLEEP = "sleep"
    NONE = "none"


@dataclass
class DrowsinessState:
    """跨帧保存的唯一状态：连续闭眼帧数，饱和于 threshold_frames"""
    consecutive_closed_frames: int = 0
    threshold_frames: int = 30

    def __post_init__(self):
        if self.threshold_frames < 1:
            raise ValueError(f"threshold_frames 必须为正整数: {self.threshold_frames}")
        if not 0 <= self.consecutive_closed_frames <= self.threshold_frames:
            raise ValueError(
                f"consecutive_closed_frames 超出范围 [0, {self.threshold_frames}]: "
                f"{self.consecutive_closed_frames}"
            )


@dataclass
class FrameResult:
    """会话处理单帧后的完整结果"""
    event: Event
    events: Tuple[Event, ...]
    signal: FrameSignal
    left_eye: Optional[EyeResult]
    right_eye: Optional[EyeResult]
    closed_frames: int
    state: SleepState
    dropped: bool = False
