"""睡眠判断模块，根据连续闭眼帧数输出睁眼/闭眼/睡眠事件"""

from typing import Tuple

from models.data_models import DrowsinessState, Event, FrameSignal, SleepState

# 连续闭眼达到该帧数即判定为睡眠（按帧计数，与帧率相关）
MAX_EYE_CLOSE_COUNT = 30


def step(state: DrowsinessState, signal: FrameSignal) -> Tuple[Event, ...]:
    """
    用单帧信号推进状态机，就地更新计数器。

    Args:
        state: 会话持有的 DrowsinessState
        signal: 双眼合并后的单帧信号

    Returns:
        本帧按顺序发出的事件；不确定帧返回空元组且不修改计数器
    """
    if signal is FrameSignal.INDETERMINATE:
        return ()

    if signal is FrameSignal.OPEN:
        state.consecutive_closed_frames = 0
        return (Event.EYE_OPEN,)

    state.consecutive_closed_frames = min(
        state.consecutive_closed_frames + 1, state.threshold_frames
    )
    # 电平触发：计数器停在上限期间每帧都发出 SLEEP
    if state.consecutive_closed_frames == state.threshold_frames:
        return (Event.EYE_CLOSE, Event.SLEEP)
    return (Event.EYE_CLOSE,)


def primary_event(events: Tuple[Event, ...]) -> Event:
    """取本帧最重要的事件，SLEEP 隐含闭眼"""
    if Event.SLEEP in events:
        return Event.SLEEP
    if events:
        return events[0]
    return Event.NONE


def sleep_state(state: DrowsinessState) -> SleepState:
    """由计数器推导展示状态"""
    if state.consecutive_closed_frames == 0:
        return SleepState.AWAKE
    if state.consecutive_closed_frames >= state.threshold_frames:
        return SleepState.ASLEEP
    return SleepState.BLINKING_OR_DROWSY


class DrowsinessEvaluator:
    """持有 DrowsinessState 的睡眠判断器，同一实例只应由一个线程驱动"""

    def __init__(self, threshold_frames: int = MAX_EYE_CLOSE_COUNT):
        self.state = DrowsinessState(threshold_frames=threshold_frames)

    @property
    def closed_frames(self) -> int:
        return self.state.consecutive_closed_frames

    def evaluate(self, signal: FrameSignal) -> Tuple[Event, ...]:
        return step(self.state, signal)

    def current_state(self) -> SleepState:
        return sleep_state(self.state)

    def reset(self):
        """重置帧计数器"""
        self.state.consecutive_closed_frames = 0
