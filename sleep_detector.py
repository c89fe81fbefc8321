"""睡眠检测会话入口，协调几何提取、闭眼分类和睡眠状态机"""

import json
import logging
import threading

from detectors.eye_analyzer import EyeAnalyzer, MIN_RATIO
from detectors.face_detector import FaceDetector, landmarks_from_face_mesh
from detectors.landmark_extractor import OutOfRangeError, extract_eye_quads
from evaluators.drowsiness_evaluator import (
    MAX_EYE_CLOSE_COUNT,
    DrowsinessEvaluator,
    primary_event,
    sleep_state,
    step,
)
from models.data_models import DrowsinessState, Event, FrameResult, FrameSignal

logger = logging.getLogger(__name__)

# 默认阈值
_DEFAULTS = {
    "min_ratio": MIN_RATIO,
    "threshold_frames": MAX_EYE_CLOSE_COUNT,
}


def process_frame(landmark_set, state: DrowsinessState, min_ratio: float = MIN_RATIO) -> Event:
    """
    处理单帧关键点并推进宿主持有的状态。

    Args:
        landmark_set: 按下标排列的归一化关键点序列
        state: 宿主为本次会话创建的 DrowsinessState
        min_ratio: 闭眼阈值

    Returns:
        本帧事件；不确定帧返回 Event.NONE

    Raises:
        OutOfRangeError: 关键点数量不足
    """
    left_quad, right_quad = extract_eye_quads(landmark_set)
    _, _, signal = EyeAnalyzer(min_ratio).analyze(left_quad, right_quad)
    return primary_event(step(state, signal))


class SleepDetector:
    """单次检测会话，持有独立的闭眼计数器，可在多个生产线程间安全共享"""

    def __init__(self, config_path=None, min_ratio=None, threshold_frames=None):
        config = self._load_config(config_path)
        if min_ratio is not None:
            config["min_ratio"] = min_ratio
        if threshold_frames is not None:
            config["threshold_frames"] = threshold_frames

        try:
            config["min_ratio"] = float(config["min_ratio"])
            config["threshold_frames"] = int(config["threshold_frames"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"阈值配置无效: {e}") from e

        self.eye_analyzer = EyeAnalyzer(min_ratio=config["min_ratio"])
        self.evaluator = DrowsinessEvaluator(threshold_frames=config["threshold_frames"])
        self._lock = threading.Lock()
        # MediaPipe 图不可重入，检测器的创建、调用和释放单独加锁
        self._detector_lock = threading.Lock()
        self._face_detector = None
        logger.info(
            "会话已创建: min_ratio=%s threshold_frames=%s",
            config["min_ratio"], config["threshold_frames"],
        )

    @staticmethod
    def _load_config(config_path):
        """从 JSON 配置文件加载阈值参数，缺失字段使用默认值。"""
        config = dict(_DEFAULTS)

        if config_path is None:
            return config

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning("配置文件不存在 %s，使用默认阈值", config_path)
            return config
        except json.JSONDecodeError:
            logger.warning("配置文件格式错误 %s，使用默认阈值", config_path)
            return config

        # 用配置文件中的值覆盖默认值
        for key in _DEFAULTS:
            if key in data and data[key] is not None:
                config[key] = data[key]

        return config

    @property
    def closed_frames(self) -> int:
        return self.evaluator.closed_frames

    def process_frame(self, landmark_set) -> FrameResult:
        """
        处理单帧关键点。

        关键点数量不足时记录警告并丢弃该帧，计数器保持不变。
        """
        try:
            left_quad, right_quad = extract_eye_quads(landmark_set)
        except OutOfRangeError as e:
            logger.warning("丢弃该帧: %s", e)
            return self._dropped_result()

        left_result, right_result, signal = self.eye_analyzer.analyze(left_quad, right_quad)

        with self._lock:
            events = self.evaluator.evaluate(signal)
            closed_frames = self.evaluator.closed_frames
            state = sleep_state(self.evaluator.state)

        return FrameResult(
            event=primary_event(events),
            events=events,
            signal=signal,
            left_eye=left_result,
            right_eye=right_result,
            closed_frames=closed_frames,
            state=state,
            dropped=signal is FrameSignal.INDETERMINATE,
        )

    def process_face_mesh(self, results) -> FrameResult:
        """处理 MediaPipe FaceMesh 结果，未检测到人脸时不更新计数器"""
        landmark_set = landmarks_from_face_mesh(results)
        if landmark_set is None:
            return self._dropped_result()
        return self.process_frame(landmark_set)

    def process_image(self, frame) -> FrameResult:
        """对宿主已获取的 BGR 图像运行关键点检测后处理"""
        with self._detector_lock:
            if self._face_detector is None:
                self._face_detector = FaceDetector()
            landmark_set = self._face_detector.detect(frame)

        if landmark_set is None:
            return self._dropped_result()
        return self.process_frame(landmark_set)

    def _dropped_result(self) -> FrameResult:
        with self._lock:
            closed_frames = self.evaluator.closed_frames
            state = sleep_state(self.evaluator.state)
        return FrameResult(
            event=Event.NONE,
            events=(),
            signal=FrameSignal.INDETERMINATE,
            left_eye=None,
            right_eye=None,
            closed_frames=closed_frames,
            state=state,
            dropped=True,
        )

    def reset(self):
        """重置闭眼计数器，开始新的时间窗口。"""
        with self._lock:
            self.evaluator.reset()
        logger.info("会话计数器已重置")

    def close(self):
        """释放人脸检测器资源。"""
        with self._detector_lock:
            if self._face_detector is not None:
                self._face_detector.close()
                self._face_detector = None
