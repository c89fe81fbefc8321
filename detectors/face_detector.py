"""人脸关键点适配模块，将 MediaPipe FaceMesh 输出转换为归一化 LandmarkSet"""

from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np

from models.data_models import Landmark


def landmarks_from_face_mesh(results) -> Optional[List[Landmark]]:
    """
    取 FaceMesh 结果中的第一张人脸，保留归一化坐标。

    Args:
        results: FaceMesh.process() 的返回值，可以为 None

    Returns:
        Landmark 列表；结果为空或未检测到人脸时返回 None
    """
    if results is None or not results.multi_face_landmarks:
        return None

    face = results.multi_face_landmarks[0]
    return [Landmark(float(lm.x), float(lm.y)) for lm in face.landmark]


class FaceDetector:
    """使用 MediaPipe FaceMesh 检测人脸关键点"""

    def __init__(
        self,
        max_num_faces: int = 1,
        min_detection_confidence: float = 0.5,
    ):
        """初始化 MediaPipe FaceMesh"""
        self._face_mesh = mp.solutions.face_mesh.FaceMesh(
            max_num_faces=max_num_faces,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=0.5,
            refine_landmarks=False,
        )

    def detect(self, frame: np.ndarray) -> Optional[List[Landmark]]:
        """
        检测宿主提供的单帧图像中的人脸关键点。

        Args:
            frame: BGR 格式的 OpenCV 图像帧

        Returns:
            归一化 Landmark 列表；未检测到人脸时返回 None
        """
        # BGR -> RGB
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        rgb_frame.flags.writeable = False

        results = self._face_mesh.process(rgb_frame)
        return landmarks_from_face_mesh(results)

    def close(self):
        """释放 MediaPipe 资源"""
        self._face_mesh.close()
