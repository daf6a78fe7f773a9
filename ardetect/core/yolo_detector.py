"""
YOLO backend for the detection adapter (ultralytics).

Imports torch, so keep it out of the scheduling side's imports:
    from ardetect.core.yolo_detector import YoloDetector
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Set

import torch

from .detector import BaseDetector
from .types import Detection

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).parent.parent.parent
MODELS_DIR = _PROJECT_ROOT / "models"


class YoloDetector(BaseDetector):
    """YOLO detector with TensorRT engine preference and CPU fallback."""

    def __init__(
        self,
        model_name: str = "yolo11n",
        device: str = "cuda",
        confidence_threshold: float = 0.5,
        max_results: int = 10,
        classes: Optional[Set[str]] = None,
        models_dir: Path = MODELS_DIR,
    ):
        """
        Args:
            model_name: Model file stem, looked up as <models_dir>/<name>.engine / .pt
            device: "cuda" or "cpu"
            confidence_threshold: Min confidence passed to YOLO and re-checked in detect()
            max_results: Max detections per frame
            classes: If given, only these labels are returned
            models_dir: Directory holding the weights
        """
        super().__init__(confidence_threshold, max_results)
        if device == "cuda" and not torch.cuda.is_available():
            logger.info("CUDA not available, using CPU")
            device = "cpu"

        self.device = device
        self.model_name = model_name
        self.models_dir = Path(models_dir)
        self.classes = classes
        self.yolo = None
        self._tensorrt = False
        self._load()

    def _load(self):
        """Load the TensorRT engine if present on CUDA, the .pt weights otherwise."""
        try:
            from ultralytics import YOLO

            engine_path = self.models_dir / f"{self.model_name}.engine"
            pt_path = self.models_dir / f"{self.model_name}.pt"
            # Unknown local weights: let ultralytics resolve/download by name
            weights = str(pt_path) if pt_path.exists() else f"{self.model_name}.pt"

            if self.device == "cuda" and engine_path.exists():
                try:
                    self.yolo = YOLO(str(engine_path), task="detect")
                    self._tensorrt = True
                    logger.info("%s loaded (TensorRT)", self.model_name)
                    return
                except Exception as e:
                    logger.warning("TensorRT engine failed: %s", e)

            self.yolo = YOLO(weights, task="detect")
            if self.device == "cuda":
                self.yolo.to("cuda")
            logger.info("%s loaded (%s)", self.model_name, self.device)
        except Exception as e:
            logger.error("Could not load YOLO: %s", e)
            self.yolo = None

    def _run(self, image: Any) -> Iterable[Detection]:
        if self.yolo is None:
            return []

        results = self.yolo(
            image,
            verbose=False,
            conf=self.confidence_threshold,
            max_det=self.max_results,
            half=(self.device == "cuda" and not self._tensorrt),
        )
        if not results:
            return []
        return self._to_detections(results[0])

    def _to_detections(self, result) -> List[Detection]:
        detections = []
        if result.boxes is None:
            return detections

        for box in result.boxes:
            x1, y1, x2, y2 = box.xyxy[0].cpu().numpy()
            name = result.names[int(box.cls[0])]
            if self.classes and name not in self.classes:
                continue
            detections.append(Detection(
                label=name,
                confidence=float(box.conf[0]),
                bbox=(float(x1), float(y1), float(x2), float(y2)),
            ))
        return detections

    def close(self):
        self.yolo = None
        if self.device == "cuda":
            torch.cuda.empty_cache()
