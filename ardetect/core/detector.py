"""
Detection adapter boundary.

Backends subclass BaseDetector and implement _run(); callers only use
detect(), which never raises: a failing backend yields no detections.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from .types import Detection

logger = logging.getLogger(__name__)


class BaseDetector(ABC):
    """Base interface for detectors."""

    def __init__(self, confidence_threshold: float = 0.5, max_results: int = 10):
        """
        Args:
            confidence_threshold: Detections below this confidence are dropped
            max_results: Max detections returned per call (highest confidence first)
        """
        self.confidence_threshold = confidence_threshold
        self.max_results = max_results

    @abstractmethod
    def _run(self, image: Any) -> Iterable[Detection]:
        """Run the backend on one image."""

    def detect(self, image: Any) -> List[Detection]:
        """Raw detections above the threshold, capped at max_results."""
        try:
            raw = list(self._run(image))
        except Exception as e:
            logger.error("Detection backend %s failed: %s", type(self).__name__, e)
            return []

        kept = [det for det in raw if det.confidence >= self.confidence_threshold]
        kept.sort(key=lambda det: det.confidence, reverse=True)
        return kept[:self.max_results]

    def close(self):
        """Release backend resources."""


class MockDetector(BaseDetector):
    """Detector for development without a model (fixed or generated results)."""

    def __init__(
        self,
        detections: Union[Sequence[Detection], Callable[[Any], Iterable[Detection]]] = (),
        confidence_threshold: float = 0.5,
        max_results: int = 10,
    ):
        """
        Args:
            detections: List returned on every call, or a callable taking the image
        """
        super().__init__(confidence_threshold, max_results)
        self._source = detections
        self.calls = 0
        self.last_image: Optional[Any] = None

    def _run(self, image: Any) -> Iterable[Detection]:
        self.calls += 1
        self.last_image = image
        if callable(self._source):
            return self._source(image)
        return list(self._source)
