# healthscan/classify/classifier.py
"""
Condition classifier - TFLite image classification.

Model I/O:
- Input: [1, 224, 224, 3] float32 in [0, 1] (int8/uint8 inputs are quantized)
- Output: [1, num_classes] probabilities (int8/uint8 outputs are dequantized)

Thread-safe: inference runs under a Lock.
"""
import logging
import threading
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.tflite_helper import get_interpreter
from .domains import Domain

logger = logging.getLogger(__name__)


class ModelLoadError(Exception):
    """A classification model could not be loaded."""

    def __init__(self, message, model_paths=()):
        super().__init__(message)
        self.model_paths = tuple(model_paths)


def argmax_confidence(probabilities: Sequence[float]) -> Tuple[int, float]:
    """
    Reduce a probability vector to (index, confidence).

    Linear scan starting from (0, 0.0) that only replaces the best on a
    strict improvement: ties go to the lowest index and an all-zero vector
    gives (0, 0.0).
    """
    best_index = 0
    best_value = 0.0
    for i, value in enumerate(np.asarray(probabilities).ravel().tolist()):
        if value > best_value:
            best_value = value
            best_index = i
    return best_index, float(best_value)


class ConditionClassifier:
    """
    Wraps one TFLite classification model.
    """

    def __init__(self, domain: Domain, model_path: str, num_threads: Optional[int] = None,
                 interpreter=None):
        """
        Args:
            domain: Domain this model classifies
            model_path: Path to the .tflite model
            num_threads: TFLite threads
            interpreter: Pre-built interpreter (skips loading from model_path)
        """
        self._inference_lock = threading.Lock()

        self.domain = domain
        self.model_path = model_path

        if interpreter is None:
            interpreter = get_interpreter(model_path, num_threads=num_threads)
        self.interpreter = interpreter
        self.interpreter.allocate_tensors()
        self.input_details = self.interpreter.get_input_details()
        self.output_details = self.interpreter.get_output_details()

        self._input_index = self.input_details[0]['index']
        self._output_index = self.output_details[0]['index']
        self._input_dtype = self.input_details[0]['dtype']
        self._output_dtype = self.output_details[0]['dtype']

        shape = tuple(int(dim) for dim in self.input_details[0].get('shape', (1, 224, 224, 3)))
        self.input_size = shape[1] if len(shape) >= 3 else 224

        self._input_scale, self._input_zero_point = self._quantization(self.input_details[0])
        self._output_scale, self._output_zero_point = self._quantization(self.output_details[0])

        output_shape = self.output_details[0].get('shape', (1, 0))
        self.num_classes = int(output_shape[-1]) if len(output_shape) else 0

        logger.info(f"[{domain.value}] Loaded {model_path} "
                    f"(input={shape}, classes={self.num_classes}, dtype={np.dtype(self._input_dtype).name})")

    @staticmethod
    def _quantization(detail) -> Tuple[float, int]:
        """(scale, zero_point) of a tensor; (0.0, 0) when not quantized."""
        params = detail.get('quantization_parameters', {})
        scales = params.get('scales')
        zero_points = params.get('zero_points')
        if scales is not None and len(scales) > 0:
            zp = int(zero_points[0]) if zero_points is not None and len(zero_points) > 0 else 0
            return float(scales[0]), zp
        scale, zp = detail.get('quantization', (0.0, 0))
        return float(scale), int(zp)

    def _prepare_input(self, batch: np.ndarray) -> np.ndarray:
        """Cast (and quantize if needed) a float batch to the model input dtype."""
        if self._input_dtype in (np.int8, np.uint8):
            info = np.iinfo(self._input_dtype)
            scale = self._input_scale or 1.0 / 255.0
            quantized = np.round(batch / scale + self._input_zero_point)
            return np.clip(quantized, info.min, info.max).astype(self._input_dtype)
        return batch.astype(self._input_dtype, copy=False)

    def _dequantize_output(self, output: np.ndarray) -> np.ndarray:
        """float_value = (int_value - zero_point) * scale"""
        if output.dtype in (np.int8, np.uint8):
            scale = self._output_scale or 1.0 / 255.0
            return (output.astype(np.float32) - self._output_zero_point) * scale
        return output.astype(np.float32)

    def predict(self, batch: np.ndarray) -> np.ndarray:
        """
        Run the model on one batch.

        Args:
            batch: (1, H, W, 3) float32 in [0, 1]

        Returns:
            Flat float32 probability vector
        """
        input_data = self._prepare_input(batch)

        with self._inference_lock:
            self.interpreter.set_tensor(self._input_index, input_data)
            self.interpreter.invoke()
            # get_tensor returns a copy, no interpreter buffer escapes this block
            output = self.interpreter.get_tensor(self._output_index)

        return self._dequantize_output(output).ravel()
