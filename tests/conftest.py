"""Shared fakes: TFLite interpreter, video capture, frame source."""
import numpy as np
import pytest


class FakeInterpreter:
    """Minimal stand-in for tflite_runtime.interpreter.Interpreter."""

    def __init__(self, outputs, input_dtype=np.float32, output_dtype=np.float32,
                 input_quant=(0.0, 0), output_quant=(0.0, 0), input_size=224):
        self._outputs = [np.asarray(o) for o in outputs]
        self._input_dtype = input_dtype
        self._output_dtype = output_dtype
        self._input_quant = input_quant
        self._output_quant = output_quant
        self._input_size = input_size
        self.allocated = False
        self.invocations = 0
        self.last_input = None
        self._current = None

    def allocate_tensors(self):
        self.allocated = True

    def get_input_details(self):
        scale, zp = self._input_quant
        return [{
            'index': 0,
            'shape': np.array([1, self._input_size, self._input_size, 3]),
            'dtype': self._input_dtype,
            'quantization': (scale, zp),
            'quantization_parameters': {
                'scales': np.array([scale]) if scale else np.array([]),
                'zero_points': np.array([zp]) if scale else np.array([]),
            },
        }]

    def get_output_details(self):
        scale, zp = self._output_quant
        width = self._outputs[0].shape[-1]
        return [{
            'index': 1,
            'shape': np.array([1, width]),
            'dtype': self._output_dtype,
            'quantization': (scale, zp),
            'quantization_parameters': {
                'scales': np.array([scale]) if scale else np.array([]),
                'zero_points': np.array([zp]) if scale else np.array([]),
            },
        }]

    def set_tensor(self, index, value):
        assert index == 0
        self.last_input = value

    def invoke(self):
        self._current = self._outputs[min(self.invocations, len(self._outputs) - 1)]
        self.invocations += 1

    def get_tensor(self, index):
        assert index == 1
        return np.array(self._current, dtype=self._output_dtype).reshape(1, -1)


class FakeCapture:
    """Stand-in for cv2.VideoCapture."""

    def __init__(self, frames=None, opened=True, width=640, height=480):
        self._frames = list(frames) if frames is not None else [
            np.full((height, width, 3), 128, dtype=np.uint8)
        ]
        self._opened = opened
        self.props = {}
        self.released = False
        self.reads = 0
        self.width = width
        self.height = height

    def isOpened(self):
        return self._opened and not self.released

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        import cv2
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return float(self.width)
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return float(self.height)
        return 0.0

    def read(self):
        self.reads += 1
        if not self._frames:
            return False, None
        frame = self._frames[min(self.reads - 1, len(self._frames) - 1)]
        return True, frame.copy()

    def release(self):
        self.released = True


class StaticFrameSource:
    """Frame source returning the same batch, counting calls."""

    def __init__(self, batch=None):
        self.batch = batch if batch is not None else np.zeros((1, 224, 224, 3), dtype=np.float32)
        self.calls = 0

    def current_frame(self):
        self.calls += 1
        return self.batch


@pytest.fixture
def fake_interpreter_factory():
    return FakeInterpreter


@pytest.fixture
def frame_source():
    return StaticFrameSource()


@pytest.fixture
def fake_capture():
    return FakeCapture
