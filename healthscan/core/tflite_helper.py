# healthscan/core/tflite_helper.py
"""
Helper to create a TFLite interpreter.
Prefers tflite_runtime (small, good for Raspberry Pi) and falls back to the
interpreter bundled with full TensorFlow.
"""
import logging

logger = logging.getLogger(__name__)

DEFAULT_NUM_THREADS = 4

# Log the runtime only once
_logged_runtime = False


def get_interpreter(model_path, num_threads=None):
    """
    Create a TFLite Interpreter for a model file.

    Args:
        model_path: Path to the .tflite file
        num_threads: Inference threads (default: DEFAULT_NUM_THREADS)
    """
    global _logged_runtime

    if num_threads is None:
        num_threads = DEFAULT_NUM_THREADS
    num_threads = max(1, int(num_threads))

    try:
        from tflite_runtime.interpreter import Interpreter
        if not _logged_runtime:
            logger.info(f"[TFLite] Using tflite_runtime (threads={num_threads})")
            _logged_runtime = True
        return Interpreter(model_path=model_path, num_threads=num_threads)
    except ImportError:
        pass

    try:
        import tensorflow as tf
        if not _logged_runtime:
            logger.info(f"[TFLite] Using tensorflow.lite (threads={num_threads})")
            _logged_runtime = True
        return tf.lite.Interpreter(model_path=model_path, num_threads=num_threads)
    except ImportError:
        pass

    raise ImportError(
        "No TFLite interpreter found!\n"
        "Install one of:\n"
        "  - pip install tflite-runtime  (lightweight, for Pi)\n"
        "  - pip install tensorflow      (full, for PC)"
    )
