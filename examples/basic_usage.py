"""
Basic usage of the ovclassifier host interface
"""

import logging
import sys

import cv2

from ovclassifier.inference import HostInterface, image_to_rgba

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(model_path: str = "models/classifier.xml", image_path: str = "samples/cat.jpg"):
    """Enumerate devices, load a model and classify one image"""

    host = HostInterface()

    # 1. Enumerate devices
    count = host.get_device_count()
    if count == 0:
        logger.error("No usable compute device found")
        return 1
    for index in range(count):
        logger.info(f"Device [{index}]: {host.get_device_name(index)}")

    # 2. Read the frame as RGBA
    image = cv2.imread(image_path, cv2.IMREAD_UNCHANGED)
    if image is None:
        logger.error(f"Could not read image: {image_path}")
        return 1
    rgba = image_to_rgba(image)
    height, width = rgba.shape[:2]

    # 3. Load the model on the first device at the frame resolution
    status = host.load_model(model_path, 0, [width, height])
    if status not in (0, 2):
        logger.error(f"Model load failed with status {status}")
        return 1
    if status == 2:
        info = host.pipeline.model_info
        logger.warning(f"Model kept its native {info.input_width}x{info.input_height} input")
        rgba = cv2.resize(rgba, (info.input_width, info.input_height))

    # 4. Classify
    class_index = host.perform_inference(rgba.tobytes())
    if class_index < 0:
        logger.error(f"Inference failed with sentinel {class_index}")
        return 1

    logger.info(f"Predicted class: {class_index}")
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:]))
