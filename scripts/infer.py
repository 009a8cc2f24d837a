#!/usr/bin/env python3
"""
Command-line image classification with ovclassifier.

Lists compute devices, or loads an OpenVINO model and classifies an
image file.

Usage:
    python scripts/infer.py --list-devices

    python scripts/infer.py \
      --model models/resnet50.xml \
      --image samples/cat.jpg \
      --device-index 0

    # Reshape to an explicit resolution, with class names
    python scripts/infer.py \
      --model models/resnet50.xml \
      --image samples/cat.jpg \
      --width 224 --height 224 \
      --labels models/imagenet_labels.txt \
      --topk 5

Output:
    ==================================================
    Classification Result
    ==================================================
    Device      : CPU
    Input       : 224x224
    Load status : OK
    Class index : 283
    Class name  : Persian cat
    Latency     : 4.21 ms
    ==================================================
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import cv2
from pydantic import ValidationError

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ovclassifier.inference import (
    ClassifierPipeline,
    CompileError,
    DeviceIndexOutOfRange,
    TargetShape,
    image_to_rgba,
    load_class_names,
    top_k,
)
from ovclassifier.services.config import load_settings


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Classify an image with an OpenVINO model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show usable devices
  python scripts/infer.py --list-devices

  # Classify on the second device
  python scripts/infer.py --model model.xml --image cat.jpg --device-index 1

  # Output as JSON
  python scripts/infer.py --model model.xml --image cat.jpg --json
        """
    )

    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List usable compute devices and exit"
    )

    parser.add_argument(
        "--model", "-m",
        type=Path,
        help="Path to the OpenVINO model (.xml or .onnx)"
    )

    parser.add_argument(
        "--image", "-i",
        type=Path,
        help="Path to the image to classify"
    )

    parser.add_argument(
        "--device-index", "-d",
        type=int,
        default=0,
        help="Index of the compute device, see --list-devices (default: 0)"
    )

    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Model input width (default: image width)"
    )

    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Model input height (default: image height)"
    )

    parser.add_argument(
        "--labels", "-l",
        type=Path,
        default=None,
        help="Class names file (.txt one per line, or .json)"
    )

    parser.add_argument(
        "--topk", "-k",
        type=int,
        default=1,
        help="Number of top scores to show (default: 1)"
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config.yaml (default: project root)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output result as JSON instead of formatted text"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug output"
    )

    args = parser.parse_args(argv)
    if not args.list_devices and (args.model is None or args.image is None):
        parser.error("--model and --image are required unless --list-devices is given")
    return args


def load_image(image_path: Path, width: int = None, height: int = None):
    """Read an image and return it as an RGBA array of the requested size."""
    image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Could not read image: {image_path}")

    rgba = image_to_rgba(image)
    if width is not None and height is not None:
        if (rgba.shape[1], rgba.shape[0]) != (width, height):
            rgba = cv2.resize(rgba, (width, height), interpolation=cv2.INTER_LINEAR)
    return rgba


def format_result(result: dict) -> str:
    """Format a result dict as human-readable text."""
    lines = [
        "=" * 50,
        "Classification Result",
        "=" * 50,
        f"Device      : {result['device']}",
        f"Input       : {result['input_width']}x{result['input_height']}",
        f"Load status : {result['load_status']}",
        f"Class index : {result['class_index']}",
    ]
    if result.get("class_name"):
        lines.append(f"Class name  : {result['class_name']}")
    lines.append(f"Latency     : {result['latency_ms']:.2f} ms")

    if len(result.get("topk", [])) > 1:
        lines.extend(["", f"Top-{len(result['topk'])} Scores:"])
        for rank, entry in enumerate(result["topk"], start=1):
            name = entry.get("class_name") or f"CLASS_{entry['class_index']}"
            lines.append(f"  [{rank}] {name:<20} ({entry['score']:.4f})")

    lines.append("=" * 50)
    return "\n".join(lines)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
        logging.getLogger().setLevel(logging.DEBUG if args.verbose else settings.log_level)
        pipeline = ClassifierPipeline(settings=settings)
        devices = pipeline.list_devices()

        if args.list_devices:
            if args.json:
                print(json.dumps({"devices": devices}, indent=2))
            else:
                for index, name in enumerate(devices):
                    print(f"[{index}] {name}")
            return 0

        class_names = load_class_names(args.labels) if args.labels else {}

        # =====================================================================
        # 1. Load Image
        # =====================================================================
        rgba = load_image(args.image, args.width, args.height)
        height, width = rgba.shape[:2]

        # =====================================================================
        # 2. Load Model
        # =====================================================================
        outcome = pipeline.load_model(
            str(args.model), args.device_index, TargetShape(width, height)
        )
        if not outcome.succeeded:
            logger.error(f"Could not load model: {outcome.error}")
            return 1

        info = outcome.model_info
        if (info.input_width, info.input_height) != (width, height):
            # Model kept its native shape, resize the frame to match
            logger.warning(
                f"Model input is {info.input_width}x{info.input_height}, resizing image"
            )
            rgba = cv2.resize(
                rgba, (info.input_width, info.input_height), interpolation=cv2.INTER_LINEAR
            )

        # =====================================================================
        # 3. Run Inference
        # =====================================================================
        result = pipeline.classify(rgba.tobytes())
        if not result.ok:
            logger.error(f"Inference failed: {result.error_kind}")
            return 1

        scores = pipeline.last_scores
        output = {
            "device": info.device,
            "input_width": info.input_width,
            "input_height": info.input_height,
            "load_status": outcome.status.name,
            "class_index": result.class_index,
            "class_name": class_names.get(result.class_index),
            "latency_ms": result.latency_ms,
            "topk": [
                {"class_index": i, "class_name": class_names.get(i), "score": s}
                for i, s in top_k(scores, args.topk)
            ],
        }

        # =====================================================================
        # 4. Output Results
        # =====================================================================
        if args.json:
            print(json.dumps(output, indent=2))
        else:
            print("\n" + format_result(output))
        return 0

    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except DeviceIndexOutOfRange as e:
        logger.error(f"{e}. Use --list-devices to see valid indices")
        return 1
    except CompileError as e:
        logger.error(f"Compilation failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
