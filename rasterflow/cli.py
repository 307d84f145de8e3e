"""
Batch command line interface.

    rasterflow INPUT OUTPUT [--brightness N] [--blur SIZE SIGMA]
        [--resize W H] [--rotate DEG [--expand]] [--edges] [--show]
        [--workers N]

Operations run in the order they appear on the command line.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from rasterflow import __version__
from rasterflow.config import ProcessingConfig, get_settings
from rasterflow.core.enums import Operation, RotateCanvas
from rasterflow.core.exceptions import RasterError
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.memory_tracker import MemoryTracker
from rasterflow.core.operation_history import OperationHistory
from rasterflow.services.image_service import ImageService

logger = logging.getLogger(__name__)


class AppendOperation(argparse.Action):
    """Collect (operation, values) pairs in command line order"""

    def __init__(self, option_strings, dest, operation: Operation, convert=None, **kwargs):
        self.operation = operation
        self.convert = convert
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        if self.convert is not None:
            try:
                values = self.convert(values)
            except argparse.ArgumentTypeError as e:
                raise argparse.ArgumentError(self, str(e))
        operations = list(getattr(namespace, self.dest, None) or [])
        operations.append((self.operation, values))
        setattr(namespace, self.dest, operations)


def _parse_blur(values: List[str]):
    size_text, sigma_text = values
    try:
        return int(size_text), float(sigma_text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"--blur expects an integer SIZE and a number SIGMA, got {size_text} {sigma_text}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rasterflow",
        description="Apply pixel operations to an image file with a pool of worker threads.",
    )
    parser.add_argument("input", help="Image to read")
    parser.add_argument("output", help="Image to write; format follows the extension")
    parser.add_argument("--version", action="version", version=f"rasterflow {__version__}")

    ops = parser.add_argument_group("operations (applied in the order given)")
    ops.add_argument(
        "--brightness",
        dest="operations",
        action=AppendOperation,
        operation=Operation.BRIGHTNESS,
        type=int,
        metavar="N",
        help="Add N to every sample, clamped to 0..255",
    )
    ops.add_argument(
        "--blur",
        dest="operations",
        action=AppendOperation,
        operation=Operation.GAUSSIAN_BLUR,
        nargs=2,
        convert=_parse_blur,
        metavar=("SIZE", "SIGMA"),
        help="Gaussian blur with an odd kernel SIZE and standard deviation SIGMA",
    )
    ops.add_argument(
        "--resize",
        dest="operations",
        action=AppendOperation,
        operation=Operation.RESIZE,
        type=int,
        nargs=2,
        metavar=("W", "H"),
        help="Bilinear resize to W x H",
    )
    ops.add_argument(
        "--rotate",
        dest="operations",
        action=AppendOperation,
        operation=Operation.ROTATE,
        type=float,
        metavar="DEG",
        help="Rotate counter-clockwise by DEG degrees about the center",
    )
    ops.add_argument(
        "--edges",
        dest="operations",
        action=AppendOperation,
        operation=Operation.DETECT_EDGES,
        nargs=0,
        help="Replace the image with its Sobel gradient magnitude",
    )

    parser.add_argument(
        "--expand",
        action="store_true",
        help="Grow the canvas of rotated images to hold every source pixel",
    )
    parser.add_argument(
        "--show", action="store_true", help="Print the first rows of the result"
    )
    parser.add_argument("--rows", type=int, default=None, help="Rows printed by --show")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log at DEBUG level"
    )
    parser.set_defaults(operations=[])
    return parser


def apply_operation(
    service: ImageService, image_id: str, operation: Operation, values, canvas: RotateCanvas
):
    """Run one parsed command line operation against a stored image"""
    if operation is Operation.BRIGHTNESS:
        service.adjust_brightness(image_id, values)
    elif operation is Operation.GAUSSIAN_BLUR:
        size, sigma = values
        service.gaussian_blur(image_id, size, sigma)
    elif operation is Operation.RESIZE:
        width, height = values
        service.resize(image_id, width, height)
    elif operation is Operation.ROTATE:
        service.rotate(image_id, values, canvas=canvas)
    elif operation is Operation.DETECT_EDGES:
        service.detect_edges(image_id)
    else:
        raise ValueError(f"Unsupported operation: {operation}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    level = "DEBUG" if args.verbose else settings.system.log_level
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    processing = settings.processing
    if args.workers is not None:
        try:
            processing = ProcessingConfig.model_validate(
                {**processing.model_dump(), "worker_count": args.workers}
            )
        except ValidationError as e:
            parser.error(f"--workers: {e.errors()[0]['msg']}")

    tracker = MemoryTracker(max_bytes=settings.image.max_memory_bytes)
    image_manager = ImageManager(max_images=1, tracker=tracker)
    service = ImageService(
        image_manager=image_manager,
        history=OperationHistory(max_size=settings.history.buffer_size),
        processing=processing,
    )
    canvas = RotateCanvas.EXPAND if args.expand else RotateCanvas.SAME

    try:
        image_id = service.load(args.input)
        for operation, values in args.operations:
            apply_operation(service, image_id, operation, values, canvas)

        if args.show:
            for line in service.display(image_id, args.rows):
                print(line)

        service.save(image_id, args.output)
    except RasterError as e:
        logger.error(f"rasterflow failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        image_manager.cleanup()

    stats = service.history.get_statistics()
    logger.info(f"{stats['total']} operation(s) in {stats['avg_time_ms']} ms on average")
    return 0


if __name__ == "__main__":
    sys.exit(main())
