"""
Detection relay: camera -> detector -> on-screen boxes -> deduplicated upload.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --no-web: Do not start the operator API
    --max-frames: Stop after N frames
    --images: Replay still images (files or a directory) instead of the camera
"""

import argparse
import logging
import sys
import threading

import uvicorn

from dispatch.transport import create_transport
from inference.labels import load_labels
from inference.onnx_backend import OnnxConfig, OnnxModelRuntime
from models.config import RelayConfig
from observation import ImageSource, ImageSourceConfig, OpenCVSource, OpenCVSourceConfig
from ops.errors import RelayError
from ops.logging import setup_logging
from pipeline.engine import PipelineConfig, PipelineEngine
from pipeline.processor import FrameProcessor
from runtime.config import load_config, validate_config
from runtime.context import create_context
from web.app import create_app


def _build_source(config: RelayConfig, image_paths):
    if image_paths:
        return ImageSource(ImageSourceConfig(source_id="images", paths=list(image_paths)))
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(config.camera.to_dict()))


def _start_web(ctx, host: str, port: int) -> threading.Thread:
    def run_web_app():
        uvicorn.run(
            create_app(ctx),
            host=host,
            port=port,
            log_level="warning",
        )

    web_thread = threading.Thread(target=run_web_app, daemon=True)
    web_thread.start()
    logging.info(f"Operator API started on {host}:{port}")
    return web_thread


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description="Detection Relay")
    parser.add_argument("--config", type=str, default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--no-web", action="store_true",
                        help="Do not start the operator API")
    parser.add_argument("--max-frames", type=int, default=None,
                        help="Stop after this many frames")
    parser.add_argument("--images", nargs="+", default=None,
                        help="Image files or a directory to replay instead of the camera")
    args = parser.parse_args()

    try:
        raw = load_config(args.config)
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    is_valid, error_msg = validate_config(raw)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = RelayConfig.from_dict(raw)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Detection Relay")

    labels = load_labels(config.model.labels_path)
    try:
        runtime = OnnxModelRuntime(OnnxConfig(model=config.model.path, providers=config.model.providers))
    except (ImportError, OSError, RuntimeError) as e:
        logging.error(f"Failed to load model {config.model.path}: {e}")
        sys.exit(1)

    transport = create_transport(config.transport)
    ctx = create_context(config, transport, labels=labels)
    ctx.event_log.info(f"Model output shape: {list(runtime.output_shape)}")

    try:
        processor = FrameProcessor(ctx, runtime)
    except RelayError as e:
        ctx.event_log.error(f"Unsupported model output: {e}")
        sys.exit(1)
    ctx.event_log.info(f"App started. Model & labels loaded ({len(labels)} classes).")

    if config.web.enabled and not args.no_web:
        _start_web(ctx, config.web.host, config.web.port)

    source = _build_source(config, args.images)
    engine = PipelineEngine(
        source,
        ctx,
        processor,
        PipelineConfig(max_frames=args.max_frames),
    )

    try:
        engine.run()
    finally:
        close = getattr(transport, "close", None)
        if close is not None:
            close()
        logging.info("Detection Relay stopped")


if __name__ == "__main__":
    main()
