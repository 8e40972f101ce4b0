"""Command line entry point: ``python -m media_acquisition``."""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from typing import Optional, Sequence

from media_acquisition.api.server import CaptureAPIServer
from media_acquisition.app.service import MediaAcquisitionService
from media_acquisition.config.settings import AcquisitionSettings, load_settings
from media_acquisition.core.logging_config import configure_logging
from media_acquisition.core.logging_utils import get_module_logger
from media_acquisition.domain.entities import MediaOptions, MediaRequest
from media_acquisition.domain.errors import AcquisitionError

logger = get_module_logger("Main")


def _request_from_args(args) -> MediaRequest:
    options = MediaOptions.from_mapping({
        "resolution": args.resolution,
        "bandwidth": args.bandwidth,
        "fps": args.fps,
        "min_fps": args.min_fps,
        "max_fps": args.max_fps,
        "camera_device_id": args.camera_device_id,
        "mic_device_id": args.mic_device_id,
        "desktop_source_id": args.desktop_source_id,
        "fake_device": args.fake_device,
    })
    return MediaRequest.create(kinds=args.kinds, options=options)


async def acquire_once(service: MediaAcquisitionService, request: MediaRequest) -> int:
    try:
        tracks = await service.acquire(request)
    except AcquisitionError as exc:
        print(json.dumps({"error": exc.to_payload()}, indent=2))
        return 1

    try:
        print(json.dumps({
            "tracks": [track.summary() for track in tracks],
            "availability": service.current_availability().as_dict(),
        }, indent=2))
    finally:
        service.release(tracks)
    return 0


async def serve(service: MediaAcquisitionService, settings: AcquisitionSettings) -> int:
    server = CaptureAPIServer(service, host=settings.api_host, port=settings.api_port)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler for %s unavailable on this platform", sig)

    await server.start()
    try:
        await stop_event.wait()
    finally:
        await server.stop()
    return 0


async def main(argv: Optional[Sequence[str]] = None) -> int:
    settings, args = load_settings(argv)
    configure_logging(
        level=settings.log_level,
        console=settings.console_output,
        log_file=settings.log_file,
    )
    logger.debug("Settings loaded: %s", settings)

    service = MediaAcquisitionService.from_settings(settings)
    if args.serve:
        return await serve(service, settings)
    try:
        request = _request_from_args(args)
    except ValueError as exc:
        logger.error("Invalid request: %s", exc)
        return 2
    return await acquire_once(service, request)


def run(argv: Optional[Sequence[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(run())
