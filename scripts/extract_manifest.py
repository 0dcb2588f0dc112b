#!/usr/bin/env python3
"""
Run the manifest extraction pipeline on a local photo, without Twilio.

What it does
- Reads an image from disk
- Enhances it and sends it to the extraction model (same code path as the webhook)
- Prints the normalized 14-field record as JSON
- Optionally writes the enhanced JPEG and appends the row to the Google Sheet

Requirements
- OPENAI_API_KEY (and SHEET_ID / GS_CLIENT_EMAIL / GS_PRIVATE_KEY for --append),
  read from the environment or a .env file

Usage examples
python scripts/extract_manifest.py foto.jpg
python scripts/extract_manifest.py foto.jpg --enhanced-out /tmp/enhanced.jpg
python scripts/extract_manifest.py foto.jpg --append
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from manifest_bot.config import Settings, get_settings
from manifest_bot.exceptions import ExternalServiceError, PipelineError
from manifest_bot.models import RawImage
from manifest_bot.services.orchestration.manifest_pipeline import ManifestPipeline, describe_failure
from manifest_bot.services.sheets import SheetsService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Extract a waste-transport manifest from a local photo")
    p.add_argument("image", type=Path, help="Path to the manifest photo")
    p.add_argument("--enhanced-out", type=Path, default=None, help="Write the enhanced JPEG here")
    p.add_argument("--append", action="store_true", help="Append the resulting row to the Google Sheet")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


async def _run(args: argparse.Namespace, pipeline: ManifestPipeline, settings: Settings) -> int:
    content_type = mimetypes.guess_type(args.image.name)[0] or "application/octet-stream"
    raw = RawImage(data=args.image.read_bytes(), content_type=content_type)

    if args.enhanced_out:
        enhanced = await asyncio.to_thread(pipeline.enhancer.enhance, raw)
        args.enhanced_out.write_bytes(enhanced.data)
        print(f"Enhanced image written to {args.enhanced_out}", file=sys.stderr)

    record = await pipeline.extract_from_image(raw)
    print(json.dumps(record.as_dict(), ensure_ascii=False, indent=2))

    if args.append:
        updated = await SheetsService(settings.sheet_config()).append_row_async(record.to_row())
        print(f"Appended to {updated or settings.SHEET_RANGE}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    if not args.image.is_file():
        print(f"Error: image not found: {args.image}", file=sys.stderr)
        return 1
    settings = get_settings()
    pipeline = ManifestPipeline(settings.pipeline_config())
    try:
        return asyncio.run(_run(args, pipeline, settings))
    except (PipelineError, ExternalServiceError) as exc:
        print(describe_failure(exc, pipeline.config.error_detail_max_chars), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
