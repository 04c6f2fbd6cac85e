"""
Command-Line Interface for tts-convert.

This module runs the same validation and synthesis pipeline as the HTTP
endpoint without a server, and can also start the server or prune old
artifacts.

Usage Examples:
    # Single text synthesis (writes the artifact, optionally copies it)
    tts-convert "Hello, world!" --out hello.mp3

    # Validate only, no provider call
    tts-convert --text "Test" --dry-run --json

    # Run the HTTP service (PORT / HOST honoured)
    tts-convert --serve --port 3000

    # Remove artifacts older than one hour
    tts-convert --cleanup 3600

Exit codes:
    0  success
    1  synthesis, storage or configuration failure
    2  text rejected by validation

Environment Variables:
    OPENAI_API_KEY: Provider credential
    TTS_CONVERT_PROVIDER: openai | fake
    TTS_CONVERT_STORAGE_DIR: Artifact directory
    PORT / HOST: Listen address for --serve
"""

from __future__ import annotations

import argparse
import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from dotenv import load_dotenv

from tts_convert.core.config import ConfigValidationError, load_settings
from tts_convert.core.errors import ErrorCode, SynthesisError, ValidationError
from tts_convert.core.logging import configure_logging, fail, get_logger, info, set_request_id
from tts_convert.services.synthesis import SynthesisDelegate
from tts_convert.services.validators import ensure_valid
from tts_convert.tts.storage import ArtifactStore

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Optional list of arguments (defaults to sys.argv).

    Returns:
        Parsed argument namespace with all CLI options.
    """
    parser = argparse.ArgumentParser(description="tts-convert CLI (text to MP3)")

    # Input options
    parser.add_argument("text_pos", nargs="?", help="Text to synthesize (positional)")
    parser.add_argument("--text", help="Text to synthesize")

    # Output options
    parser.add_argument("--out", help="Copy the generated MP3 to this path")

    # Execution modes
    parser.add_argument("--dry-run", action="store_true",
                        help="Validate and summarize without calling the provider")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON summary")

    # Service management
    parser.add_argument("--serve", action="store_true",
                        help="Run the HTTP service")
    parser.add_argument("--host", help="Listen host for --serve")
    parser.add_argument("--port", type=int, help="Listen port for --serve")
    parser.add_argument("--cleanup", type=float, metavar="SECONDS",
                        help="Delete artifacts older than SECONDS and exit")

    return parser.parse_args(argv)


def _emit(payload: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


def _config_failed(log, e: ConfigValidationError, as_json: bool) -> int:
    fail(log, "config_invalid", error=str(e))
    _emit({"ok": False, "error": str(e), "code": ErrorCode.CONFIG_INVALID}, as_json)
    return EXIT_FAILED


def _serve(args: argparse.Namespace) -> int:
    """Run uvicorn on the configured (or overridden) address."""
    import uvicorn

    try:
        server = load_settings().get_app_config().server
    except ConfigValidationError as e:
        return _config_failed(get_logger("tts-convert.cli"), e, args.json)
    host = args.host or server.host
    port = args.port or server.port
    uvicorn.run("tts_convert.main:app", host=host, port=port)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Orchestrates the CLI workflow:
        1. Parse arguments, load .env and configure logging
        2. Handle service commands (--serve, --cleanup)
        3. Validate the text with the HTTP rule set
        4. Handle dry-run mode (if requested)
        5. Synthesize, store, and optionally copy to --out

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Exit code (see module docstring).
    """
    args = _parse_args(argv)
    load_dotenv()

    if args.serve:
        return _serve(args)

    configure_logging()
    log = get_logger("tts-convert.cli")
    set_request_id(str(uuid4())[:12])

    try:
        config = load_settings().get_app_config()
    except ConfigValidationError as e:
        return _config_failed(log, e, args.json)
    store = ArtifactStore(config.storage.base_dir)

    if args.cleanup is not None:
        result = store.cleanup(args.cleanup)
        _emit({"ok": True, "cleanup": result}, args.json)
        return EXIT_OK

    text = args.text if args.text is not None else args.text_pos

    try:
        request = ensure_valid({"text": text} if text is not None else {})
    except ValidationError as e:
        _emit(e.to_response(), args.json)
        return EXIT_INVALID

    if args.dry_run:
        payload = {
            "ok": True,
            "dry_run": True,
            "text_len": len(request.text),
            "provider": config.provider.name,
            "model": config.provider.model,
            "voice": config.provider.voice,
        }
        info(log, "dry_run", chars=len(request.text), provider=config.provider.name)
        _emit(payload, args.json)
        print("DRY_RUN_OK")
        return EXIT_OK

    from tts_convert.tts.provider import create_provider

    try:
        provider = create_provider(config.provider)
    except ConfigValidationError as e:
        return _config_failed(log, e, args.json)

    delegate = SynthesisDelegate(
        provider=provider,
        store=store,
        model=config.provider.model,
        voice=config.provider.voice,
        text_preview_chars=config.logging.text_preview_chars,
    )

    try:
        artifact = delegate.convert(request.text)
    except SynthesisError as e:
        _emit({"ok": False, "error": e.message, "code": e.code}, args.json)
        return EXIT_FAILED

    out = artifact.file_path
    if args.out:
        out_path = Path(args.out)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(artifact.file_path, out_path)
        except OSError as e:
            fail(log, "copy_failed", out=str(out_path), error=str(e))
            _emit({"ok": False, "error": str(e)}, args.json)
            return EXIT_FAILED
        out = str(out_path)

    _emit({"ok": True, "file": artifact.file_name, "out": out, "bytes": artifact.size}, args.json)
    print("CLI_OK")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
