"""CLI entry point for formscan."""
import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

from formscan.agent.claude import ClaudeFiller
from formscan.browser.connection import BrowserConnection
from formscan.core.config import Settings
from formscan.core.logging import setup_logging
from formscan.extractor.errors import ExtractionError, FieldTimeoutError
from formscan.extractor.forms import FieldExtractor
from formscan.extractor.models import to_payload
from formscan.extractor.tree import HtmlDocument

logger = logging.getLogger(__name__)


def load_settings(path: Optional[str]) -> Settings:
    if path:
        return Settings.from_yaml(Path(path))
    return Settings()


def write_json(data: Any, out: Optional[str]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {out}")
    else:
        print(text)


def run_extract(args: argparse.Namespace, settings: Settings) -> int:
    config = settings.extractor
    if args.visible_only:
        config = config.model_copy(update={"visible_only": True})
    extractor = FieldExtractor(config)

    source: str = args.source
    if source.startswith(("http://", "https://")):
        connection = BrowserConnection(
            cdp_port=settings.browser.cdp_port, timeout_ms=settings.browser.timeout
        )
        if not connection.connect():
            logger.error("Failed to connect to Chrome. Start it with --remote-debugging-port first.")
            return 1
        try:
            page = connection.get_page()
            if not page.goto(source):
                return 1
            fields = extractor.extract(
                page.document(), scope=args.scope, wait_for=args.wait_for, timeout=args.timeout
            )
        finally:
            connection.disconnect()
    else:
        document = HtmlDocument(Path(source).read_text(encoding="utf-8"))
        fields = extractor.extract(
            document, scope=args.scope, wait_for=args.wait_for, timeout=args.timeout
        )

    write_json(to_payload(fields), args.out)
    return 0


def run_fill(args: argparse.Namespace, settings: Settings) -> int:
    fields = json.loads(Path(args.fields).read_text(encoding="utf-8"))
    context = Path(args.resume).read_text(encoding="utf-8")
    reference_date = date.fromisoformat(args.date) if args.date else None

    filler = ClaudeFiller(
        model=settings.claude.model,
        max_tokens=settings.claude.max_tokens,
        chunk_size=settings.fill.chunk_size,
        max_workers=settings.fill.max_workers,
        input_price_per_mtok=settings.fill.input_price_per_mtok,
        output_price_per_mtok=settings.fill.output_price_per_mtok,
    )
    result = filler.fill(fields, context, reference_date)

    logger.info(
        f"Tokens: {result.usage.input_tokens} in / {result.usage.output_tokens} out, "
        f"cost ${result.cost_usd:.4f}"
    )
    write_json(result.to_payload(), args.out)
    return 0


def main() -> int:
    """Extract form fields or fill them from a resume."""
    parser = argparse.ArgumentParser(
        description="Extract form fields from a page and fill them with Claude"
    )
    parser.add_argument("--config", "-c", help="Path to settings YAML file")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Extract form fields as JSON")
    extract.add_argument("source", help="HTML file, or URL to open in a CDP-connected Chrome")
    extract.add_argument("--out", "-o", help="Output JSON path (default: stdout)")
    extract.add_argument("--scope", help="Selector of the container to scan")
    extract.add_argument("--wait-for", help="Element id to wait for before scanning")
    extract.add_argument("--timeout", type=float, default=10.0, help="Wait timeout in seconds")
    extract.add_argument("--visible-only", action="store_true", help="Skip hidden controls")

    fill = sub.add_parser("fill", help="Fill extracted fields from a resume")
    fill.add_argument("fields", help="Fields JSON produced by 'extract'")
    fill.add_argument("--resume", "-r", required=True, help="Plain-text resume or context")
    fill.add_argument("--date", help="Reference date, YYYY-MM-DD (default: today)")
    fill.add_argument("--out", "-o", help="Output JSON path (default: stdout)")

    args = parser.parse_args()
    setup_logging("DEBUG" if args.debug else "INFO")
    settings = load_settings(args.config)

    try:
        if args.command == "extract":
            return run_extract(args, settings)
        return run_fill(args, settings)
    except FieldTimeoutError as e:
        logger.error(str(e))
        return 2
    except ExtractionError as e:
        logger.error(f"Extraction failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
