"""
Command-line interface for keyphrase extraction.

Reads event documents from a JSON array or JSONL file and extracts keyphrases
one document at a time, waiting between documents to respect LLM rate limits.

Usage:
    # Keyphrases for {"id", "text"} records
    event-keyphrases events.jsonl

    # EventKeyData for {"id", "title", "detail"} records
    event-keyphrases events.json --key-data --output key_data.jsonl

    # With model override and no delay
    event-keyphrases events.jsonl --model ollama/qwen2.5:7b --delay 0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from event_recommender.config import Settings, settings
from event_recommender.enhancement.pipeline import KeyphrasePipeline, build_pipeline
from event_recommender.llm.llm_client import parse_model_string
from event_recommender.logging_config import setup_logging
from event_recommender.models.keyphrases import RawDocument


# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


# ============================================================================
# CLI FUNCTIONS
# ============================================================================

def load_records(input_path: Path) -> List[dict]:
    """
    Load records from a JSON array or a JSONL file.

    Raises:
        ValueError: If the file is neither
    """
    content = input_path.read_text(encoding="utf-8")
    stripped = content.lstrip()

    if stripped.startswith("["):
        records = json.loads(content)
    else:
        records = [json.loads(line) for line in content.splitlines() if line.strip()]

    if not all(isinstance(r, dict) for r in records):
        raise ValueError("Every record must be a JSON object")
    return records


def process_records(
    pipeline: KeyphrasePipeline,
    records: List[dict],
    key_data: bool = False,
    delay_seconds: float = 1.0,
    verbose: bool = False
) -> List[dict]:
    """
    Run extraction over records sequentially.

    Args:
        pipeline: Configured extraction pipeline
        records: {"id", "text"} records, or {"id", "title", "detail"} with key_data
        key_data: Produce EventKeyData instead of extraction results
        delay_seconds: Pause between records
        verbose: Print progress to stderr

    Returns:
        Serialized results (camelCase keys)
    """

    def report(idx: int, record_id: str) -> None:
        if verbose:
            print(f"[{idx + 1}/{len(records)}] {record_id}", file=sys.stderr)

    if not key_data:
        documents = [RawDocument(id=str(r["id"]), text=r.get("text", "")) for r in records]
        results = pipeline.extract_batch(
            documents,
            delay_seconds=delay_seconds,
            on_start=lambda idx, document: report(idx, document.id),
        )
        return [r.model_dump(by_alias=True) for r in results]

    results = []
    for idx, record in enumerate(records):
        if idx > 0 and delay_seconds > 0:
            pipeline.sleep(delay_seconds)
        report(idx, str(record["id"]))
        data = pipeline.extract_key_data(
            str(record["id"]),
            title=record.get("title", ""),
            detail=record.get("detail", ""),
        )
        results.append(data.model_dump(by_alias=True))
    return results


def write_output(results: List[dict], output_path: Optional[Path]):
    """Write results as JSONL to a file or stdout."""
    if not output_path:
        for result in results:
            print(json.dumps(result, ensure_ascii=False))
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        for result in results:
            f.write(json.dumps(result, ensure_ascii=False) + "\n")

    logger.info("output_written", path=str(output_path), count=len(results))


def build_settings(model: Optional[str], no_ai: bool) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    update = {}
    if model:
        provider, model_name = parse_model_string(model)
        update["llm_model"] = model_name
        if provider:
            update["llm_provider"] = provider
    if no_ai:
        update["enable_ai_enhancement"] = False
    return settings.model_copy(update=update) if update else settings


# ============================================================================
# MAIN CLI
# ============================================================================

def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Keyphrase extraction CLI - TextRank candidates refined by an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s events.jsonl
  %(prog)s events.json --key-data --output key_data.jsonl
  %(prog)s events.jsonl --model gemini/gemini-2.0-flash --delay 2
  %(prog)s events.jsonl --no-ai

Supported models:
  - gemini/<model>        (e.g., gemini/gemini-2.0-flash) - requires LLM_API_KEY
  - ollama/<model>:<tag>  (e.g., ollama/qwen2.5:7b)
  - openai/<model>        (e.g., openai/gpt-4o) - requires LLM_API_KEY
        """
    )

    parser.add_argument("input", type=str, help="JSON array or JSONL file of event records")
    parser.add_argument(
        "--model", "-m", type=str, default=None,
        help="Override LLM model (format: provider/model-name)"
    )
    parser.add_argument(
        "--key-data", "-k", action="store_true",
        help="Read {id, title, detail} records and output EventKeyData"
    )
    parser.add_argument(
        "--delay", "-d", type=float, default=None,
        help=f"Seconds to wait between records (default: {settings.batch_delay_seconds})"
    )
    parser.add_argument("--no-ai", action="store_true", help="Lexical extraction only")
    parser.add_argument(
        "--output", "-o", type=str, default=None,
        help="Output JSONL file path (default: stdout)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    args = parser.parse_args(argv)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        config = build_settings(args.model, args.no_ai)
        pipeline = build_pipeline(config)
        delay = args.delay if args.delay is not None else config.batch_delay_seconds

        records = load_records(input_path)
        logger.info("processing_records", count=len(records), key_data=args.key_data)

        results = process_records(
            pipeline,
            records,
            key_data=args.key_data,
            delay_seconds=delay,
            verbose=args.verbose
        )

        write_output(results, Path(args.output) if args.output else None)

        if args.verbose:
            print(f"\n✓ Processed {len(results)} records", file=sys.stderr)

    except Exception as e:
        logger.error("cli_failed", error=str(e), exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
