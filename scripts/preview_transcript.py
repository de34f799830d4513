#!/usr/bin/env python3
"""Live extraction check for the smartify pipeline.

Runs the five category extractors against a transcript using the real
OpenAI API and prints what a commit would create. Nothing is written to
the database.

Usage:
    python scripts/preview_transcript.py path/to/transcript.txt
    echo "I need to ship the beta ASAP" | python scripts/preview_transcript.py -
"""
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from services.extractors import build_extractors
from services.llm_client import LLMClient
from services.persistence import NotePersistenceGateway
from services.smartify_service import SmartifyService


def log(message: str) -> None:
    """Log with timestamp."""
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] {message}", file=sys.stderr)


def load_transcript(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


async def main(source: str) -> int:
    transcript = load_transcript(source)
    if not transcript.strip():
        log("Transcript is empty")
        return 1

    llm = LLMClient()
    service = SmartifyService(NotePersistenceGateway(), build_extractors(llm))

    log(f"Extracting with model={llm.model}, transcript_length={len(transcript)}")
    result = await service.run_extraction(transcript)

    log(f"Counts: {result.counts().model_dump(by_alias=True)}")
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))
