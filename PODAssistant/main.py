"""
main.py

Entry point and interactive CLI for the POD Assistant.

Usage:
    python -m PODAssistant.main                            # interactive REPL
    python -m PODAssistant.main --query "DKT-1001"         # single query
    python -m PODAssistant.main -q DKT-1001 --image pod.jpg
    python -m PODAssistant.main --db /tmp/dockets.db       # custom database

REPL commands:
    /upload <path>   upload a POD image for the active docket
    /reset           clear the active docket
    /state           show the session snapshot
    quit | exit      stop
"""

import argparse
import asyncio
import json
import logging
from typing import Iterable, Optional

from dotenv import load_dotenv

load_dotenv()

from PODAssistant.agents import GeminiAssistant, GeminiVisionVerifier
from PODAssistant.config import LOG_LEVEL
from PODAssistant.docket_store import DocketStore
from PODAssistant.engine import WorkflowEngine
from PODAssistant.images import PODImageError, load_pod_image
from PODAssistant.messages import Message
from PODAssistant.session import ConversationSession


logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

_STATUS_TAGS = {
    "loading": "(AI is thinking...)",
    "success": "[Verified by AI]",
    "error": "[Analysis Failed]",
}


def build_engine(db_path: Optional[str] = None) -> WorkflowEngine:
    """Wire the store and Gemini adapters into a workflow engine."""
    return WorkflowEngine(
        store=DocketStore(db_path),
        verifier=GeminiVisionVerifier(),
        assistant=GeminiAssistant(),
    )


def render_message(message: Message) -> str:
    speaker = "You" if message.role == "user" else "Assistant"
    lines = [f"[{speaker}]: {message.content}"]
    if message.image:
        lines.append("  (image attached)")
    if message.status:
        lines.append(f"  {_STATUS_TAGS[message.status]}")
    return "\n".join(lines)


def render(messages: Iterable[Message]) -> None:
    for message in messages:
        print(f"\n{render_message(message)}")


def print_snapshot(session: ConversationSession) -> None:
    print(json.dumps(session.snapshot().model_dump(mode="json"), indent=2))


async def upload_file(engine: WorkflowEngine, session: ConversationSession, path: str) -> None:
    try:
        image = load_pod_image(path)
    except PODImageError as exc:
        print(f"\nCannot upload {path}: {exc}")
        return
    render(await engine.upload_image(session, image))


async def interactive_loop(engine: WorkflowEngine, session_id: Optional[str] = None) -> None:
    """Start an interactive REPL for one conversation."""
    print("=" * 60)
    print("  POD Verification Assistant - Interactive Mode")
    print("  /upload <path>, /reset, /state; 'quit' or 'exit' to stop.")
    print("=" * 60)

    session = engine.open_session(session_id)
    render(session.messages)

    while True:
        try:
            line = (await asyncio.to_thread(input, "\n[You]: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            print("Exiting.")
            break

        if line.startswith("/upload"):
            path = line[len("/upload"):].strip()
            if not path:
                print("Usage: /upload <path>")
                continue
            await upload_file(engine, session, path)
        elif line == "/reset":
            render(await engine.reset(session))
        elif line == "/state":
            print_snapshot(session)
        else:
            emitted = await engine.submit_text(session, line)
            # The user's own line is already on screen.
            render(m for m in emitted if m.role != "user")

    engine.close_session(session.session_id)


async def run_single(
    engine: WorkflowEngine,
    query: Optional[str],
    image_path: Optional[str],
    session_id: Optional[str] = None,
) -> dict:
    """Run a query and/or an upload through a fresh session."""
    session = engine.open_session(session_id)
    errors = []
    if query:
        await engine.submit_text(session, query)
    if image_path:
        try:
            image = load_pod_image(image_path)
        except PODImageError as exc:
            logger.error("Cannot upload %s: %s", image_path, exc)
            errors.append(f"Cannot upload {image_path}: {exc}")
        else:
            await engine.upload_image(session, image)

    return {
        "errors": errors,
        "snapshot": session.snapshot().model_dump(mode="json", exclude={"active_docket"}),
        "active_docket": (
            session.state.active_docket.model_dump(mode="json")
            if session.state.active_docket
            else None
        ),
        "messages": [
            m.model_dump(mode="json", exclude={"image"}) for m in session.messages
        ],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="POD Verification Assistant CLI")
    parser.add_argument(
        "--query", "-q",
        type=str,
        default=None,
        help="Single utterance to run (non-interactive mode)",
    )
    parser.add_argument(
        "--image", "-i",
        type=str,
        default=None,
        help="POD image to upload after the query (non-interactive mode)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Path to the docket SQLite database",
    )
    parser.add_argument(
        "--session-id", "-s",
        type=str,
        default=None,
        help="Session identifier",
    )
    args = parser.parse_args()

    engine = build_engine(args.db)

    if args.query or args.image:
        result = asyncio.run(
            run_single(engine, args.query, args.image, session_id=args.session_id)
        )
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        asyncio.run(interactive_loop(engine, session_id=args.session_id))


if __name__ == "__main__":
    main()
