"""
ask.py — Chat with a PDF: question in, grounded answer out
==========================================================

Usage:
  docchat-ask report.pdf "What are bots?"

  # Switch models with --model
  docchat-ask report.pdf "query" --model claude
  docchat-ask report.pdf "query" --model llama3

  # No remote model at all
  docchat-ask report.pdf "query" --local

  # Interactive mode (keep asking without re-reading the PDF)
  docchat-ask report.pdf --model deepseek

  # List available presets
  docchat-ask --list-models
"""

import logging
import sys
from pathlib import Path

from docchat.context import assemble
from docchat.generator import (
    AnswerOrchestrator,
    RemoteAnswerGenerator,
    backend_from_preset,
    list_presets,
    print_answer,
)
from docchat.pdf_parser import ExtractedDocument, parse_pdf


def parse_args(argv: list[str]) -> dict:
    """
    Simple arg parser (no argparse dependency for clarity).

    Parses:
      docchat-ask <file.pdf> [question] [--model preset] [--local]
                  [--show-context] [--verbose] [--list-models]
    """
    args = {
        "filepath": None,
        "query": None,
        "model": "claude",
        "local": False,
        "show_context": False,
        "verbose": False,
        "list_models": False,
    }
    flags = {
        "--local": "local",
        "--show-context": "show_context",
        "--verbose": "verbose",
        "--list-models": "list_models",
    }

    positional = []
    i = 0
    while i < len(argv):
        if argv[i] == "--model" and i + 1 < len(argv):
            args["model"] = argv[i + 1]
            i += 2
        elif argv[i] in flags:
            args[flags[argv[i]]] = True
            i += 1
        elif argv[i].startswith("--"):
            i += 1  # skip unknown flags
        else:
            positional.append(argv[i])
            i += 1

    if len(positional) >= 1:
        args["filepath"] = positional[0]
    if len(positional) >= 2:
        args["query"] = positional[1]

    return args


def build_orchestrator(model_preset: str | None) -> AnswerOrchestrator:
    """Remote model if it can be set up, local answers otherwise."""
    if model_preset is None:
        return AnswerOrchestrator()
    try:
        backend = backend_from_preset(model_preset)
    except (ValueError, ImportError) as e:
        print(f"  Remote model unavailable ({e}).\n  Answering locally.")
        return AnswerOrchestrator()
    print(f"  Generator ready: {backend.name}/{model_preset}")
    return AnswerOrchestrator(primary=RemoteAnswerGenerator(backend))


def ask(question: str, doc: ExtractedDocument, orchestrator: AnswerOrchestrator,
        show_context: bool = False):
    """Run retrieval + generation for a single question."""
    result = assemble(question, doc.text, doc.pages)

    if show_context:
        print(f"\n{'─'*70}")
        print(f"  Context ({len(result.context):,} chars, pages {result.pages}):")
        print(f"{'─'*70}")
        print(result.context)

    answer = orchestrator.answer(result, question)
    print_answer(answer)
    return answer


def main():
    """Entry point for `docchat-ask`"""
    args = parse_args(sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args["verbose"] else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args["list_models"]:
        print(list_presets())
        print("\nUsage: docchat-ask file.pdf \"question\" --model <preset>")
        sys.exit(0)

    if not args["filepath"]:
        print("Usage:")
        print('  docchat-ask report.pdf "What are bots?"')
        print('  docchat-ask report.pdf "query" --model llama3')
        print('  docchat-ask report.pdf --local')
        print('  docchat-ask --list-models')
        sys.exit(1)

    filepath = Path(args["filepath"])
    model_preset = None if args["local"] else args["model"]

    print(f"\n{'='*70}")
    print(f"  DOCUMENT CHAT")
    print(f"  File:  {filepath.name}")
    print(f"  Model: {model_preset or 'local'}")
    print(f"{'='*70}")

    try:
        doc = parse_pdf(filepath)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"  {doc.total_pages} pages, {len(doc.text):,} chars")

    orchestrator = build_orchestrator(model_preset)

    # Single question mode
    if args["query"]:
        ask(args["query"], doc, orchestrator, args["show_context"])
        return

    # Interactive mode
    print(f"\n{'='*70}")
    print(f"  Ready! Ask questions about the document.")
    print(f"  Type 'quit' to stop, 'switch <preset>' to change model.")
    print(f"{'='*70}")

    while True:
        try:
            user_input = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if not user_input:
            continue
        if user_input.lower() in ("quit", "exit", "q"):
            print("Bye!")
            break

        if user_input.lower().startswith("switch "):
            new_preset = user_input.split(None, 1)[1].strip()
            orchestrator = build_orchestrator(None if new_preset == "local" else new_preset)
            continue

        if user_input.lower() == "models":
            print(list_presets())
            continue

        ask(user_input, doc, orchestrator, args["show_context"])
