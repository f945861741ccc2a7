#!/usr/bin/env python3
"""
Demo script for consensus chat.

Asks every configured provider the same question, then shows each raw
answer, the contribution percentages and the reconciled answer.

Usage:
    python scripts/demo.py "What is the capital of France?" English
"""

import asyncio
import sys
import time

from consensus_chat.config import configure_logging, settings
from consensus_chat.entities import AggregationResult
from consensus_chat.services import AggregationService

DEFAULT_QUESTION = "What is the capital of France?"
FOLLOW_UP = "And what is its population?"


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_result(result: AggregationResult, duration_ms: float) -> None:
    print("\n📨 Raw responses:")
    for provider, text in result.raw_responses.items():
        print(f"  [{provider}] {text[:100]}")

    print("\n📊 Contributions:")
    if not result.contributions:
        print("  (none)")
    for provider, share in sorted(result.contributions.items(), key=lambda item: -item[1]):
        print(f"  {provider:<10} {share:6.2f}%")

    print(f"\n✅ Answer ({result.policy}{', degraded' if result.degraded else ''}, {duration_ms:.0f}ms):")
    print(f"  {result.answer}")


async def ask(service: AggregationService, session_key: str, question: str, language: str) -> None:
    print(f"\n❓ {question}")
    start = time.time()
    outcome = await service.ask(session_key, question, language)
    duration_ms = (time.time() - start) * 1000

    if outcome.rejected:
        print(f"\n⛔ {outcome.admission.reason}")
        return
    print_result(outcome.result, duration_ms)


async def demo(question: str, language: str) -> None:
    service = AggregationService.create()

    print_section("Providers")
    for provider, configured in service.provider_status().items():
        print(f"  {'✓' if configured else '✗'} {provider}")
    print(f"  Embedding model: {service.embedding_model}")
    print(f"  Selection policy: {settings.selection_policy}")

    try:
        print_section("Question")
        await ask(service, "demo-session", question, language)

        print_section("Follow-up (with history)")
        await ask(service, "demo-session", FOLLOW_UP, language)
    finally:
        await service.aclose()


def main() -> None:
    """Run the demo."""
    configure_logging("WARNING")
    question = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_QUESTION
    language = sys.argv[2] if len(sys.argv) > 2 else settings.default_language

    print("\n🚀 Consensus Chat Demo")
    print("=" * 70)

    try:
        asyncio.run(demo(question, language))
    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nSet at least one provider key (e.g. OPENAI_API_KEY) and COHERE_API_KEY")
        print("for embeddings, or EMBEDDING_BACKEND=ollama with a local Ollama server.")


if __name__ == "__main__":
    main()
