"""
Demo script for the prompt optimization engine.

Runs the heuristic optimizer on a short prompt and prints the before/after
assessment. When Azure OpenAI credentials are set, the configured deployment
also powers the ai_rewrite technique.

Usage:
    export PROMPTMASTER_AZURE_OPENAI_ENDPOINT="https://YOUR_INSTANCE.openai.azure.com"
    export PROMPTMASTER_AZURE_OPENAI_API_KEY="your-api-key"

    python server/examples/optimizer_demo.py
"""

import asyncio
import logging

from promptmaster_server.core.optimizer import OptimizationContext, OptimizationEngine


async def main():
    """Run optimization demo."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    engine = OptimizationEngine.from_settings()

    original_prompt = "Write a summary of this text."
    context = OptimizationContext(domain="research", user_level="beginner")

    print("Original prompt:")
    print("-" * 60)
    print(original_prompt)
    print("-" * 60)
    print()

    result = await engine.optimize(original_prompt, context)

    before = result.quality_improvement.before
    after = result.quality_improvement.after

    print("OPTIMIZATION COMPLETE")
    print("=" * 60)
    print()

    print(f"Score: {before.score:.2f} ({before.level}) -> {after.score:.2f} ({after.level})")
    print(f"Improvement: {result.improvement:+.2f}")
    print(f"Cost impact per request: ${result.cost_impact:.6f}")
    print()

    print("Optimized prompt:")
    print("-" * 60)
    print(result.optimized_prompt)
    print("-" * 60)
    print()

    print("Applied techniques:")
    for i, applied in enumerate(result.applied_optimizations, 1):
        print(f"{i}. [{applied.type}] {applied.technique} (+{applied.improvement:.3f})")
    print()

    print("Remaining suggestions:")
    for suggestion in result.suggestions:
        print(f"- {suggestion}")


if __name__ == "__main__":
    asyncio.run(main())
