"""
Example: Using OpenAI reasoning models with different reasoning efforts.

Demonstrates:
1. Varying reasoning effort on a reasoning model (buffered).
2. Streaming the same question with a legacy model and a temperature.

Requirements:
- OPENAI_API_KEY environment variable
"""

import asyncio

from api_tutor import (
    ConversationTurn,
    Orchestrator,
    ReasoningEffort,
    RequestOptions,
    ResponsesClient,
    TutorError,
)
from api_tutor.config import get_api_key

TURN = ConversationTurn(
    "You are a helpful assistant skilled at mathematical reasoning.",
    "A train leaves Station A at 2:00 PM traveling at 60 mph toward Station B. "
    "The stations are 180 miles apart. At what time will the train reach Station B?",
)


async def reasoning_with_efforts(orchestrator: Orchestrator):
    print("=== Reasoning Effort Levels ===\n")

    for effort in ReasoningEffort:
        print(f"\n--- Effort: {effort} ---")
        options = RequestOptions(model="gpt-5-mini", reasoning_effort=effort)
        try:
            response = await orchestrator.respond_once(TURN, options)
            print(response.content)
        except TutorError as e:
            print(f"Error: {e}")


async def legacy_with_temperature(orchestrator: Orchestrator):
    print("\n\n=== Legacy model, streamed ===\n")

    options = RequestOptions(model="gpt-4.1-mini", temperature=0.2)
    try:
        async for delta in orchestrator.respond_stream(TURN, options):
            print(delta, end="", flush=True)
        print()
    except TutorError as e:
        print(f"Error: {e}")


async def main():
    """Run all reasoning examples in sequence."""
    async with ResponsesClient(api_key=get_api_key()) as client:
        orchestrator = Orchestrator(client)
        await reasoning_with_efforts(orchestrator)
        await legacy_with_temperature(orchestrator)


if __name__ == "__main__":
    print("OpenAI Reasoning Models Demo")
    print("=" * 50)

    asyncio.run(main())
