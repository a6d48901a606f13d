from __future__ import annotations

import argparse
import asyncio
import logging

from api_tutor import ConversationTurn, Orchestrator, RequestOptions, ResponsesClient
from api_tutor.config import DEFAULT_SYSTEM_PROMPT, Settings

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


async def single_tool_roundtrip(prompt: str, model: str) -> None:
    """
    Run a single tool-calling roundtrip.

    1) Offer the tool catalog with the user prompt
    2) Let the model propose a tool call
    3) Execute the tool locally and re-inject call + result
    4) Stream the model's final answer
    """
    settings = Settings.from_env()
    async with ResponsesClient(api_key=settings.require_api_key()) as client:
        orchestrator = Orchestrator(client)
        turn = ConversationTurn(DEFAULT_SYSTEM_PROMPT, prompt)
        options = RequestOptions(model=model)

        # Step 1 + 2
        detected = await orchestrator.detect(turn, options)
        if detected.tool_call is None:
            logger.warning(f"Model answered directly: {detected.content}")
            return

        call = detected.tool_call
        logger.info("Model wants %s(%s)", call.name, call.arguments)

        # Step 3 + 4
        async for delta in orchestrator.continue_with_tool(turn, call, options):
            print(delta, end="", flush=True)
        print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--prompt", default="What time is it in Tokyo right now?")
    parser.add_argument("--model", default="gpt-4.1-mini")  # "gpt-5-mini", "o4-mini"
    args = parser.parse_args()

    asyncio.run(single_tool_roundtrip(args.prompt, args.model))
