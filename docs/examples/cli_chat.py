import asyncio
from typing import List

from dotenv import load_dotenv

from victry_ai import ClaudeCompletion, CompletionRequest, LLMRequestError, build_default_registry
from victry_ai.llm_core.messages import ConversationMessage

# Load environment variables
load_dotenv()


async def main() -> None:
    """
    Main function to run the CLI chat against Claude, with the resume tools enabled.
    """
    print("Welcome to the CLI Chat (Claude)!")

    completion = ClaudeCompletion()
    registry = build_default_registry()
    print(f"Using {completion.settings.default_model} with tools: {', '.join(registry.tools)}")

    history: List[ConversationMessage] = []

    print("\nStart chatting! Type 'exit' or 'quit' to stop.")
    while True:
        user_input = input("\nYou: ").strip()
        if user_input.lower() in ["exit", "quit"]:
            print("Goodbye!")
            break

        if not user_input:
            continue

        history.append(ConversationMessage(role="user", content=user_input))
        request = CompletionRequest(
            messages=history,
            system="You are a helpful resume assistant.",
            tools=registry.descriptors,
        )

        try:
            response = await completion.complete(request, tool_handlers=registry.handlers)
        except LLMRequestError as e:
            history.pop()
            print(f"An error occurred: {e.message}")
            continue

        for result in response.tool_results or []:
            print(f"[tool] {result['input']['name']} -> {result['output']}")
        print(f"Assistant: {response.content}")
        if response.content:
            history.append(ConversationMessage(role="assistant", content=response.content))


if __name__ == "__main__":
    asyncio.run(main())
