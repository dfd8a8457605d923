"""Minimal streaming chat demo (requires MISTRAL_API_KEY)."""

import asyncio

from mistral_chat import create_chat_controller


async def main() -> None:
    controller = create_chat_controller()
    controller.streaming_updated.subscribe(lambda text: print(f"\rAssistant: {text}", end="", flush=True))
    controller.error.subscribe(lambda message: print(f"\n[error] {message}"))
    for question in ["你好，请用一句话介绍一下自己。", "再用英文说一遍。"]:
        print("User:", question)
        await controller.send(question, streaming=True)
        print()
    controller.dispose()


if __name__ == "__main__":
    asyncio.run(main())
