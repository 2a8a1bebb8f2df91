# eximchat/scripts/chat_cli.py

import argparse
import asyncio
import httpx
from eximchat.core.config import settings
from eximchat.services.chat_api_client import AuthenticationRequired, ChatApiClient
from eximchat.services.conversation_controller import ConversationController
from eximchat.services.gemini import GeminiClient
from eximchat.services.languages import DEFAULT_LANGUAGE, is_supported

HELP = """Commands:
  /new              start a new conversation
  /list             show conversations
  /open <id>        switch conversation
  /delete <id>      delete a conversation
  /edit <id> <text> edit one of your messages and regenerate the answer
  /quit             exit
Anything else is sent as a question."""


def print_messages(controller: ConversationController):
    for turn in controller.messages:
        tag = " (edited)" if turn.edited else ""
        print(f"[{turn.sender}] {turn.id or '-'}{tag}\n  {turn.text}")


async def run(args):
    async with httpx.AsyncClient(base_url=args.api, timeout=settings.HTTP_TIMEOUT) as http:
        api = ChatApiClient(http)
        if args.username:
            if args.register:
                await api.register(args.username, args.password)
            else:
                await api.login(args.username, args.password)
            print(f"✅ Logged in as {args.username}")

        controller = ConversationController(api, GeminiClient(settings, http_client=http), language=args.language)
        await controller.load_conversations()
        print_messages(controller)
        print(HELP)

        while True:
            line = (await asyncio.to_thread(input, "> ")).strip()
            if not line:
                continue
            command, _, rest = line.partition(" ")
            try:
                if command == "/quit":
                    break
                elif command == "/new":
                    controller.new_conversation()
                    print_messages(controller)
                elif command == "/list":
                    for c in controller.conversations:
                        print(f"{c.conversation_id}  {c.updated_at}  {c.last_message}")
                elif command == "/open":
                    await controller.select_conversation(rest.strip())
                    print_messages(controller)
                elif command == "/delete":
                    await controller.delete_conversation(rest.strip())
                    print_messages(controller)
                elif command == "/edit":
                    message_id, _, text = rest.partition(" ")
                    reply = await controller.edit_message(message_id, text)
                    if reply:
                        print(f"[ai] {reply.text}")
                else:
                    reply = await controller.send_message(line)
                    if reply:
                        print(f"[ai] {reply.text}")
            except AuthenticationRequired:
                print("❌ Not authorized, log in again with --username/--password")
            except KeyError:
                print("❌ No such message in this conversation")
            except ValueError as e:
                print(f"❌ {e}")
            except httpx.HTTPStatusError as e:
                print(f"❌ API error: {e.response.status_code} {e.response.text}")


def main():
    parser = argparse.ArgumentParser(description="Terminal client for the trade assistant")
    parser.add_argument("--api", default=settings.API_BASE_URL)
    parser.add_argument("--username")
    parser.add_argument("--password", default="")
    parser.add_argument("--register", action="store_true")
    parser.add_argument("--language", default=DEFAULT_LANGUAGE)
    args = parser.parse_args()
    if not is_supported(args.language):
        parser.error(f"unsupported language: {args.language}")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
