# main.py
import argparse
import sys

from loguru import logger

from config_home import load_environment, load_settings, models_json_path
from logging_setup import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="wscode - LLM assistant that reads, searches and edits files inside one project root"
    )
    parser.add_argument("--root", default=None, help="Project root directory (default: current directory)")
    parser.add_argument("--config", default=None, help="Path to model config JSON (default: ~/.wscode/models.json)")
    parser.add_argument("--model", help="Model name to use (optional; defaults from config)")
    parser.add_argument("--query", help="Single-shot question to answer (optional)")
    parser.add_argument("--max-rounds", type=int, default=None,
                        help="Cap on LLM calls per prompt (default: settings.json, else unlimited)")
    parser.add_argument("--log-level", default=None, help="Log file level (DEBUG/INFO/WARNING/...)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Also print INFO logs to stderr")
    return parser


def build_chat(args, settings):
    # imported late so .env is loaded before any gateway reads credentials
    from adapters.openai_compat import OpenAICompatGateway
    from agent import Chat
    from models import ModelRegistry
    from tools.registry import build_base_registry

    models = ModelRegistry(args.config or str(models_json_path()))
    model = models.get(args.model or settings.get("model"))
    registry = build_base_registry(args.root)
    max_rounds = args.max_rounds if args.max_rounds is not None else settings.get("max_rounds")
    return Chat(OpenAICompatGateway(model), registry, max_rounds=max_rounds), model


def repl(chat, model) -> None:
    print(f"Model: {model.name} ({model.provider})  |  Root: {chat.registry.root}")
    print(f"Tools: {', '.join(chat.available_tools())}")
    print("Commands: /tools  /history  /clear  /exit   (Ctrl+C to exit)")
    while True:
        try:
            q = input("you> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("bye!")
            break
        if not q:
            continue
        if q in ("/exit", "/quit"):
            print("bye!")
            break
        if q == "/tools":
            print(", ".join(chat.available_tools()))
            continue
        if q == "/clear":
            chat.clear_history()
            print("(history cleared)")
            continue
        if q == "/history":
            for m in chat.get_history()[1:]:
                if m.tool_calls:
                    print(f"[{m.role}] → " + ", ".join(f"{tc.name}({tc.raw_arguments})" for tc in m.tool_calls))
                else:
                    text = (m.content or "").strip().replace("\n", " ")
                    print(f"[{m.role}] {text[:160]}{'…' if len(text) > 160 else ''}")
            continue
        try:
            ans = chat.send_prompt(q)
        except KeyboardInterrupt:
            # the tool that was running may still have completed its side effect
            print("[interrupted]")
            continue
        except Exception as e:
            logger.opt(exception=True).info("REPL turn failed: {}", e)
            print(f"[error] {e}")
            continue
        print(f"assistant> {ans or ''}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    load_environment()
    settings = load_settings()
    configure_logging(
        args.log_level or settings.get("log_level"),
        console_level="INFO" if args.verbose else "WARNING",
    )

    try:
        chat, model = build_chat(args, settings)
    except Exception as e:
        logger.error("start-up failed: {}", e)
        print(f"[error] {e}", file=sys.stderr)
        return 2

    if args.query:
        try:
            print(chat.send_prompt(args.query) or "")
        except Exception as e:
            print(f"[error] {e}", file=sys.stderr)
            return 1
        return 0

    repl(chat, model)
    return 0


if __name__ == "__main__":
    sys.exit(main())
