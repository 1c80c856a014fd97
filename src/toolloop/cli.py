"""
CLI entrypoint for the toolloop library.

Examples:
    toolloop list-models
    toolloop list-tools
    toolloop run --model openai/gpt-5-mini --prompt "What time is it in Tokyo?" --tool get_current_time
    toolloop run --local --prompt "Hello"
"""

from __future__ import annotations

import argparse
import base64
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from .agent import Agent, AgentConfig, BackupModelConfig, ModelConfig, StreamingEvent
from .env import Credentials
from .exceptions import ConfigurationError
from .models import ALL_MODELS, DEFAULT_MODEL, ProviderKind
from .providers import LocalProvider, Provider
from .toolbox import default_registry
from .types import ImageInput


def _local_provider(
    kind: ProviderKind, credentials: Credentials, provider_order: Optional[List[str]]
) -> Provider:
    return LocalProvider()


def _image_input(value: str) -> ImageInput:
    if value.startswith(("http://", "https://")):
        return ImageInput.from_url(value)
    path = Path(value)
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    data = base64.b64encode(path.read_bytes()).decode("utf-8")
    return ImageInput.from_base64(data, mime_type=mime_type)


def list_models() -> None:
    for info in ALL_MODELS:
        flags = []
        if info.image_output:
            flags.append("image output")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(f"- {info.id}{suffix}")


def list_tools() -> None:
    for tool in default_registry().list_tools():
        schema = tool.schema()
        print(f"- {schema['name']}: {schema['description']}")


def _stream_printer(event: StreamingEvent) -> None:
    data = event.data
    if event.kind == "think":
        print(f"[think] {data['content']}", file=sys.stderr, flush=True)
    elif event.kind == "tool_start":
        print(f"[tool] {data['tool']} {data['input']}", file=sys.stderr, flush=True)
    elif event.kind == "tool_complete":
        print(
            f"[tool] {data['tool']} done in {data['duration']:.2f}s", file=sys.stderr, flush=True
        )
    elif event.kind == "error":
        print(f"[error] {data['error']}", file=sys.stderr, flush=True)


def run_agent(args: argparse.Namespace) -> int:
    backup = BackupModelConfig(model=args.backup) if args.backup else None
    model_config = ModelConfig(
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        max_retries=args.retries,
        json_mode=args.json,
        backup_model=backup,
    )
    config = AgentConfig(
        system_prompt=args.system_prompt,
        model=model_config,
        max_iterations=args.max_iterations,
        tools=args.tool or [],
        request_timeout=args.timeout,
    )
    agent = Agent(
        config=config,
        credentials={} if args.local else None,
        streaming_callback=_stream_printer if args.stream else None,
        provider_factory=_local_provider if args.local else None,
    )

    images = [_image_input(value) for value in args.image or []]
    result = agent.run(args.prompt, images=images or None)

    if args.output_json:
        print(result.to_json())
    else:
        print(result.response)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tool-calling agent runner")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO level logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    models_parser = subparsers.add_parser("list-models", help="List known model identifiers")
    models_parser.set_defaults(func="list-models")

    tools_parser = subparsers.add_parser("list-tools", help="List pre-registered tools")
    tools_parser.set_defaults(func="list-tools")

    run_parser = subparsers.add_parser("run", help="Run the agent once")
    run_parser.add_argument(
        "--model", default=DEFAULT_MODEL, help="Model id in provider/model-name format"
    )
    run_parser.add_argument("--prompt", required=True, help="User message")
    run_parser.add_argument(
        "--system-prompt", default="You are a helpful AI assistant", help="System prompt"
    )
    run_parser.add_argument(
        "--image", action="append", help="Image path or URL (repeatable)"
    )
    run_parser.add_argument(
        "--tool", action="append", help="Enable a pre-registered tool by name (repeatable)"
    )
    run_parser.add_argument("--backup", help="Backup model id used if the primary fails")
    run_parser.add_argument("--json", action="store_true", help="Require a JSON response")
    run_parser.add_argument(
        "--output-json", action="store_true", help="Print the full result as JSON"
    )
    run_parser.add_argument("--temperature", type=float, default=0.7, help="Sampling temperature")
    run_parser.add_argument(
        "--max-tokens", type=int, default=12800, help="Max tokens per model call"
    )
    run_parser.add_argument("--max-iterations", type=int, default=10, help="Max agent turns")
    run_parser.add_argument(
        "--retries", type=int, default=3, help="Attempts per model call on transient errors"
    )
    run_parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    run_parser.add_argument(
        "--stream", action="store_true", help="Print progress events to stderr"
    )
    run_parser.add_argument(
        "--local", action="store_true", help="Use the offline echo provider (no API calls)"
    )
    run_parser.set_defaults(func="run")

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.func == "list-models":
        list_models()
    elif args.func == "list-tools":
        list_tools()
    elif args.func == "run":
        try:
            return run_agent(args)
        except ConfigurationError as exc:
            print(exc, file=sys.stderr)
            return 2
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
