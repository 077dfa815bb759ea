"""
ai-scripts command line

Subcommands:
    commit          Generate a commit message for the staged changes and commit
    providers       Send one prompt to every configured provider and compare
    provider-info   Show which provider and client the configuration selects
    gemini-models   List the Gemini models visible to the configured key
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable, Coroutine, Sequence
from pathlib import Path
from typing import Any, cast

from aiscripts.core.exceptions import AIScriptsException
from aiscripts.core.logging import configure_logging, get_logger
from aiscripts.llm.factory import (
    ClientFactory,
    describe_model_source,
    get_client_factory,
    parse_provider,
)
from aiscripts.llm.gemini import (
    GENERATE_CONTENT_METHOD,
    GeminiLLMClient,
    format_model_name,
    recommended_model,
)
from aiscripts.llm.protocol import ProviderTag
from aiscripts.services.commit_message import CommitMessageService
from aiscripts.services.provider_check import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEST_PROMPT,
    configured_providers,
    format_comparison,
    format_results_table,
    run_provider_checks,
    save_report,
)
from aiscripts.utils.shell import ask_question

logger = get_logger(__name__)

PROVIDER_CHOICES = [tag.value for tag in ProviderTag]


def model_banner(factory: ClientFactory, provider: str | None, model: str | None) -> list[str]:
    """Human-readable lines naming the provider and where the model comes from."""
    config = factory.get_config()
    tag = parse_provider(provider or config.provider)
    effective_model, source = describe_model_source(config, tag, model)
    lines = [f"Using provider: {tag.value}"]
    if source == "explicit":
        lines.append(f"Using specified model: {effective_model}")
    elif source == "global":
        lines.append(f"Using global model: {effective_model}")
    elif source == "provider_default":
        lines.append(f"Using {tag.value} default model: {effective_model}")
    else:
        lines.append("No model specified. Using provider default.")
    return lines


async def run_commit(args: argparse.Namespace, factory: ClientFactory) -> int:
    template_path = Path(args.template)
    if not template_path.is_file():
        print(f"Template file not found: {template_path}", file=sys.stderr)
        return 1
    template = template_path.read_text(encoding="utf-8")

    for line in model_banner(factory, args.provider, args.model):
        print(line)

    service = CommitMessageService(factory=factory)
    print("Generating commit message...")
    message = await service.generate(template, provider=args.provider, model=args.model)

    print("\nGenerated Commit Message:\n")
    print(message)
    print()

    if not args.yes:
        action = ask_question("What would you like to do? (u)se as is, or (a)bort: ").strip().lower()
        if action not in ("u", "use"):
            print("Commit aborted.")
            return 0

    service.commit(message)
    print("Commit successful.")
    return 0


async def run_providers(args: argparse.Namespace, factory: ClientFactory) -> int:
    prompt = args.prompt or DEFAULT_TEST_PROMPT
    if args.prompt_file:
        prompt = Path(args.prompt_file).read_text(encoding="utf-8")

    if args.provider:
        providers = [parse_provider(value) for value in args.provider]
    else:
        providers = configured_providers(factory.get_config())

    if not args.quiet:
        print(f"Testing providers: {', '.join(tag.value for tag in providers)}")

    results = await run_provider_checks(factory, providers, prompt, max_tokens=args.max_tokens)

    print(format_results_table(results))
    if args.verbose:
        print(format_comparison(results))
    if not args.quiet:
        for result in results:
            if not result.success:
                print(f"{result.provider.value}: {result.error}")

    if args.results_dir:
        path = save_report(results, prompt, Path(args.results_dir))
        print(f"Results saved to {path}")
    return 0


async def run_provider_info(args: argparse.Namespace, factory: ClientFactory) -> int:
    print("Testing LLM Provider Configuration")
    print(f"Provider: {factory.get_config().provider}")

    if args.provider:
        print(f"\nOverriding provider to: {args.provider}")
        factory.update_config(provider=args.provider)
        print(f"Provider: {factory.get_config().provider}")

    for line in model_banner(factory, None, None)[1:]:
        print(line)

    client = factory.create_client()
    print(f"\nClient provider: {client.get_name()}")
    return 0


async def run_gemini_models(args: argparse.Namespace, factory: ClientFactory) -> int:
    client = cast(GeminiLLMClient, factory.create_client({"provider": ProviderTag.GEMINI}))

    print("Listing available Gemini models...")
    models = await client.list_models()

    print("\nAvailable Gemini models:")
    print("------------------------")
    for model in models:
        methods = ", ".join(model.get("supportedGenerationMethods") or [])
        print(f"- Name: {model.get('name')}")
        print(f"  Display name: {model.get('displayName')}")
        print(f"  Description: {model.get('description') or 'No description'}")
        print(f"  Supported generation methods: {methods}")
        print()

    print("Recommended model configurations:")
    print("--------------------------------")
    print("For your .env file:")
    print("```")
    print("GEMINI_API_KEY=your_api_key_here")
    print(f"GEMINI_ENDPOINT={client.options.endpoint or client.DEFAULT_ENDPOINT}")
    print(f"GEMINI_DEFAULT_MODEL={recommended_model(models)}")
    print("```")

    usable = [
        format_model_name(model.get("name"))
        for model in models
        if GENERATE_CONTENT_METHOD in (model.get("supportedGenerationMethods") or [])
    ]
    if usable:
        print(f"\nModels supporting {GENERATE_CONTENT_METHOD}: {', '.join(usable)}")
    return 0


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ai-scripts", description="LLM-backed developer scripts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    commit = subparsers.add_parser("commit", help="generate a commit message for staged changes")
    commit.add_argument("template", help="prompt template with {{CODE_DIFF}} and {{CODE_CONTEXT}}")
    commit.add_argument("--provider", choices=PROVIDER_CHOICES)
    commit.add_argument("--model")
    commit.add_argument("-y", "--yes", action="store_true", help="commit without asking")
    commit.set_defaults(handler=run_commit)

    providers = subparsers.add_parser("providers", help="compare configured providers")
    providers.add_argument("--provider", action="append", choices=PROVIDER_CHOICES)
    prompt_group = providers.add_mutually_exclusive_group()
    prompt_group.add_argument("--prompt")
    prompt_group.add_argument("--prompt-file")
    providers.add_argument("--max-tokens", type=positive_int, default=DEFAULT_MAX_TOKENS)
    output_group = providers.add_mutually_exclusive_group()
    output_group.add_argument("-v", "--verbose", action="store_true", help="print every response")
    output_group.add_argument("-q", "--quiet", action="store_true", help="print the table only")
    providers.add_argument("--results-dir", help="save a Markdown report into this directory")
    providers.set_defaults(handler=run_providers)

    info = subparsers.add_parser("provider-info", help="show the selected provider and client")
    info.add_argument("--provider", choices=PROVIDER_CHOICES)
    info.set_defaults(handler=run_provider_info)

    gemini = subparsers.add_parser("gemini-models", help="list Gemini models")
    gemini.set_defaults(handler=run_gemini_models)

    return parser


Handler = Callable[[argparse.Namespace, ClientFactory], Coroutine[Any, Any, int]]


def main(argv: Sequence[str] | None = None, *, factory: ClientFactory | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    handler: Handler = args.handler
    try:
        return asyncio.run(handler(args, factory or get_client_factory()))
    except AIScriptsException as exc:
        logger.error("command_failed", command=args.command, error=exc.message, code=exc.code)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
