# =============================================================================
# src/cli/providers.py: Provider Admin CLI
# =============================================================================
#
# Manage provider records and check model resolution without running the
# HTTP server.  Every mutation goes through ProviderAdminService, so the
# same write-then-invalidate sequence as the API applies (caches are
# process-local, so from the CLI this mostly matters for consistency).
#
# Typical usage:
#   python -m src.cli list
#   python -m src.cli show openai
#   python -m src.cli save --name openai --base-url https://api.openai.com/v1 \
#       --api-key sk-... --models-file models.json
#   python -m src.cli set-key 3 sk-new-key        # omit the key to clear it
#   python -m src.cli delete 3
#   python -m src.cli resolve openai gpt-4o --category chat
#
# --json prints machine-readable output and keeps logs off stdout.
# =============================================================================

"""Admin CLI for provider records and model resolution.

Usage::

    python -m src.cli list [--json]
    python -m src.cli show NAME
    python -m src.cli save --name NAME [--id ID] [--alias A] [--base-url URL]
                           [--api-key KEY] [--models-file FILE]
    python -m src.cli set-key ID [KEY]
    python -m src.cli delete ID
    python -m src.cli resolve PROVIDER MODEL [--category CATEGORY]

Exit codes: 0 success, 1 invalid input or unresolved model, 2 store failure.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.models.provider import ModelCategory, ModelConfig, Provider, ProviderUpsert
from src.models.resolution import NotFound
from src.utils.logging import configure_logging

_MODEL_LIST = TypeAdapter(list[ModelConfig])


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _provider_to_dict(provider: Provider) -> dict[str, Any]:
    from src.api.schemas import ProviderResponse

    return ProviderResponse.from_provider(provider).model_dump(mode="json")


def _format_provider_line(provider: Provider) -> str:
    enabled = len(provider.enabled_models())
    key = "key set" if provider.has_api_key else "no key"
    return f"{provider.id:>4}  {provider.name:<20} {enabled}/{len(provider.models)} models  {key}"


def _format_provider_detail(provider: Provider) -> str:
    lines = [
        f"Provider: {provider.name} (id {provider.id})",
        f"  Alias:    {provider.alias or '-'}",
        f"  Base URL: {provider.base_url or '-'}",
        f"  API key:  {'set' if provider.has_api_key else 'not set'}",
        f"  Updated:  {provider.updated_at.isoformat()}",
        "  Models:",
    ]
    if not provider.models:
        lines.append("    (none)")
    for m in provider.models:
        state = "on " if m.enabled else "off"
        lines.append(f"    [{state}] {m.id}  ({m.category.value}, ctx {m.context_limit or '?'})")
    return "\n".join(lines)


def _configure_quiet_logging() -> None:
    """Route warnings and above to stderr so stdout carries only output."""
    configure_logging(log_level="WARNING", stream=sys.stderr, colors=False)


def _emit(payload: Any, text: str, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(text)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Dispatch one parsed command.  Returns the process exit code."""
    store = components["provider_store"]
    admin = components["admin_service"]
    resolver = components["model_resolver"]
    await store.initialize()

    if args.command == "list":
        providers = await admin.get_all_providers()
        _emit(
            [_provider_to_dict(p) for p in providers],
            "\n".join(_format_provider_line(p) for p in providers) or "No providers configured.",
            args.json,
        )
        return 0

    if args.command == "show":
        provider = await store.find_provider_by_name(args.name)
        if provider is None:
            print(f"Error: Provider not found: {args.name}", file=sys.stderr)
            return 1
        _emit(_provider_to_dict(provider), _format_provider_detail(provider), args.json)
        return 0

    if args.command == "save":
        models: list[ModelConfig] = []
        if args.models_file:
            try:
                models = _MODEL_LIST.validate_json(Path(args.models_file).read_text(encoding="utf-8"))
            except (OSError, ValidationError) as exc:
                print(f"Error: Cannot read models from {args.models_file}: {exc}", file=sys.stderr)
                return 1
        try:
            upsert = ProviderUpsert(
                id=args.id,
                name=args.name,
                alias=args.alias,
                base_url=args.base_url,
                api_key=args.api_key or None,
                models=models,
            )
        except ValidationError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        provider = await admin.save_provider(upsert)
        _emit(_provider_to_dict(provider), f"Saved provider {provider.name} (id {provider.id})", args.json)
        return 0

    if args.command == "set-key":
        provider = await admin.update_provider_api_key(args.id, args.api_key)
        state = "set" if provider.has_api_key else "cleared"
        _emit(_provider_to_dict(provider), f"API key {state} for {provider.name}", args.json)
        return 0

    if args.command == "delete":
        provider = await admin.delete_provider(args.id)
        _emit(_provider_to_dict(provider), f"Deleted provider {provider.name}", args.json)
        return 0

    if args.command == "resolve":
        category = ModelCategory(args.category)
        if category not in resolver.categories:
            print(f"Error: No resolver configured for category: {category.value}", file=sys.stderr)
            return 1
        result = await resolver.resolve(args.provider, args.model, category)
        if isinstance(result, NotFound):
            _emit(
                {"found": False, "reason": result.reason.value, "message": result.message},
                f"Not resolved ({result.reason.value}): {result.message}",
                args.json,
            )
            return 1
        _emit(
            {"found": True, "provider": _provider_to_dict(result.provider), "model": result.model.model_dump(mode="json")},
            f"Resolved {result.provider.name}:{result.model.id} "
            f"({result.model.category.value}, base URL {result.provider.base_url or '-'})",
            args.json,
        )
        return 0

    raise ValueError(f"Unknown command: {args.command}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Manage provider records and check model resolution.",
    )
    parser.add_argument("--db", help="Provider database path (overrides PROVIDER_DB_PATH).")
    parser.add_argument("--config", default="config/config.yaml", help="YAML config file.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List providers.")

    show = sub.add_parser("show", help="Show one provider by name.")
    show.add_argument("name")

    save = sub.add_parser("save", help="Create or update a provider.")
    save.add_argument("--id", type=int, default=None, help="Existing provider id (update).")
    save.add_argument("--name", required=True)
    save.add_argument("--alias", default="")
    save.add_argument("--base-url", default="")
    save.add_argument("--api-key", default=None)
    save.add_argument("--models-file", default=None, help="JSON array of model configs.")

    set_key = sub.add_parser("set-key", help="Set or clear a provider's API key.")
    set_key.add_argument("id", type=int)
    set_key.add_argument("api_key", nargs="?", default=None)

    delete = sub.add_parser("delete", help="Delete a provider.")
    delete.add_argument("id", type=int)

    resolve = sub.add_parser("resolve", help="Resolve a provider/model selection.")
    resolve.add_argument("provider")
    resolve.add_argument("model")
    resolve.add_argument(
        "--category",
        default=ModelCategory.CHAT.value,
        choices=[c.value for c in ModelCategory],
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, build components and run the command."""
    from src.config.loader import load_config
    from src.main import build_components
    from src.utils.errors import ModelResolverError, ProviderStoreError

    args = _build_parser().parse_args(argv)
    _configure_quiet_logging()

    try:
        settings = load_config(args.config)
        if args.db:
            settings = settings.model_copy(update={"provider_db_path": args.db})
        components = build_components(settings)
        return asyncio.run(_run(args, components))
    except ProviderStoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except ModelResolverError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
