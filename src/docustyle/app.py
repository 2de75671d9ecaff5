"""Command-line bootstrap for the DocuStyle document editor core."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TextIO, get_args, get_origin, get_type_hints

from .ai.capabilities import DocumentCapabilities, ImagePayload
from .ai.client import AIClient, ClientSettings
from .ai.credentials import CredentialManager, SettingsCredentialProvider
from .ai.orchestrator import OperationOutcome
from .errors import DocuStyleError
from .layout.models import LayoutModel
from .layout.setters import update_layout
from .services.projects import JsonFileStorage, ProjectStore
from .services.settings import Settings, SettingsStore, redact_secret
from .session import DocumentSession
from .templates import TemplateCatalog, template_catalog
from .utils import file_io
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)
_EXIT_AI_BLOCKED = 3
_EXIT_AI_FAILED = 4


def configure_logging(debug: bool = False) -> None:
    """Configure structured logging for the application."""

    log_path = logging_utils.configure(debug)
    _LOGGER.debug("Logging to %s (debug=%s)", log_path, debug)


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_session(
    settings: Settings,
    store: SettingsStore,
    *,
    client_factory: Callable[[Settings], Any] | None = None,
    prompt: Callable[[], str | None] | None = None,
    catalog: TemplateCatalog | None = None,
) -> DocumentSession:
    """Wire the AI client, credentials and project store into a session.

    Selecting a new API key rebuilds the AI client from the updated
    settings so later calls authenticate with the new key.
    """

    resolved_catalog = catalog or template_catalog
    factory = client_factory or _build_ai_client
    capabilities = DocumentCapabilities(factory(settings))

    async def _rekey(updated: Settings) -> None:
        previous = capabilities.update_client(factory(updated))
        _LOGGER.info("AI client rebuilt after API key change")
        close = getattr(previous, "aclose", None)
        if close is not None:
            await close()

    credentials = CredentialManager(
        SettingsCredentialProvider(
            settings,
            store=store,
            prompt=prompt or _prompt_for_key,
            on_settings_changed=_rekey,
        )
    )
    return DocumentSession(
        capabilities=capabilities,
        credentials=credentials,
        projects=ProjectStore(JsonFileStorage(settings.data_dir)),
        catalog=resolved_catalog,
        template=resolved_catalog.get(settings.default_template),
        default_instruction=settings.refine_instruction,
    )


def _build_ai_client(settings: Settings) -> AIClient:
    return AIClient(ClientSettings.from_settings(settings))


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `docustyle` console script."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = _env_flag("DOCUSTYLE_DEBUG", default=False) or args.debug
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("DOCUSTYLE_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)
    if settings.debug_logging and not debug:
        configure_logging(True)

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return 0
    if args.command is None:
        parser.print_help()
        return 0

    try:
        session = build_session(settings, settings_store)
        return args.handler(args, session)
    except DocuStyleError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


# ----------------------------------------------------------------------
# Command handlers
# ----------------------------------------------------------------------
def _cmd_templates(args: argparse.Namespace, session: DocumentSession) -> int:
    for template in session.catalog.available():
        metrics = template.settings.metrics
        print(f"{template.id:<14} {template.name:<26} {metrics.css_width} x {metrics.css_height}")
        print(f"{'':<14} {template.description}")
    return 0


def _cmd_new(args: argparse.Namespace, session: DocumentSession) -> int:
    session.apply_template(args.template)
    file_io.write_text(args.output, session.content)
    print(f"Created {args.output} from template '{args.template}'")
    return 0


def _cmd_layout(args: argparse.Namespace, session: DocumentSession) -> int:
    layout = _resolve_layout(args, session)
    payload = layout.to_dict()
    metrics = layout.metrics
    payload["derived"] = {"width": metrics.css_width, "height": metrics.css_height}
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def _cmd_ai(args: argparse.Namespace, session: DocumentSession) -> int:
    session.content = file_io.read_text(args.input)
    outcome = asyncio.run(_run_ai_command(args, session))
    if outcome.route_to_setup:
        print(outcome.message, file=sys.stderr)
        print("Run `docustyle configure-key` to select an API key.", file=sys.stderr)
        return _EXIT_AI_BLOCKED
    if not outcome.succeeded:
        print(outcome.message, file=sys.stderr)
        return _EXIT_AI_FAILED
    file_io.write_text(args.output or args.input, outcome.content)
    return 0


def _cmd_scan(args: argparse.Namespace, session: DocumentSession) -> int:
    target = Path(args.document)
    session.content = file_io.read_text(target) if target.exists() else ""
    image = Path(args.image)
    payload = ImagePayload(data=image.read_bytes(), mime_type=args.mime_type or _guess_mime(image))

    async def _run() -> OperationOutcome:
        await session.check_credentials()
        return await session.ai.scan_image(payload)

    outcome = asyncio.run(_run())
    if not outcome.succeeded:
        print(outcome.message, file=sys.stderr)
        return _EXIT_AI_BLOCKED if outcome.route_to_setup else _EXIT_AI_FAILED
    file_io.write_text(target, outcome.content)
    return 0


def _cmd_configure_key(args: argparse.Namespace, session: DocumentSession) -> int:
    selected = asyncio.run(session.select_credential())
    if not selected:
        print("API key selection cancelled.", file=sys.stderr)
        return 1
    print("API key saved.")
    return 0


def _cmd_projects_list(args: argparse.Namespace, session: DocumentSession) -> int:
    for project in session.projects.list():
        print(f"{project.id}  {project.name}  ({project.settings.format.value}, {project.timestamp})")
    return 0


def _cmd_projects_save(args: argparse.Namespace, session: DocumentSession) -> int:
    session.layout = _resolve_layout(args, session)
    session.content = file_io.read_text(args.input)
    project = session.save_project(args.name)
    print(project.id)
    return 0


def _cmd_projects_load(args: argparse.Namespace, session: DocumentSession) -> int:
    session.load_project(args.project_id)
    file_io.write_text(args.output, session.content)
    print(f"Loaded project {args.project_id} into {args.output}")
    return 0


def _cmd_projects_delete(args: argparse.Namespace, session: DocumentSession) -> int:
    session.delete_project(args.project_id)
    return 0


def _cmd_export(args: argparse.Namespace, session: DocumentSession) -> int:
    session.layout = _resolve_layout(args, session)
    session.content = file_io.read_text(args.input)
    artifact = session.print_document() if args.format == "print" else session.export(args.format)
    destination = artifact.write_to(args.output_dir, args.filename)
    print(f"Wrote {destination} ({artifact.mime_type})")
    return 0


async def _run_ai_command(args: argparse.Namespace, session: DocumentSession) -> OperationOutcome:
    await session.check_credentials()
    if args.command == "refine":
        return await session.refine(args.instruction)
    if args.command == "restructure":
        return await session.restructure()
    return await session.ai.summarize_footnotes()


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def _resolve_layout(args: argparse.Namespace, session: DocumentSession) -> LayoutModel:
    project_id = getattr(args, "project", None)
    template_id = getattr(args, "template", None)
    if project_id:
        layout, _ = session.projects.load(project_id)
    elif template_id:
        layout = session.catalog.get(template_id).settings
    else:
        layout = session.layout
    for entry in getattr(args, "layout", None) or []:
        if "=" not in entry:
            raise ValueError(f"Layout override '{entry}' must use FIELD=VALUE syntax.")
        key, value = entry.split("=", 1)
        layout = update_layout(layout, key.strip(), value.strip())
    return layout


def _prompt_for_key() -> str | None:
    try:
        return getpass.getpass("API key: ")
    except (EOFError, KeyboardInterrupt):
        return None


def _guess_mime(path: Path) -> str:
    suffix = path.suffix.lower()
    return {".png": "image/png", ".webp": "image/webp", ".gif": "image/gif"}.get(suffix, "image/jpeg")


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docustyle",
        description="Compose, restyle and export documents with page templates and AI helpers.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on the console.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.docustyle/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    commands = parser.add_subparsers(dest="command")

    templates = commands.add_parser("templates", help="List the predefined templates.")
    templates.set_defaults(handler=_cmd_templates)

    new = commands.add_parser("new", help="Create a document from a template's seed content.")
    new.add_argument("output")
    new.add_argument("--template", default="simple")
    new.set_defaults(handler=_cmd_new)

    layout = commands.add_parser("layout", help="Print a layout with its derived page size.")
    _add_layout_arguments(layout)
    layout.set_defaults(handler=_cmd_layout)

    for name, help_text in (
        ("refine", "Rewrite the document in a more professional tone."),
        ("restructure", "Turn raw text into structured HTML."),
        ("footnotes", "Append suggested footnotes."),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("input")
        command.add_argument("--output")
        if name == "refine":
            command.add_argument("--instruction")
        command.set_defaults(handler=_cmd_ai)

    scan = commands.add_parser("scan", help="Extract text from an image and append it to a document.")
    scan.add_argument("image")
    scan.add_argument("document")
    scan.add_argument("--mime-type")
    scan.set_defaults(handler=_cmd_scan)

    configure = commands.add_parser("configure-key", help="Select and store the API key.")
    configure.set_defaults(handler=_cmd_configure_key)

    projects = commands.add_parser("projects", help="Manage saved projects.")
    project_commands = projects.add_subparsers(dest="project_command", required=True)
    listing = project_commands.add_parser("list")
    listing.set_defaults(handler=_cmd_projects_list)
    save = project_commands.add_parser("save")
    save.add_argument("name")
    save.add_argument("input")
    _add_layout_arguments(save)
    save.set_defaults(handler=_cmd_projects_save)
    load = project_commands.add_parser("load")
    load.add_argument("project_id")
    load.add_argument("output")
    load.set_defaults(handler=_cmd_projects_load)
    delete = project_commands.add_parser("delete")
    delete.add_argument("project_id")
    delete.set_defaults(handler=_cmd_projects_delete)

    export = commands.add_parser("export", help="Export a document as txt, html, doc or print HTML.")
    export.add_argument("input")
    export.add_argument("--format", choices=("txt", "html", "doc", "print"), default="html")
    export.add_argument("--output-dir", default=".")
    export.add_argument("--filename")
    _add_layout_arguments(export)
    export.set_defaults(handler=_cmd_export)
    return parser


def _add_layout_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--template", help="Start from a template's layout.")
    source.add_argument("--project", help="Start from a saved project's layout.")
    parser.add_argument(
        "--layout",
        metavar="FIELD=VALUE",
        action="append",
        default=[],
        help="Layout override such as margins.top=35 or orientation=landscape (repeatable).",
    )


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if not items:
        return overrides

    fields = Settings.__dataclass_fields__  # type: ignore[attr-defined]
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in fields:
            raise ValueError(f"Unknown setting '{key}'.")
        annotation = type_hints.get(key, fields[key].type)
        overrides[key] = _coerce_value(annotation, raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    target = _resolve_annotation(annotation)
    normalized = raw_value.strip()

    if normalized.lower() in {"none", "null"} and target is not str:
        return None
    if target is bool:
        return _parse_bool(normalized)
    if target is int:
        return int(normalized, 10)
    if target is float:
        return float(normalized)
    return normalized


def _resolve_annotation(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is None:
        return annotation
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    return args[0] if args else origin


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    payload = asdict(settings)
    payload["api_key"] = redact_secret(payload.get("api_key") or "")
    metadata = {
        "path": str(store.path),
        "secret_backend": store.vault.strategy,
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": sorted(name for name in os.environ if name.startswith("DOCUSTYLE_")),
    }
    json.dump({"settings": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
