import argparse
import logging
import sys
from pathlib import Path

from headless_cms.adapters.plugins import DirectoryPluginLoader
from headless_cms.adapters.sqlite.repos import SQLiteContentTypeRepo
from headless_cms.api.main import configure_logging, prepare_database
from headless_cms.components.content_types import PublishContentTypeInput, run_publish
from headless_cms.components.rules import RuleRegistries
from headless_cms.settings.loader import load_settings
from headless_cms.settings.models import Settings

logger = logging.getLogger("cli")


def get_settings(args: argparse.Namespace) -> Settings:
    try:
        return load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)


def build_registries(settings: Settings) -> RuleRegistries:
    sources = DirectoryPluginLoader(settings.plugins.directories).load_sources()
    return RuleRegistries.build(sources)


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    prepare_database(settings)
    print(f"Database ready at {settings.database.path}")


def handle_rules(settings: Settings, args: argparse.Namespace) -> None:
    registries = build_registries(settings)
    for registry in (registries.validation, registries.transformation):
        print(f"{registry.kind}:")
        for info in registry.describe():
            params = ", ".join(
                f"{p.name}:{p.kind}{'' if p.required else '?'}" for p in info.parameters
            )
            print(f"  {info.type} [{info.capability}] ({params})")


def handle_publish(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteContentTypeRepo(settings.database.path, build_registries(settings))
    result = run_publish(PublishContentTypeInput(name=args.name), repo=repo)
    if result.error is not None:
        logger.error("Publish failed (%s): %s", result.error.kind, result.error.message)
        sys.exit(1)
    published = result.unwrap()
    print(f"Published '{published.name}' as version {published.version}.")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from headless_cms.api.main import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Headless CMS CLI")
    parser.add_argument("--config", type=Path, default=None, help="Path to cms.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Create or upgrade the database schema")
    subparsers.add_parser("rules", help="List registered rule types, plugins included")

    publish_parser = subparsers.add_parser("publish", help="Publish the latest draft of a type")
    publish_parser.add_argument("name", help="Content type name")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    settings = get_settings(args)
    configure_logging(settings)

    handlers = {
        "migrate": handle_migrate,
        "rules": handle_rules,
        "publish": handle_publish,
        "serve": handle_serve,
    }
    handlers[args.command](settings, args)


if __name__ == "__main__":
    main()
