"""Command-line entry point for EcoCoach."""

import argparse
import json
import sys
from pathlib import Path

from ecocoach import __version__
from ecocoach.config.settings import Settings
from ecocoach.utils.logging import configure_logging


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ecocoach",
        description="EcoCoach: sustainability scoring and recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ecocoach categories
  python -m ecocoach assess answers.yaml --summary
  python -m ecocoach recommend answers.yaml energy_usage --documents docs.yaml
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    subparsers.add_parser(
        "categories",
        help="List scoring categories and their survey questions",
    )

    assess_parser = subparsers.add_parser(
        "assess",
        help="Score survey answers and print the resulting profile",
    )
    assess_parser.add_argument(
        "answers",
        type=Path,
        help="YAML/JSON file mapping question keys to answers",
    )
    assess_parser.add_argument(
        "--user-id",
        default=None,
        help="User id for the profile (defaults to settings)",
    )
    assess_parser.add_argument(
        "--summary",
        action="store_true",
        help="Also generate a narrative summary",
    )
    assess_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the profile JSON to this path",
    )

    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Score survey answers and resolve recommendations for a category",
    )
    recommend_parser.add_argument(
        "answers",
        type=Path,
        help="YAML/JSON file mapping question keys to answers",
    )
    recommend_parser.add_argument(
        "category",
        help="Category to recommend for (see 'categories')",
    )
    recommend_parser.add_argument(
        "--user-id",
        default=None,
        help="User id for the profile (defaults to settings)",
    )
    recommend_parser.add_argument(
        "--documents",
        type=Path,
        default=None,
        help="YAML/JSON list of knowledge documents (defaults to the Chroma store)",
    )

    resources_parser = subparsers.add_parser(
        "resources",
        help="Find learning resources for a topic",
    )
    resources_parser.add_argument("topic", help="Topic to search for")
    resources_parser.add_argument(
        "--location",
        default=None,
        help="Prefer resources relevant to this location",
    )
    resources_parser.add_argument(
        "--documents",
        type=Path,
        default=None,
        help="YAML/JSON list of resource documents (defaults to the Chroma store)",
    )

    return parser


def _build_coach(documents_path: Path | None = None):
    from ecocoach.coach.search import InMemoryKnowledgeSource
    from ecocoach.coach.service import SustainabilityCoach
    from ecocoach.scoring.answers import load_documents

    if documents_path is None:
        return SustainabilityCoach()

    source = InMemoryKnowledgeSource(load_documents(documents_path))
    return SustainabilityCoach(knowledge_source=source, resource_source=source)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug(f"EcoCoach v{__version__} running '{parsed.command}'")

    if parsed.command == "categories":
        coach = _build_coach()
        _print_json(coach.list_categories().to_dict())
        return 0

    if parsed.command in {"assess", "recommend"}:
        from ecocoach.scoring.answers import load_answers

        try:
            answers = load_answers(parsed.answers)
            coach = _build_coach(getattr(parsed, "documents", None))
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        user_id = parsed.user_id or settings.default_user_id
        created = coach.create_profile(user_id, answers)

        if parsed.command == "assess":
            payload = created.to_dict()
            if parsed.summary:
                payload["summary"] = coach.get_summary(user_id).data["summary"]
            if parsed.out is not None:
                _write_json(parsed.out, payload)
                print(f"Wrote: {parsed.out}", file=sys.stderr)
            _print_json(payload)
            return 0

        response = coach.get_recommendations(user_id, parsed.category)
        _print_json(response.to_dict())
        return 0 if response.ok else 1

    if parsed.command == "resources":
        try:
            coach = _build_coach(parsed.documents)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        _print_json(coach.get_resources(parsed.topic, parsed.location).to_dict())
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
