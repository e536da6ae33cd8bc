from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def _dump_yaml(payload: Any) -> str:
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise SystemExit(
            "PyYAML is required for YAML output. Install it in your backend venv (e.g., `uv add pyyaml`)."
        ) from exc

    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)


def _progress_rows(service, analysis_id: str) -> list[dict[str, Any]]:
    rows = []
    for book in service.get_segmented_rule_book_data(analysis_id):
        rows.append(
            {
                "rule_book_id": book.rule_book.id,
                "rule_book": book.rule_book.name,
                "total_rows": book.total_rows,
                "total_parameters": book.total_parameters,
                "total_completed": book.total_completed,
                "segments": [s.model_dump() for s in book.segments],
            }
        )
    return rows


def build_payload(service, args: argparse.Namespace) -> Any:
    if args.command == "progress":
        return {
            "analysis_id": args.analysis_id,
            "complete": service.is_analysis_complete(args.analysis_id),
            "rule_books": _progress_rows(service, args.analysis_id),
        }
    if args.command == "segments":
        return [ref.model_dump() for ref in service.get_ordered_segments(args.analysis_id)]
    if args.command == "next":
        ref = service.get_next_segment(args.analysis_id, args.rule_book_id, args.segment_key)
        return {"next": ref.model_dump() if ref else None, "finished": ref is None}
    if args.command == "report":
        return service.get_analysis_result_data(args.analysis_id).model_dump(mode="json")
    raise SystemExit(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    _ensure_backend_on_path()

    from common.rule_analysis.errors import RuleAnalysisError
    from pipelines.data_source import build_service
    from pipelines.settings import get_settings

    settings = get_settings()

    parser = argparse.ArgumentParser(description="Inspect the rule analysis of a project.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("progress", "Per rule book and per segment review progress."),
        ("segments", "Flat review order of all segments."),
        ("report", "Checklist and fulfillability counts for charts."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("analysis_id")

    nxt = sub.add_parser("next", help="Segment following the given one.")
    nxt.add_argument("analysis_id")
    nxt.add_argument("rule_book_id")
    nxt.add_argument("segment_key")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        payload = build_payload(build_service(settings), args)
    except (RuleAnalysisError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    if args.format == "json":
        print(_dump_json(payload))
    else:
        print(_dump_yaml(payload))


if __name__ == "__main__":
    main()
