import argparse
import json
from pathlib import Path

from . import __version__
from .env import Settings, load_env
from .logger import get_logger
from .normalize import clean_product_name
from .models import RawCandidate
from .resolver import aggregate
from .scoring import score_breakdown, score_candidate
from .service import resolve_barcode


def cmd_resolve(args: argparse.Namespace) -> None:
    settings = Settings.from_env()
    get_logger().configure(settings.log_level, settings.log_dir)
    outcome = resolve_barcode(args.code, settings=settings)
    if args.json:
        print(json.dumps(outcome.body, ensure_ascii=False, indent=2))
    elif outcome.ok:
        best = outcome.body["best"]
        print(f"Code: {outcome.body['code']}")
        print(f"Name: {best['name']}")
        print(f"Confidence: {best['confidence']:.2f}")
        print(f"URL: {best['url']}")
        print("Candidates:")
        for c in outcome.body["candidates"]:
            print(f" - {c['score']:7.2f}  {c['name']}")
    else:
        print(f"Error: {outcome.body.get('error')}")
    if not outcome.ok:
        raise SystemExit(1)


def _load_items(input_path: Path) -> list:
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    # Accept either a bare list or a raw Custom Search response
    if isinstance(data, dict):
        data = data.get("items") or []
    if not isinstance(data, list):
        raise SystemExit("Input must be a JSON list of {title, link, snippet} records")
    return [RawCandidate.from_item(it) for it in data if isinstance(it, dict)]


def cmd_rank(args: argparse.Namespace) -> None:
    items = _load_items(Path(args.input))
    scored = []
    for it in items:
        cleaned = clean_product_name(it.title)
        sc = score_candidate(it, cleaned)
        if sc is None:
            print(f"[skip] {it.title!r} -> empty name")
            continue
        scored.append(sc)
        parts = " ".join(f"{k}={v:g}" for k, v in score_breakdown(it, cleaned, sc.hostname).items())
        print(f"[{sc.score:7.2f}] {cleaned}  ({sc.hostname})  {parts}")

    best = aggregate(scored)
    if best is None:
        print("Cannot infer product name.")
        raise SystemExit(1)
    print()
    print(f"Best: {best.name} (confidence {best.confidence:.2f})")
    for c in best.candidates:
        print(f" - {c.final_score:7.2f}  x{c.group.count}  {c.name}")


def cmd_serve(args: argparse.Namespace) -> None:
    from .api import serve
    serve(host=args.host, port=args.port)


def main():
    # Load .env if present (GOOGLE_API_KEY, GOOGLE_CSE_ID, PORT, ...)
    load_env()
    parser = argparse.ArgumentParser(prog="medicate", description="Resolve pharmacy barcodes to product names")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    res = subparsers.add_parser("resolve", help="Resolve a barcode via Google Custom Search")
    res.add_argument("--code", required=True, help="Scanned barcode (8-14 digits)")
    res.add_argument("--json", action="store_true", help="Print the raw JSON response")
    res.set_defaults(func=cmd_resolve)

    rnk = subparsers.add_parser("rank", help="Score and rank saved search results offline")
    rnk.add_argument("--input", required=True, help="JSON file with a list of {title, link, snippet} records")
    rnk.set_defaults(func=cmd_rank)

    srv = subparsers.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    srv.add_argument("--port", type=int, help="Port (default: PORT env or 10000)")
    srv.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
