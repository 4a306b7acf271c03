"""
News Query Command Line Entry Point

Compiles a token forest exported from the query UI and prints the filter
fragment a retrieval request would carry, or the entities of one category.

Usage:
    python -m news_query.main forest.json --repository NewsWire
    python -m news_query.main - --extract Organisation < forest.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before config is imported
load_dotenv(".env")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    from news_query.models import Category, FilterMode, OperatorPriority, SearchIn

    parser = argparse.ArgumentParser(description="news query compiler")
    parser.add_argument("forest", help="JSON token forest file, or - for stdin")
    parser.add_argument("--extract", choices=[c.value for c in Category], help="Print entities of this category")
    parser.add_argument("--priority", default=OperatorPriority.BOOLEAN.value, choices=[p.value for p in OperatorPriority])
    parser.add_argument("--filter-name", default=None)
    parser.add_argument("--search-in", default=SearchIn.HEADLINE_ONLY.value, choices=[s.value for s in SearchIn])
    parser.add_argument("--mode", default=FilterMode.NORMAL.value, choices=[m.value for m in FilterMode])
    parser.add_argument("--repository", action="append", default=None, help="Repository id (repeatable)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> dict:
    """Run the pipeline for parsed arguments and return the JSON-ready result."""
    from news_query.compiler import ExpressionCompiler
    from news_query.extractor import EntityExtractor
    from news_query.models import OperatorStrategy
    from news_query.normalizer import OperatorNormalizer
    from news_query.serializer import FilterSerializer, token_to_dict, tokens_from_json

    if args.forest == "-":
        text = sys.stdin.read()
    else:
        with open(args.forest, encoding="utf-8") as f:
            text = f.read()

    forest = tokens_from_json(text)
    compiler = ExpressionCompiler()
    root = compiler.compile(
        OperatorNormalizer().normalize(forest, OperatorStrategy.SMART),
        args.priority,
    )

    if args.extract:
        entities = EntityExtractor().extract(args.extract, root)
        return {"category": args.extract, "entities": [token_to_dict(t) for t in entities]}

    fragment = FilterSerializer(compiler=compiler).build_fragment(
        root,
        args.repository or ["NewsWire"],
        filter_name=args.filter_name,
        search_in=args.search_in,
        mode=args.mode,
    )
    return {"destination": fragment.destination, "filter": fragment.markup}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    from news_query.core import NewsQueryError

    try:
        result = run(args)
    except (NewsQueryError, OSError) as e:
        logger.error(f"Query compilation failed: {e}")
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
