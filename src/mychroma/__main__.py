#!/usr/bin/env python3
"""Command-line entry point for mychroma

Usage:
    python -m mychroma health
    python -m mychroma --host http://localhost --port 8000 list-databases
    python -m mychroma --database docs browse notes --page 2
    python -m mychroma --database docs search notes "vector databases" -n 10
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .config import Settings, truncate
from .core.exceptions import MyChromaError
from .embedding import create_embedding_client
from .session import AdminSession, connect
from .vector_store.health import check_health

logger = logging.getLogger("mychroma")


def setup_logging(debug: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if debug:
        logging.getLogger("mychroma").setLevel(logging.DEBUG)
        # Suppress verbose logs from third-party libraries
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Build the command line parser, with defaults taken from settings"""
    parser = argparse.ArgumentParser(
        prog="mychroma",
        description="Administer a Chroma vector database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m mychroma health
    python -m mychroma list-collections --database docs
    python -m mychroma add-document notes "Some text" --metadata '{"source": "cli"}'
    python -m mychroma search notes "what is a tenant" -n 5
        """,
    )

    parser.add_argument("--host", default=settings.chroma_host, help="Chroma host")
    parser.add_argument(
        "--port", type=int, default=settings.chroma_port, help="Chroma port"
    )
    parser.add_argument("--tenant", default=settings.chroma_tenant, help="Tenant name")
    parser.add_argument(
        "--database", default=settings.chroma_database, help="Database name"
    )
    parser.add_argument(
        "--api-key", default=settings.chroma_api_key, help="Chroma API key (optional)"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging of HTTP requests"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("health", help="Check that the server is ready")
    commands.add_parser("list-databases", help="List databases in the tenant")

    p = commands.add_parser("create-database", help="Create a database")
    p.add_argument("name")

    p = commands.add_parser("delete-database", help="Delete a database")
    p.add_argument("name")

    commands.add_parser(
        "list-collections", help="List collections with document counts"
    )

    p = commands.add_parser("create-collection", help="Create a collection")
    p.add_argument("name")
    p.add_argument("--metadata", help="Collection metadata as JSON")

    p = commands.add_parser("delete-collection", help="Delete a collection")
    p.add_argument("name")

    p = commands.add_parser("browse", help="List documents in a collection")
    p.add_argument("collection")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--page-size", type=int, default=settings.page_size)

    p = commands.add_parser("show-document", help="Show one document")
    p.add_argument("collection")
    p.add_argument("doc_id")

    p = commands.add_parser("add-document", help="Embed and add a document")
    p.add_argument("collection")
    p.add_argument("text")
    p.add_argument("--id", dest="doc_id", help="Document id (generated if omitted)")
    p.add_argument("--metadata", help="Document metadata as JSON")

    p = commands.add_parser("update-document", help="Re-embed and update a document")
    p.add_argument("collection")
    p.add_argument("doc_id")
    p.add_argument("text")
    p.add_argument("--metadata", help="Document metadata as JSON")

    p = commands.add_parser("delete-document", help="Delete a document")
    p.add_argument("collection")
    p.add_argument("doc_id")

    p = commands.add_parser("search", help="Semantic search in a collection")
    p.add_argument("collection")
    p.add_argument("query")
    p.add_argument("-n", "--results", type=int, default=5, dest="n_results")

    return parser


def _emit(value: Any) -> None:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    elif isinstance(value, list):
        value = [v.model_dump() if isinstance(v, BaseModel) else v for v in value]
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def run_command(
    args: argparse.Namespace, session: AdminSession, settings: Settings
) -> Any:
    """Run one session command and return its JSON-serialisable result"""
    db = args.database
    command = args.command

    if command == "list-databases":
        return session.list_databases()
    if command == "create-database":
        return session.create_database(args.name)
    if command == "delete-database":
        return session.delete_database(args.name)
    if command == "list-collections":
        return session.list_collections(db)
    if command == "create-collection":
        return session.create_collection(args.name, args.metadata, database=db)
    if command == "delete-collection":
        return session.delete_collection(args.name, database=db)
    if command == "browse":
        page = session.browse_collection(
            args.collection, args.page, args.page_size, database=db
        )
        return {
            "collection": page.collection,
            "total_count": page.total_count,
            "page": page.page,
            "total_pages": page.total_pages,
            "has_previous": page.has_previous,
            "has_next": page.has_next,
            "pages": page.page_window(),
            "documents": [
                {
                    "id": record.id,
                    "document": truncate(
                        record.document or "", settings.listview_doc_limit
                    ),
                    "metadata": truncate(
                        json.dumps(record.metadata, ensure_ascii=False),
                        settings.listview_metadata_limit,
                    ),
                }
                for record in page.documents
            ],
        }
    if command == "show-document":
        return session.get_document(args.collection, args.doc_id, database=db)
    if command == "add-document":
        doc_id = session.add_document(
            args.collection, args.text, args.metadata, args.doc_id, database=db
        )
        return {"id": doc_id}
    if command == "update-document":
        session.edit_document(
            args.collection, args.doc_id, args.text, args.metadata, database=db
        )
        return {"id": args.doc_id}
    if command == "delete-document":
        return session.delete_document(args.collection, args.doc_id, database=db)
    if command == "search":
        results = session.semantic_search(
            args.collection, args.query, args.n_results, database=db
        )
        return {
            "query": results.query,
            "results": [
                {**row.model_dump(), "similarity": row.similarity}
                for row in results.rows
            ],
        }
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    load_dotenv()
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)

    setup_logging(args.debug)

    if args.command == "health":
        base_url = f"{args.host.rstrip('/')}:{args.port}"
        ready = check_health(base_url, timeout=settings.health_timeout)
        _emit({"base_url": base_url, "ready": ready})
        return 0 if ready else 1

    try:
        connection = connect(
            args.host,
            args.port,
            args.tenant,
            api_key=args.api_key,
            database=args.database,
            health_timeout=settings.health_timeout,
        )
        embedder = create_embedding_client(settings.embedding_config())
        with AdminSession(connection, embedder) as session:
            _emit(run_command(args, session, settings))
    except (MyChromaError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
