"""Tenant RAG runner entry point.

Operator commands against the same clients the API uses, e.g. to re-ingest
a document after a model change or to offboard a tenant by hand.

Usage:
    python -m services.tenant_rag.tenant_rag_runner ingest <tenant_id> <document_id> <file.txt>
    python -m services.tenant_rag.tenant_rag_runner search <tenant_id> "<query>" [--limit N]
    python -m services.tenant_rag.tenant_rag_runner delete-document <tenant_id> <document_id>
    python -m services.tenant_rag.tenant_rag_runner delete-tenant <tenant_id>
"""

import argparse
import asyncio
import os
import sys

from services.tenant_rag.DeletionService import DeletionService
from services.tenant_rag.IngestionService import IngestionService
from services.tenant_rag.RetrievalService import RetrievalService
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.tenant.TenantClientManager import TenantClientManager
from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.document import TenantDocument


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tenant_rag_runner")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="ingest an extracted text file")
    ingest.add_argument("tenant_id")
    ingest.add_argument("document_id")
    ingest.add_argument("path")
    ingest.add_argument("--content-type", default="txt")

    search = commands.add_parser("search", help="search a tenant's collection")
    search.add_argument("tenant_id")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)

    delete_document = commands.add_parser("delete-document", help="delete a document's vectors")
    delete_document.add_argument("tenant_id")
    delete_document.add_argument("document_id")

    delete_tenant = commands.add_parser("delete-tenant", help="delete all collections of a tenant")
    delete_tenant.add_argument("tenant_id")
    return parser.parse_args(argv)


async def main(argv: list[str]) -> int:
    """Run one command. Returns the process exit code."""
    args = _parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    vector_client = VectorClientManager(helper_config=config).get_client()
    embed_client = EmbedClientManager(helper_config=config).get_client()
    tenant_client = TenantClientManager(helper_config=config).get_client()

    try:
        await vector_client.boot()
        await embed_client.boot()
        if tenant_client:
            await tenant_client.boot()

        label_resolver = TenantLabelResolver(helper_config=config, tenant_client=tenant_client)
        index_manager = TenantIndexManager(helper_config=config, vector_client=vector_client, label_resolver=label_resolver)

        if args.command == "ingest":
            with open(args.path, encoding="utf-8") as handle:
                content = handle.read()
            service = IngestionService(config, vector_client, embed_client, index_manager)
            document = TenantDocument(
                id=args.document_id,
                filename=os.path.basename(args.path),
                content=content,
                content_type=args.content_type,
            )
            result = await service.do_ingest(args.tenant_id, document)
            if not result.success:
                logger.error("Ingestion failed at step '%s': %s", result.step, result.error)
                return 1
            logger.info("Ingested %d chunks into %s.", result.chunk_count, result.collection, color="green")

        elif args.command == "search":
            service = RetrievalService(config, vector_client, embed_client, index_manager)
            for rank, hit in enumerate(await service.do_retrieve(args.tenant_id, args.query, args.limit), start=1):
                logger.info("%d. (%.4f) %s", rank, hit.score, hit.content[:200], color="cyan")

        elif args.command == "delete-document":
            service = DeletionService(config, vector_client, index_manager, label_resolver)
            result = await service.do_delete_document(args.tenant_id, args.document_id)
            logger.info("Document %s deleted from %s.", args.document_id, result.deleted_in or "no collection")

        elif args.command == "delete-tenant":
            service = DeletionService(config, vector_client, index_manager, label_resolver)
            await service.do_delete_tenant(args.tenant_id)
        return 0
    finally:
        await vector_client.close()
        await embed_client.close()
        if tenant_client:
            await tenant_client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
