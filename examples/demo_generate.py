#!/usr/bin/env python3
"""Walk through generating bindings for the bundled schema.

1. Parse src/main/resources/schema.graphql
2. Show the documents a generated method sends
3. Generate the bindings package into a temporary directory

No requests are made.
"""

import tempfile
from pathlib import Path

from graphql_client_generation.config import Settings
from graphql_client_generation.core import FieldSelection, GenerationPipeline, QueryBuilder, SchemaParser

SCHEMA_FOLDER = Path(__file__).resolve().parent.parent / "src" / "main" / "resources"


def main():
    print("=== Client generation demo ===\n")

    print("1. Parsing GraphQL schema...")
    ir = SchemaParser(SCHEMA_FOLDER, "schema.graphql").parse_all()
    print(f"   Found {len(ir.queries)} queries and {len(ir.mutations)} mutations")
    print(f"   {len(ir.types)} types, {len(ir.enums)} enums, {len(ir.unions)} unions")

    print("\n2. Documents for account.updateStatus")
    builder = QueryBuilder(ir)
    op = next(op for op in ir.mutations if op.path == ["account", "updateStatus"])
    for arg in op.all_arguments:
        opt = " (optional)" if arg.type.is_optional else ""
        print(f"     - {arg.name}: {arg.graphql_type}{opt}")

    print("\n   === MINIMAL ===")
    print(builder.build(op, FieldSelection.MINIMAL))
    print("\n   === CUSTOM: id, status, owner.email ===")
    print(builder.build(op, FieldSelection.select("id", "status", "owner.email")))

    print("\n3. Generating the bindings package...")
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = Settings(schema_file_folder=str(SCHEMA_FOLDER), output_dir=tmpdir)
        result = GenerationPipeline(settings).run()
        for path in result.files:
            print(f"   {path.relative_to(tmpdir)}")

    print("\nUsage example (once the package is on the path):")
    print("""
    from com.fsi.graphql.client.generation.generated import GraphQLClient, UpdateStatusInput, AccountStatus

    async with GraphQLClient(url=API_URL, auth=BearerAuth(TOKEN)) as client:
        account = await client.mutation.account.update_status(
            tenant_id="t-1",
            id="acc-42",
            input=UpdateStatusInput(status=AccountStatus.SUSPENDED, reason="chargeback"),
        )
        print(account.status)
    """)


if __name__ == "__main__":
    main()
