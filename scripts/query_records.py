#!/usr/bin/env python3
"""
Run a query against a record collection and print the result as JSON.

Uso:
  python scripts/query_records.py --name contact [--data-dir ./data] \
      [--filter Name=Al*] [--sort Name,desc] [--remove-index 0 --remove-index 3]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Garante que o pacote recordstore seja importável ao rodar o script direto
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from recordstore.core.logging import configure_logging  # noqa: E402
from recordstore.domain.models import Model  # noqa: E402
from recordstore.repositories.json_storage import StorageError  # noqa: E402
from recordstore.repositories.repository import Repository  # noqa: E402


def parse_filters(values: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for item in values:
        name, sep, pattern = item.partition("=")
        if not sep or not name.strip():
            raise SystemExit(f"Filtro invalido: {item!r} (use Campo=padrao)")
        filters[name.strip()] = pattern
    return filters


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Query a JSON record collection")
    ap.add_argument("--name", required=True, help="Record type name (document is <name>s.json)")
    ap.add_argument("--data-dir", help="Directory holding the documents (default: RECORDSTORE_DATA_DIR)")
    ap.add_argument("--filter", action="append", default=[], help="Field=pattern, '*' as wildcard")
    ap.add_argument("--sort", action="append", default=[], help="field[,asc|desc]")
    ap.add_argument("--remove-index", action="append", type=int, default=[], help="Delete record at position")
    ap.add_argument("--log-level", help="Override LOG_LEVEL")
    args = ap.parse_args(argv)

    configure_logging(args.log_level)
    filters = parse_filters(args.filter)
    # filters are accepted on any field present in the stored records
    try:
        repo = Repository(Model(args.name), data_dir=args.data_dir)
        fields = sorted({name for record in repo.objects() for name in record})
        repo.model = Model(args.name, fields)
        repo.remove_by_index(args.remove_index)
        params: dict = dict(filters)
        if args.sort:
            params["sort"] = args.sort
        result = repo.get_all(params or None)
    except StorageError as exc:
        print(f"ERRO: {exc}", file=sys.stderr)
        return 1
    except IndexError as exc:
        print(f"ERRO: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
