#!/usr/bin/env python3
"""
Read a record (or query a collection) through the REST adapter and print it.

Usage:
  python scripts/read_record.py --base-url http://127.0.0.1:8080 widget 7
  python scripts/read_record.py --base-url http://127.0.0.1:8080 widget 7 --rel tags
  python scripts/read_record.py --base-url http://127.0.0.1:8080 widget --where color=red

  # print invalidation signals pushed by the server until Ctrl-C
  python scripts/read_record.py --socket-url http://127.0.0.1:8080 --watch
"""
import sys, json, asyncio, logging, argparse

from plump_rest.infra.events import SchemaRegistry, UpdateStream
from plump_rest.infra.rest_store import RestStore
from plump_rest.models import ModelReference, Schema


class _AnySchema(SchemaRegistry):
    # no schemas known on the command line: nothing is date-coerced
    def get_schema(self, type_: str) -> Schema:
        return Schema(name=type_)


def _print(obj):
    print(json.dumps(obj, indent=2, default=str))


async def run(args) -> int:
    stream = UpdateStream()
    stream.on_write(lambda s: _print({"invalidate": s.model_dump()}))
    opts = {"socket_url": args.socket_url} if args.socket_url else {}
    if args.base_url:
        opts["base_url"] = args.base_url
    if args.api_key:
        opts["api_key"] = args.api_key

    async with RestStore(_AnySchema(), stream, **opts) as store:
        if args.watch:
            await asyncio.Event().wait()
            return 0
        if args.type is None:
            print("type is required unless --watch is given", file=sys.stderr)
            return 2
        if args.id is None:
            where = dict(w.split("=", 1) for w in args.where)
            _print(await store.query(args.type, where))
            return 0
        ref = ModelReference(type=args.type, id=args.id)
        if args.rel:
            _print(await store.read_relationship(ref, args.rel))
        else:
            rec = await store.read_attributes(ref, view=args.view)
            if rec is None:
                print("not found", file=sys.stderr)
                return 1
            _print(rec)
    return 0


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("type", nargs="?")
    ap.add_argument("id", nargs="?")
    ap.add_argument("--base-url", dest="base_url", default=None)
    ap.add_argument("--socket-url", dest="socket_url", default=None)
    ap.add_argument("--api-key", dest="api_key", default=None)
    ap.add_argument("--view", default=None)
    ap.add_argument("--rel", default=None)
    ap.add_argument("--where", action="append", default=[], help="key=value query parameter")
    ap.add_argument("--watch", action="store_true")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
