#!/usr/bin/env python3
"""List buckets and inspect one through a small Storage-style API family.

Set GCLOUD_PROJECT and ACCESS_TOKEN (e.g. from `gcloud auth print-access-token`).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

from cloudkit.common import (
    CloudClient,
    FunctionInterceptor,
    Page,
    Service,
    ServiceConfig,
    ServiceObject,
    ServiceObjectConfig,
    extend,
)

STORAGE = ServiceConfig(
    base_url="https://storage.googleapis.com/storage/v1",
    scopes=("https://www.googleapis.com/auth/devstorage.read_only",),
    project_id_required=False,
)


class Bucket(ServiceObject):
    def __init__(self, storage: Storage, name: str) -> None:
        super().__init__(
            ServiceObjectConfig(
                parent=storage,
                id=name,
                base_url="/b",
                methods={"exists": True, "get": True, "get_metadata": True},
            )
        )


class Storage(Service):
    def __init__(self, options=None) -> None:
        super().__init__(STORAGE, options)

    def bucket(self, name: str) -> Bucket:
        return Bucket(self, name)

    async def get_buckets(self, query):
        qs = {**query, "project": self.project_id}
        response = await self.request({"uri": "/b", "qs": qs})
        body = response.body or {}
        next_query = None
        if body.get("nextPageToken"):
            next_query = {**query, "pageToken": body["nextPageToken"]}
        buckets = [self.bucket(item["name"]) for item in body.get("items", [])]
        return Page(buckets, next_query, response)


extend(Storage, "get_buckets")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="List Cloud Storage buckets")
    p.add_argument("limit", nargs="?", type=int, default=10)
    p.add_argument("--debug", action="store_true")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    client = CloudClient(token_provider=lambda scopes: os.environ["ACCESS_TOKEN"])

    def user_agent(opts):
        opts.headers["User-Agent"] = "cloudkit-example/0.1"

    client.interceptors.append(FunctionInterceptor(user_agent))

    async with client.service(Storage) as storage:
        print("=" * 65)
        first = None
        async with storage.get_buckets({"maxResults": args.limit}) as buckets:
            async for bucket in buckets:
                first = first or bucket
                print(f"{bucket.id}")
        print("=" * 65)

        if first is not None:
            _, metadata = await first.get()
            print(f"Location   : {metadata.get('location')}")
            print(f"Class      : {metadata.get('storageClass')}")
            print(f"Exists     : {await first.exists()}")
            print(f"Methods    : {', '.join(first.available_methods)}")


if __name__ == "__main__":
    asyncio.run(main())
