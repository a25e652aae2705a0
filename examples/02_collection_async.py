"""
Example 02: Collection Requests with AsyncEngine

This example demonstrates collection requests, ad-hoc requests and
concurrent execution on the event loop.
"""

import asyncio
from graph_bind import AsyncEngine, ClientConfig, CollectionRequest, GraphQuery, ModelMapping
from graph_bind import collection_request, single_object_request
from pydantic import BaseModel


class Repo(BaseModel):
    name: str
    stars: int


class ReposRequest(CollectionRequest[Repo]):
    @property
    def query(self):
        return GraphQuery(
            "query Repos { viewer { repositories { name stars } } }", operation_name="Repos"
        )

    @property
    def mapping(self):
        return ModelMapping(Repo, key_path="viewer.repositories")


async def main():
    config = ClientConfig(transport="memory", mapping_workers=2)
    async with AsyncEngine.from_config(config) as engine:
        engine.transport.register(
            "Repos",
            {"viewer": {"repositories": [{"name": "engine", "stars": 12}, {"name": "notes", "stars": 3}]}},
        )
        engine.transport.register("Top", {"top": {"name": "engine", "stars": 12}})

        print("=== Collection Requests ===\n")

        print("1. Collection request:")
        repos = await engine.fetch(ReposRequest())
        for repo in repos:
            print(f"   - {repo.name} ({repo.stars} stars)")
        print()

        print("2. Ad-hoc requests, run concurrently:")
        top = single_object_request(
            GraphQuery("query Top { top { name stars } }", operation_name="Top"),
            ModelMapping(Repo, key_path="top"),
        )
        everything = collection_request(
            ReposRequest().query, ModelMapping(Repo, key_path="viewer.repositories")
        )
        results = await asyncio.gather(engine.send(top), engine.send(everything))
        print(f"   Top: {results[0].unwrap().name}")
        print(f"   Count: {len(results[1].unwrap())}\n")


if __name__ == "__main__":
    asyncio.run(main())
