"""
Example 01: Single-Object Requests

This example demonstrates a request class that maps one GraphQL node to a
dataclass, with hooks around the transport and mapping stages.
"""

from graph_bind import ClientConfig, Engine, GraphQuery, ModelMapping, ObjectRequest
from dataclasses import dataclass


@dataclass
class Viewer:
    login: str
    name: str


class ViewerRequest(ObjectRequest[Viewer]):
    @property
    def query(self):
        return GraphQuery("query Viewer { viewer { login name } }", operation_name="Viewer")

    @property
    def mapping(self):
        return ModelMapping(Viewer, key_path="viewer")

    def will_send(self):
        print("   will_send")

    def did_finish_request(self, metadata, payload):
        print(f"   did_finish_request (status {metadata.status_code})")

    def did_finish(self, result):
        print(f"   did_finish ok={result.ok}")


def main():
    # Memory transport stands in for a GraphQL service
    config = ClientConfig(transport="memory")
    with Engine.from_config(config) as engine:
        engine.transport.register("Viewer", {"viewer": {"login": "ada", "name": "Ada Lovelace"}})

        print("=== Single-Object Request ===\n")

        print("1. send with a completion callback:")
        result = engine.send(ViewerRequest(), lambda r: print(f"   completion: {r}"))
        print(f"   returned: {result}\n")

        print("2. fetch returns the mapped value:")
        viewer = engine.fetch(ViewerRequest())
        print(f"   {viewer.name} ({viewer.login})\n")

        print("3. Failures are delivered, not raised:")
        engine.transport.register("Viewer", {"viewer": {"login": "ada"}})
        result = engine.send(ViewerRequest())
        print(f"   stage={result.stage.value}: {result.error}\n")


if __name__ == "__main__":
    main()
