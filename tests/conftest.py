import pytest

import mutate

from models import Metadata, Namespace


ANNOTATION = mutate.DEFAULTS.ANNOTATION

NAMESPACES = {
    "ns1": {ANNOTATION: "disk=ssd"},
    "ns2": None,
    "ns3": {"example.com/unrelated": "value"},
    "ns4": {ANNOTATION: "foo"},
    "ns5": {ANNOTATION: "disk=ssd,zone=us-east-1a"},
}


class FakeProvider:
    def __init__(self, kubeconfig=None):
        self.lookups = []

    def get_namespace(self, name):
        self.lookups.append(name)
        return Namespace(
            metadata=Metadata(name=name, annotations=NAMESPACES[name])
        )


@pytest.fixture()
def app():
    app = mutate.create_app(
        PROVIDER=FakeProvider,
        TESTING=True,
    )
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
