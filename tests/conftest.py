# tests/conftest.py
import json
import re
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from tms_orders.database import Base
from tms_orders import models  # noqa: F401  registers every table on Base.metadata
from tms_orders.services.content_api import ContentApiClient

MUTATION_PATTERN = re.compile(r"(create|update)(\w+)\((?:id: \$id, )?data: \$data\)")
QUERY_PATTERN = re.compile(r"\{ (\w+)\(filters:")


class FakeContentApi:
    """
    In-memory stand-in for the content API, served through httpx.MockTransport.

    Mutations get sequential ids and are recorded in ``calls``. Query results
    come from ``query_results[collection]`` as flat ``{id, ...attributes}``
    records. Operations named in ``fail_on`` answer with a validation error,
    and those named in ``empty_on`` return no record.
    """

    def __init__(self):
        self.calls = []
        self.query_results = {}
        self.fail_on = set()
        self.empty_on = set()
        self._next_id = 100

    def _envelope(self, record):
        attributes = {k: v for k, v in record.items() if k != "id"}
        return {"id": str(record["id"]), "attributes": attributes}

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        query, variables = body["query"], body.get("variables") or {}

        mutation = MUTATION_PATTERN.search(query)
        if mutation:
            action, type_name = mutation.groups()
            operation = f"{action}{type_name}"
            self.calls.append((operation, variables))
            if operation in self.fail_on:
                return httpx.Response(200, json={"errors": [{
                    "message": f"{operation} rejected",
                    "extensions": {"error": {"name": "ValidationError"}},
                }]})
            if operation in self.empty_on:
                return httpx.Response(200, json={"data": {operation: {"data": None}}})
            if action == "create":
                self._next_id += 1
                record_id = self._next_id
            else:
                record_id = variables["id"]
            data = variables.get("data") or {}
            attributes = {"code": data["code"]} if "code" in data else {}
            return httpx.Response(200, json={"data": {
                operation: {"data": {"id": str(record_id), "attributes": attributes}}
            }})

        collection = QUERY_PATTERN.search(query).group(1)
        self.calls.append((collection, variables))
        records = self.query_results.get(collection, [])
        if callable(records):
            records = records(variables)
        return httpx.Response(200, json={"data": {
            collection: {"data": [self._envelope(r) for r in records]}
        }})

    def operations(self, name=None):
        """Names of recorded calls, or the variables of calls named ``name``."""
        if name is None:
            return [operation for operation, _ in self.calls]
        return [variables for operation, variables in self.calls if operation == name]


@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"


@pytest.fixture
def content_api():
    return FakeContentApi()


@pytest.fixture
def content_client(content_api):
    return ContentApiClient(
        token="test-token",
        base_url="http://content.test/graphql",
        transport=httpx.MockTransport(content_api.handler)
    )


@pytest.fixture
async def db():
    # One shared in-memory connection so every session sees the same tables
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
