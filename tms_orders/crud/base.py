from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from fastapi.encoders import jsonable_encoder
from pydantic.alias_generators import to_camel
from tms_orders.services.content_api import ContentApiClient


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CRUDBase:
    """
    Generic CRUD operations for one content API entity.

    Mutations are built from the entity name, following the API's
    ``create<Entity>(data: <Entity>Input!)`` / ``update<Entity>(id, data)``
    convention. Field names are given in snake_case and sent in camelCase.

    Every call is committed by the API on its own; there is no multi-entity
    transaction.
    """

    def __init__(
        self,
        entity: str,
        returning: Sequence[str] = (),
        collection: Optional[str] = None
    ):
        """
        Initialize CRUD object with the entity name.

        Args:
            entity: Singular entity name in camelCase, e.g. ``routePoint``
            returning: Attribute names to read back after a mutation
            collection: Plural query name, when not simply ``entity + "s"``
        """
        self.entity = entity
        self.type_name = entity[0].upper() + entity[1:]
        self.returning = tuple(returning)
        self.collection = collection or f"{entity}s"

    def _selection(self, fields: Sequence[str]) -> str:
        if not fields:
            return "data { id }"
        return "data { id attributes { %s } }" % " ".join(fields)

    def prepare(self, data: Dict[str, Any], *, drop_none: bool) -> Dict[str, Any]:
        """Convert a snake_case payload into JSON-ready camelCase variables."""
        prepared = {}
        for key, value in data.items():
            if drop_none and value is None:
                continue
            prepared[to_camel(key)] = value
        return jsonable_encoder(prepared)

    async def create(self, client: ContentApiClient, *, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a record and publish it.

        Returns:
            Normalized record with at least the ``id`` key
        """
        payload = {**data, "published_at": utc_now_iso()}
        query = (
            f"mutation ($data: {self.type_name}Input!) {{ "
            f"create{self.type_name}(data: $data) {{ {self._selection(self.returning)} }} }}"
        )
        result = await client.fetch(query, {"data": self.prepare(payload, drop_none=True)})
        return result.get(f"create{self.type_name}") or {}

    async def update(
        self,
        client: ContentApiClient,
        *,
        id: int,
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Update an existing record.

        Unlike create, explicit ``None`` values are sent so fields can be cleared.
        """
        query = (
            f"mutation ($id: ID!, $data: {self.type_name}Input!) {{ "
            f"update{self.type_name}(id: $id, data: $data) {{ {self._selection(self.returning)} }} }}"
        )
        result = await client.fetch(query, {"id": id, "data": self.prepare(data, drop_none=False)})
        return result.get(f"update{self.type_name}") or {}

    async def upsert(self, client: ContentApiClient, *, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update when ``data`` carries an id, create otherwise."""
        data = dict(data)
        record_id = data.pop("id", None)
        if record_id:
            return await self.update(client, id=record_id, data=data)
        return await self.create(client, data=data)

    async def find(
        self,
        client: ContentApiClient,
        *,
        filters: str,
        variables: Dict[str, Any],
        fields: Sequence[str] = (),
        variable_types: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Query published records of this entity.

        Args:
            client: Content API client
            filters: Filter expression placed inside ``filters: { ... }``
            variables: Query variables
            fields: Attribute selection
            variable_types: GraphQL type per variable name
        """
        declared = ", ".join(f"${name}: {type_}" for name, type_ in (variable_types or {}).items())
        header = f"query ({declared})" if declared else "query"
        query = (
            f"{header} {{ {self.collection}(filters: {{ {filters}, publishedAt: {{ ne: null }} }}, "
            f"pagination: {{ limit: -1 }}) {{ {self._selection(fields)} }} }}"
        )
        result = await client.fetch(query, variables)
        return result.get(self.collection) or []
