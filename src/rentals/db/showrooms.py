from typing import Any

from rentals.db.dynamo import batch_get
from rentals.models import Showroom


class ShowroomRepository:
    def __init__(self, dynamo_client: Any, table_name: str) -> None:
        self._client = dynamo_client
        self._table = table_name

    def get_many(self, showroom_ids: list[str]) -> dict[str, Showroom]:
        """Load showrooms by id; the stored password never reaches the model."""
        showrooms = (
            Showroom.model_validate(item) for item in batch_get(self._client, self._table, "showroomId", showroom_ids)
        )
        return {showroom.showroom_id: showroom for showroom in showrooms}
