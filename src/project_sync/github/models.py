"""Models for GitHub Projects (v2) data used during a sync."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

STATUS_FIELD_NAME = "Status"
TODO_OPTION = "Todo"
DONE_OPTION = "Done"


class BoardItemRef(BaseModel):
    """Reference to the issue or pull request content behind a board item.

    Attributes:
        content_node_id: GraphQL node id of the issue or pull request.
    """

    model_config = ConfigDict(frozen=True)

    content_node_id: str = Field(..., min_length=1)


class StatusFieldSchema(BaseModel):
    """The board's single-select Status field and its options.

    Fetched on every status change so renamed or re-created columns are
    picked up without a redeploy.

    Attributes:
        field_id: GraphQL node id of the Status field.
        option_id_by_name: Option ids keyed by option name (case-sensitive).
    """

    model_config = ConfigDict(frozen=True)

    field_id: str
    option_id_by_name: Dict[str, str] = Field(default_factory=dict)

    def option_id(self, name: str) -> Optional[str]:
        """Return the id of the option called ``name``, or None."""
        return self.option_id_by_name.get(name)
