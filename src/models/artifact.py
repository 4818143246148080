"""
Rustdoc JSON artifact models

Only the parts of the rustdoc JSON format that extract-readme reads are
modelled; every other field is ignored so that newer format versions still
validate.

Item ids are integers in current rustdoc output and strings such as
"0:0:1234" in older formats. Index keys are always JSON strings, so lookups
go through ``str(id)``.
"""

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ItemId = Union[int, str]


class Item(BaseModel):
    """One documentable item of the crate"""

    model_config = ConfigDict(extra="ignore")

    id: Optional[ItemId] = None
    name: Optional[str] = None
    docs: Optional[str] = Field(
        default=None,
        description="Raw documentation comment (markdown), absent when undocumented",
    )


class Crate(BaseModel):
    """
    A rustdoc JSON artifact

    Attributes:
        root: Id of the crate root module
        index: Every item of the crate, keyed by stringified id
        crate_version: Version of the documented crate, if known
        format_version: rustdoc JSON format version
    """

    model_config = ConfigDict(extra="ignore")

    root: ItemId
    index: Dict[str, Item]
    crate_version: Optional[str] = None
    format_version: int = 0

    def item_get(self, item_id: ItemId) -> Optional[Item]:
        """Look up an item by id, accepting either id representation"""
        return self.index.get(str(item_id))
