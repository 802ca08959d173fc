from __future__ import annotations
import random
import string
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 8


def gen_id(length: int = ID_LENGTH) -> str:
    """Short base-36 token. Collisions are possible, fine for a local archive."""
    return "".join(random.choices(_ID_ALPHABET, k=length))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    # JSON on disk uses camelCase keys; old/unknown keys are tolerated
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
