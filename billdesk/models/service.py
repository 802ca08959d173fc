from __future__ import annotations
from typing import Literal

from .common import CamelModel

ServiceCategory = Literal["Digital Marketing", "Web Development", "Software Development"]


class Service(CamelModel):
    id: str
    name: str
    category: ServiceCategory = "Software Development"
    description: str = ""
    unit: str = "project"
    unit_rate: float = 0.0
