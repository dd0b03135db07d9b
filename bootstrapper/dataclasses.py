from functools import partial
import pydantic.dataclasses
from pydantic import ConfigDict


config = ConfigDict(arbitrary_types_allowed=True)


dataclass = partial(pydantic.dataclasses.dataclass, config=config)

# Events are shared with every observer and never change once emitted.
event = partial(pydantic.dataclasses.dataclass, config=config, frozen=True)
