from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestPayload(BaseModel):
    """Base for request bodies; accepts camelCase keys from the web client as well as snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")
