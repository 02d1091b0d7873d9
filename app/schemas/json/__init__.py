from .structured_resume import SCHEMA as STRUCTURED_RESUME_SCHEMA


class JSONSchemaFactory:
    def __init__(self):
        self._schemas = {
            "structured_resume": STRUCTURED_RESUME_SCHEMA,
        }

    def get(self, name: str) -> dict:
        try:
            return self._schemas[name]
        except KeyError:
            raise ValueError(f"Unknown JSON schema: {name}") from None


json_schema_factory = JSONSchemaFactory()

__all__ = ["json_schema_factory"]
