"""Parsing of collaborator configuration from JSON options."""

from pydantic import BaseModel, ValidationError

from snippet_harness.errors import ConfigurationError


def parse_config[ConfigT: BaseModel](config_cls: type[ConfigT], raw: str) -> ConfigT:
    """Validate a JSON document into ``config_cls``.

    Raises:
        ConfigurationError: If the document is not JSON or does not match
            the model

    """
    try:
        return config_cls.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {config_cls.__name__}: {exc}"
        ) from exc
