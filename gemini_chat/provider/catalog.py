"""Static catalog of selectable Gemini models."""

from gemini_chat.models.schemas import ModelInfo
from gemini_chat.provider.config import DEFAULT_MODEL

MODELS: list[ModelInfo] = [
    ModelInfo(id="gemini-2.5-flash", name="Gemini 2.5 Flash", description="Fast and efficient"),
    ModelInfo(id="gemini-2.5-pro", name="Gemini 2.5 Pro", description="Powerful and precise"),
    ModelInfo(id="gemini-2.0-flash", name="Gemini 2.0 Flash", description="Stable and reliable"),
]


class UnknownModelError(ValueError):
    """Raised when a model id is not in the catalog."""

    pass


def get_model(model_id: str) -> ModelInfo:
    """Look up a model by id.

    Args:
        model_id: Provider model identifier.

    Returns:
        The matching catalog entry.

    Raises:
        UnknownModelError: If the id is not in the catalog.
    """
    for model in MODELS:
        if model.id == model_id:
            return model
    raise UnknownModelError(f"Unknown model: {model_id}")


def default_model() -> ModelInfo:
    return get_model(DEFAULT_MODEL)
